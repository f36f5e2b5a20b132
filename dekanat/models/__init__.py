"""
Модели базы данных
Экспортируем модели из dekanat_core.db_models для удобного импорта
"""
from dekanat_core.db_models import (
    db,
    AuditLog,
    moscow_now,
    MOSCOW_TZ,
)

__all__ = [
    'db',
    'AuditLog',
    'moscow_now',
    'MOSCOW_TZ',
]
