from flask_sqlalchemy import SQLAlchemy
from datetime import datetime
from zoneinfo import ZoneInfo
from sqlalchemy import Index
import json

db = SQLAlchemy()

MOSCOW_TZ = ZoneInfo("Europe/Moscow")

def moscow_now():
    return datetime.now(MOSCOW_TZ)

class AuditLog(db.Model):
    """Журнал действий в консоли (вход/выход, изменения сущностей, роли)"""

    __tablename__ = 'AuditLog'
    id = db.Column(db.Integer, primary_key=True)
    timestamp = db.Column(db.DateTime, default=moscow_now, nullable=False, index=True)
    user_email = db.Column(db.String(200), nullable=True, index=True)
    action = db.Column(db.String(50), nullable=False, index=True)
    entity = db.Column(db.String(50), nullable=True, index=True)
    entity_id = db.Column(db.Integer, nullable=True, index=True)
    status = db.Column(db.String(20), nullable=False, index=True)
    meta_data = db.Column(db.Text, nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)
    url = db.Column(db.Text, nullable=True)
    method = db.Column(db.String(10), nullable=True)

    __table_args__ = (
        Index('idx_audit_action_entity', 'action', 'entity'),
        Index('idx_audit_status_timestamp', 'status', 'timestamp'),
    )

    def get_metadata(self):
        if not self.meta_data:
            return {}
        try:
            return json.loads(self.meta_data)
        except (TypeError, ValueError):
            return {}

    def set_metadata(self, data):
        self.meta_data = json.dumps(data or {}, ensure_ascii=False, default=str)
