"""
Ядро консоли деканата: конвейер таблиц, проверка доступа, правила форм,
клиент REST-бэкенда и журнал действий.
"""
