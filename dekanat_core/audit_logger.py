import logging
from typing import Optional, Dict, Any
from flask import request, session, has_request_context
from sqlalchemy.exc import SQLAlchemyError

from .db_models import db, AuditLog, moscow_now

logger = logging.getLogger(__name__)

class AuditLogger:
    """
    Запись действий пользователей консоли в таблицу AuditLog.

    Пишет синхронно в рамках запроса; ошибка записи журнала не должна ломать
    само действие, поэтому она только логируется.
    """

    def __init__(self, app=None):

        self.app = app

        if app:
            self.init_app(app)

    def init_app(self, app):

        self.app = app
        app.extensions['audit_logger'] = self

    def _write_log(self, log_data: Dict[str, Any]):

        try:
            audit_log = AuditLog()
            audit_log.timestamp = log_data.get('timestamp', moscow_now())
            audit_log.user_email = log_data.get('user_email')
            audit_log.action = log_data.get('action', 'unknown')
            audit_log.entity = log_data.get('entity')
            audit_log.entity_id = log_data.get('entity_id')
            audit_log.status = log_data.get('status', 'info')
            audit_log.set_metadata(log_data.get('metadata', {}))
            audit_log.ip_address = log_data.get('ip_address')
            audit_log.url = log_data.get('url')
            audit_log.method = log_data.get('method')

            db.session.add(audit_log)
            db.session.commit()
            logger.debug(f"Audit log written: {audit_log.action} by {audit_log.user_email or 'anonymous'}")
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Database error writing audit log: {e}", exc_info=True)

    def _get_user_email(self) -> Optional[str]:
        identity = session.get('identity') or {}
        return identity.get('email')

    def _get_request_info(self) -> Dict[str, Any]:

        return {
            'ip_address': request.remote_addr,
            'url': request.url,
            'method': request.method,
        }

    def log(self, action: str, entity: Optional[str] = None, entity_id: Optional[int] = None,
            status: str = 'success', metadata: Optional[Dict[str, Any]] = None,
            user_email: Optional[str] = None):

        if not has_request_context():
            logger.debug(f"Skipping audit log for action '{action}': no request context")
            return

        request_info = self._get_request_info()
        self._write_log({
            'timestamp': moscow_now(),
            'user_email': user_email or self._get_user_email(),
            'action': action,
            'entity': entity,
            'entity_id': entity_id,
            'status': status,
            'metadata': metadata or {},
            **request_info,
        })

    def log_error(self, action: str, entity: Optional[str] = None, error: Optional[str] = None,
                  entity_id: Optional[int] = None, metadata: Optional[Dict[str, Any]] = None):

        error_metadata = metadata or {}
        if error:
            error_metadata['error'] = error

        self.log(
            action=action,
            entity=entity,
            entity_id=entity_id,
            status='error',
            metadata=error_metadata
        )

    def recent(self, limit: int = 50):
        return AuditLog.query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()

audit_logger = AuditLogger()
