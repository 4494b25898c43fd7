import json
import logging
from typing import Any, Dict, Optional

from ...application.ports.audit_logger import AuditAction, AuditLogger
from ...utils import hash_contact, utcnow


class StdAuditLogger(AuditLogger):
    """Writes one ``AUDIT: {json}`` line per auth event.

    Contacts are stored as a SHA-256 hash. Failed events go out at WARNING.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def log(self, action: AuditAction, contact: str, user_id: Optional[str] = None, request_id: Optional[str] = None,
            ip_address: Optional[str] = None, success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        entry = {
            "timestamp": utcnow().isoformat(),
            "action": AuditAction(action).value,
            "contact_hash": hash_contact(contact) if contact else None,
            "user_id": user_id,
            "request_id": request_id,
            "ip_address": ip_address,
            "success": success,
            "details": details or {},
        }
        level = logging.INFO if success else logging.WARNING
        self._logger.log(level, f"AUDIT: {json.dumps(entry)}")
