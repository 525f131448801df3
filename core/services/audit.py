import logging

from ..models import AuditEvent

logger = logging.getLogger(__name__)


def log_event(action, entity_type, entity_id, user=None, changes=None):
    """
    Appends one AuditEvent row.
    Called inside the caller's transaction so the event commits (or rolls
    back) together with the state change it describes.
    """
    event = AuditEvent.objects.create(
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        user=user,
        changes=changes or {},
    )
    logger.info(f"audit: {action} {entity_type}:{entity_id}")
    return event
