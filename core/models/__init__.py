from .audit_event import AuditEvent
