from privlearn.models.audit import LearningEvent, LearningEventType
from privlearn.models.security_audit import SecurityAuditEvent

__all__ = [
    "LearningEvent",
    "LearningEventType",
    "SecurityAuditEvent",
]
