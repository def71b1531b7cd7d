from .entities import AuditAction, AuditEntityType, AuditLog, AuditLogCriteria
from .sink import AuditSink

__all__ = ["AuditAction", "AuditEntityType", "AuditLog", "AuditLogCriteria", "AuditSink"]
