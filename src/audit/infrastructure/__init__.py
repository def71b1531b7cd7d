from .models import AuditLogORM
from .repository import AuditLogRepositoryImpl

__all__ = ["AuditLogORM", "AuditLogRepositoryImpl"]
