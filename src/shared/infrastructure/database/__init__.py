"""
Shared Database Infrastructure
Declarative base and unit of work
"""
from src.shared.infrastructure.database.base_model import Base, as_utc, utcnow
from src.shared.infrastructure.database.sqlalchemy_unit_of_work import SQLAlchemyUnitOfWork

__all__ = [
    "Base",
    "as_utc",
    "utcnow",
    "SQLAlchemyUnitOfWork",
]
