from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class AuditSink(Protocol):
    """Records who did what to which entity. Must never raise."""

    async def record(
        self,
        user_id: Optional[int],
        action: str,
        entity_type: str,
        entity_id: Optional[int] = None,
    ) -> None:
        ...
