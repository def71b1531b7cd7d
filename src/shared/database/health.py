from __future__ import annotations

import time
from typing import Any, Dict

from src.shared.database.engine import Database
from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


class DatabaseHealthCheck:
    def __init__(self, database: Database) -> None:
        self._database = database

    async def check_connection(self) -> Dict[str, Any]:
        t0 = time.perf_counter()
        try:
            await self._database.ping()
        except Exception as e:
            logger.error("database_health_check_failed", error=str(e))
            return {"healthy": False, "error": type(e).__name__}

        payload: Dict[str, Any] = {
            "healthy": True,
            "backend": self._database.engine.dialect.name,
            "select_1_ms": int((time.perf_counter() - t0) * 1000),
        }
        pool = self._database.engine.pool
        for name in ("size", "checkedin", "checkedout", "overflow"):
            if hasattr(pool, name):
                payload[name if name != "size" else "pool_size"] = getattr(pool, name)()
        return payload
