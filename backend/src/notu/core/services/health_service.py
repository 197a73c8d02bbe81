"""Health service implementation."""

import time
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ... import __version__
from ..redis_client import RedisClient, get_redis_client
from ..schemas.common import HealthCheckResponse
from .interfaces import IHealthService


class HealthService(IHealthService):
    """Health check service implementation."""

    def __init__(self, session: AsyncSession, redis_client: RedisClient = None):
        self.session = session
        self.redis_client = redis_client or get_redis_client()

    async def get_health_status(self) -> HealthCheckResponse:
        """Get app health status."""
        db_health = await self.check_database_health()
        redis_health = await self.check_redis_health()

        # the API still serves requests without Redis, only logout blacklisting is lost
        if not db_health["connected"]:
            overall_status = "unhealthy"
        elif not redis_health["connected"]:
            overall_status = "degraded"
        else:
            overall_status = "healthy"

        return HealthCheckResponse(
            status=overall_status,
            timestamp=datetime.now(timezone.utc),
            version=__version__,
            checks={"database": db_health, "redis": redis_health},
        )

    async def check_database_health(self) -> Dict[str, Any]:
        """Check DB connection."""
        try:
            start_time = time.perf_counter()
            result = await self.session.execute(text("SELECT 1"))
            result.scalar()
            response_time = (time.perf_counter() - start_time) * 1000

            return {
                "connected": True,
                "status": "healthy",
                "response_time_ms": round(response_time, 2),
            }
        except Exception as e:
            return {
                "connected": False,
                "status": "unhealthy",
                "error": str(e),
                "response_time_ms": None,
            }

    async def check_redis_health(self) -> Dict[str, Any]:
        """Check Redis connection through the shared client."""
        if not self.redis_client.is_connected:
            return {
                "connected": False,
                "status": "unhealthy",
                "error": "Redis client is not connected",
                "response_time_ms": None,
            }

        try:
            start_time = time.perf_counter()
            await self.redis_client.redis.ping()
            response_time = (time.perf_counter() - start_time) * 1000

            return {
                "connected": True,
                "status": "healthy",
                "response_time_ms": round(response_time, 2),
            }
        except Exception as e:
            return {
                "connected": False,
                "status": "unhealthy",
                "error": str(e),
                "response_time_ms": None,
            }
