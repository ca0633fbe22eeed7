"""
PostgreSQL Client Wrapper

Async PostgreSQL client on top of an asyncpg connection pool.
Provides environment-driven configuration and a consistent database access pattern.

Usage:
    from core.postgres_client import PostgresClient

    # Create client instance
    db = PostgresClient("rating_service")

    # Execute queries
    async with db:
        rows = await db.query("SELECT * FROM rating.partners WHERE partner_id = $1", [partner_id])
"""

import logging
from typing import Any, Dict, List, Optional

import asyncpg

from core.config import InfraConfig

logger = logging.getLogger(__name__)


class PostgresClient:
    """
    PostgreSQL client wrapper.

    Wraps an asyncpg pool and provides:
    - Environment variable configuration (InfraConfig)
    - Lazy pool creation on first use
    - Rows returned as plain dictionaries
    """

    def __init__(
        self,
        service_name: str,
        host: Optional[str] = None,
        port: Optional[int] = None,
        database: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        config: Optional[InfraConfig] = None,
    ):
        """
        Initialize PostgreSQL client wrapper.

        Args:
            service_name: Name of the service using this client
            host: PostgreSQL host (defaults to POSTGRES_HOST)
            port: PostgreSQL port (defaults to POSTGRES_PORT)
            database: Database name (defaults to POSTGRES_DB)
            username: Database username
            password: Database password
            config: Optional infrastructure config (loaded from environment if not provided)
        """
        if config is None:
            config = InfraConfig.from_env()

        self.service_name = service_name
        self.host = host or config.postgres_host
        self.port = port or config.postgres_port
        self.database = database or config.postgres_db
        self.username = username or config.postgres_user
        self.password = password or config.postgres_password
        self.min_size = config.postgres_pool_min_size
        self.max_size = config.postgres_pool_max_size
        self.timeout = config.postgres_timeout

        self._pool: Optional[asyncpg.Pool] = None

        logger.info(f"PostgreSQL client initialized for {service_name}: {self.host}:{self.port}/{self.database}")

    async def connect(self) -> asyncpg.Pool:
        """Create the connection pool if it does not exist yet"""
        if self._pool is None:
            self._pool = await asyncpg.create_pool(
                host=self.host,
                port=self.port,
                user=self.username,
                password=self.password,
                database=self.database,
                min_size=self.min_size,
                max_size=self.max_size,
                timeout=self.timeout,
            )
        return self._pool

    async def __aenter__(self):
        """Async context manager entry"""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit (pool stays open for reuse)"""
        return None

    async def health_check(self) -> Optional[Dict]:
        """Check database health"""
        pool = await self.connect()
        async with pool.acquire() as conn:
            version = await conn.fetchval("SELECT version()")
        return {"healthy": True, "version": version}

    async def query(self, sql: str, params: Optional[List[Any]] = None) -> List[Dict[str, Any]]:
        """Execute query and return results"""
        pool = await self.connect()
        async with pool.acquire() as conn:
            rows = await conn.fetch(sql, *(params or []))
        return [dict(row) for row in rows]

    async def close(self):
        """Close connection pool"""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
