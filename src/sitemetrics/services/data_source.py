"""Read-only access to the wiki database for statistic queries."""

import logging
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any, Protocol

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

logger = logging.getLogger(__name__)


class SqlDialect(str, Enum):
    """The two SQL text variants every statistic ships with."""

    # MySQL, MariaDB and SQLite all take the DATE_FORMAT variant
    MYSQL = "mysql"
    POSTGRES = "postgres"


class DataSourceFailure(Exception):
    """Raised when a statistic query cannot be executed."""


class DataSource(Protocol):
    """What the report pipeline needs from the wiki database."""

    async def execute(self, sql: str) -> Sequence[Mapping[str, Any]]: ...

    async def table_exists(self, name: str) -> bool: ...

    def dialect(self) -> SqlDialect: ...


class SqlDataSource:
    """DataSource backed by a SQLAlchemy async connection to the replica."""

    def __init__(self, conn: AsyncConnection):
        self.conn = conn

    def dialect(self) -> SqlDialect:
        if self.conn.dialect.name == "postgresql":
            return SqlDialect.POSTGRES
        return SqlDialect.MYSQL

    async def execute(self, sql: str) -> list[Mapping[str, Any]]:
        """Run a literal SQL statement and return its rows in query order."""
        try:
            result = await self.conn.execute(text(sql))
            return list(result.mappings().all())
        except SQLAlchemyError as e:
            raise DataSourceFailure(f"Statistic query failed: {e}") from e

    async def table_exists(self, name: str) -> bool:
        try:
            return await self.conn.run_sync(
                lambda sync_conn: inspect(sync_conn).has_table(name)
            )
        except SQLAlchemyError as e:
            raise DataSourceFailure(f"Could not check for table {name}: {e}") from e


class QueryRunner:
    """Executes a statistic's month and day queries against a data source."""

    def __init__(self, data_source: DataSource):
        self.data_source = data_source

    async def run(self, key: str, granularity: str, sql: str) -> list[Mapping[str, Any]]:
        """Execute one statistic query, returning rows newest-first."""
        rows = await self.data_source.execute(sql)
        logger.debug(f"Statistic {key!r} ({granularity}) returned {len(rows)} rows")
        return list(rows)
