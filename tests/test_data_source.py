"""Tests for the SQLAlchemy-backed wiki data source."""

import pytest
from sqlalchemy import text

from sitemetrics.services.data_source import (
    DataSourceFailure,
    QueryRunner,
    SqlDataSource,
    SqlDialect,
)


@pytest.fixture
async def wiki_conn(engine):
    """A connection to a throwaway wiki schema with a gift table."""
    async with engine.connect() as conn:
        await conn.execute(text("CREATE TABLE user_gift (ug_id INTEGER PRIMARY KEY, ug_date TEXT)"))
        await conn.execute(
            text(
                "INSERT INTO user_gift (ug_date) VALUES "
                "('2021-05-02'), ('2021-05-01'), ('2021-04-20')"
            )
        )
        yield conn
        await conn.rollback()


class TestSqlDataSource:
    """Tests for SqlDataSource against SQLite."""

    async def test_dialect(self, wiki_conn):
        """SQLite takes the MySQL query variant."""
        assert SqlDataSource(wiki_conn).dialect() == SqlDialect.MYSQL

    async def test_execute_returns_rows_in_order(self, wiki_conn):
        data_source = SqlDataSource(wiki_conn)

        rows = await data_source.execute(
            "SELECT COUNT(*) AS the_count, substr(ug_date, 3, 2) || ' ' || substr(ug_date, 6, 2) "
            "AS the_date FROM user_gift GROUP BY the_date ORDER BY the_date DESC"
        )

        assert [(row["the_date"], row["the_count"]) for row in rows] == [
            ("21 05", 2),
            ("21 04", 1),
        ]

    async def test_execute_failure(self, wiki_conn):
        """Database errors should surface as DataSourceFailure."""
        data_source = SqlDataSource(wiki_conn)

        with pytest.raises(DataSourceFailure):
            await data_source.execute("SELECT COUNT(*) FROM no_such_table")

    async def test_table_exists(self, wiki_conn):
        data_source = SqlDataSource(wiki_conn)

        assert await data_source.table_exists("user_gift") is True
        assert await data_source.table_exists("Vote") is False


class TestQueryRunner:
    """Tests for QueryRunner."""

    async def test_run_returns_rows(self, fake_data_source):
        runner = QueryRunner(fake_data_source)

        rows = await runner.run("Edits", "month", "SELECT ... '%y %m' ...")

        assert [row["the_date"] for row in rows] == ["21 05", "21 04", "21 03"]
        assert fake_data_source.queries == ["SELECT ... '%y %m' ..."]

    async def test_run_propagates_failure(self, data_source_factory):
        runner = QueryRunner(data_source_factory(error=DataSourceFailure("down")))

        with pytest.raises(DataSourceFailure):
            await runner.run("Edits", "day", "SELECT 1")
