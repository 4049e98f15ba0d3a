"""
SQLite data provider.

Reads the three-table layout used by the MMM application database::

    channels(id, name, description)
    weekly_spend(id, channel_id, week_start, spend)
    weekly_metrics(id, week_start, revenue, conversions)

Every read opens its own connection and closes it again, so independent
engine calls never share a handle.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Sequence

import pandas as pd
from loguru import logger

from mmm_attribution.connectors.base import DataProvider
from mmm_attribution.connectors.schemas import (
    ChannelSchema,
    OutcomeSchema,
    SpendSchema,
    validate_frame,
)
from mmm_attribution.core.contracts import Channel, OutcomeRecord, SpendRecord
from mmm_attribution.core.exceptions import ConnectorError

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS channels (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    description TEXT
);

CREATE TABLE IF NOT EXISTS weekly_spend (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    channel_id INTEGER NOT NULL,
    week_start TEXT NOT NULL,
    spend REAL NOT NULL,
    FOREIGN KEY (channel_id) REFERENCES channels(id)
);

CREATE TABLE IF NOT EXISTS weekly_metrics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    week_start TEXT NOT NULL,
    revenue REAL NOT NULL,
    conversions INTEGER NOT NULL
);
"""


class SQLiteProvider(DataProvider):
    """Provider over a SQLite database file."""

    def __init__(self, database: str | Path):
        self.database = Path(database)

    # ------------------------------------------------------------------
    # Connection handling
    # ------------------------------------------------------------------

    def connect(self, create: bool = False) -> sqlite3.Connection:
        if not create and not self.database.exists():
            raise ConnectorError(
                f"Database not found: {self.database}. Run `mmm-attribution seed` first.",
                source=str(self.database),
            )
        try:
            conn = sqlite3.connect(str(self.database))
            conn.execute("PRAGMA foreign_keys = ON")
            return conn
        except sqlite3.Error as e:
            raise ConnectorError(
                f"Failed to connect to SQLite: {e}", source=str(self.database)
            ) from e

    def _query(self, sql: str, params: Sequence[Any] = ()) -> pd.DataFrame:
        conn = self.connect()
        try:
            logger.debug(f"Executing query: {' '.join(sql.split())[:100]}...")
            return pd.read_sql(sql, conn, params=list(params))
        except Exception as e:
            raise ConnectorError(
                f"Query failed on {self.database}: {e}", source=str(self.database)
            ) from e
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # DataProvider interface
    # ------------------------------------------------------------------

    def list_channels(self) -> list[Channel]:
        df = self._query("SELECT id, name, description FROM channels ORDER BY id")
        df = validate_frame(ChannelSchema, df, "channels table")
        return [
            Channel(
                id=int(row.id),
                name=row.name,
                description=None if pd.isna(row.description) else row.description,
            )
            for row in df.itertuples(index=False)
        ]

    def list_spend(
        self,
        start: str | None = None,
        end: str | None = None,
        channel: str | None = None,
    ) -> list[SpendRecord]:
        sql = """
            SELECT ws.week_start AS period, c.name AS channel, ws.spend AS spend
            FROM weekly_spend ws
            JOIN channels c ON ws.channel_id = c.id
            WHERE 1=1
        """
        params: list[Any] = []
        if start is not None:
            sql += " AND ws.week_start >= ?"
            params.append(start)
        if end is not None:
            sql += " AND ws.week_start <= ?"
            params.append(end)
        if channel is not None:
            sql += " AND c.name = ?"
            params.append(channel)
        sql += " ORDER BY ws.week_start, c.id"

        df = validate_frame(SpendSchema, self._query(sql, params), "weekly_spend table")
        logger.info(f"Loaded {len(df)} spend rows from {self.database}")
        return [
            SpendRecord(period=row.period, channel=row.channel, spend=float(row.spend))
            for row in df.itertuples(index=False)
        ]

    def list_outcomes(
        self,
        start: str | None = None,
        end: str | None = None,
    ) -> list[OutcomeRecord]:
        sql = (
            "SELECT week_start AS period, revenue, conversions "
            "FROM weekly_metrics WHERE 1=1"
        )
        params: list[Any] = []
        if start is not None:
            sql += " AND week_start >= ?"
            params.append(start)
        if end is not None:
            sql += " AND week_start <= ?"
            params.append(end)
        sql += " ORDER BY week_start"

        df = validate_frame(OutcomeSchema, self._query(sql, params), "weekly_metrics table")
        logger.info(f"Loaded {len(df)} outcome rows from {self.database}")
        return [
            OutcomeRecord(
                period=row.period,
                revenue=float(row.revenue),
                conversions=float(row.conversions),
            )
            for row in df.itertuples(index=False)
        ]

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def create_schema(self) -> None:
        """Create the three tables if they do not exist yet."""
        self.database.parent.mkdir(parents=True, exist_ok=True)
        conn = self.connect(create=True)
        try:
            conn.executescript(SCHEMA_SQL)
            conn.commit()
        finally:
            conn.close()

    def write(
        self,
        channels: Sequence[Channel],
        spend: Sequence[SpendRecord],
        outcomes: Sequence[OutcomeRecord],
    ) -> None:
        """
        Insert channels, spend and outcomes in a single transaction.

        Conversions are stored as whole counts, matching the table type.
        """
        self.create_schema()
        ids = {c.name: c.id for c in channels}
        missing = sorted({r.channel for r in spend} - set(ids))
        if missing:
            raise ConnectorError(
                f"Spend references unknown channels: {', '.join(missing)}",
                source=str(self.database),
            )

        conn = self.connect()
        try:
            with conn:
                conn.executemany(
                    "INSERT INTO channels (id, name, description) VALUES (?, ?, ?)",
                    [(c.id, c.name, c.description) for c in channels],
                )
                conn.executemany(
                    "INSERT INTO weekly_spend (channel_id, week_start, spend) VALUES (?, ?, ?)",
                    [(ids[r.channel], r.period, r.spend) for r in spend],
                )
                conn.executemany(
                    "INSERT INTO weekly_metrics (week_start, revenue, conversions) "
                    "VALUES (?, ?, ?)",
                    [(r.period, r.revenue, int(round(r.conversions))) for r in outcomes],
                )
        except sqlite3.Error as e:
            raise ConnectorError(
                f"Failed to write to {self.database}: {e}", source=str(self.database)
            ) from e
        finally:
            conn.close()

        logger.info(
            f"Wrote {len(channels)} channels, {len(spend)} spend rows and "
            f"{len(outcomes)} outcome rows to {self.database}"
        )
