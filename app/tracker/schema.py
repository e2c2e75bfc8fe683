"""Table DDL for users, sleep_logs and weight_logs.

Plain SQL accepted by both PostgreSQL and SQLite. The (user_id, log_date)
primary key is what makes log upserts atomic.
"""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

DDL = (
    "CREATE TABLE IF NOT EXISTS users ("
    " id BIGINT PRIMARY KEY,"
    " username VARCHAR(64),"
    " target_weight_kg NUMERIC(5, 1),"
    " target_sleep_hours NUMERIC(3, 1),"
    " created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP"
    ")",
    "CREATE TABLE IF NOT EXISTS sleep_logs ("
    " user_id BIGINT NOT NULL REFERENCES users (id),"
    " log_date DATE NOT NULL,"
    " sleep_start VARCHAR(5) NOT NULL,"
    " sleep_end VARCHAR(5) NOT NULL,"
    " hours NUMERIC(4, 1) NOT NULL,"
    " quality SMALLINT NOT NULL,"
    " note TEXT,"
    " updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,"
    " PRIMARY KEY (user_id, log_date)"
    ")",
    "CREATE TABLE IF NOT EXISTS weight_logs ("
    " user_id BIGINT NOT NULL REFERENCES users (id),"
    " log_date DATE NOT NULL,"
    " weight_kg NUMERIC(6, 2) NOT NULL,"
    " note TEXT,"
    " updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,"
    " PRIMARY KEY (user_id, log_date)"
    ")",
)


async def create_all(conn: AsyncConnection) -> None:
    for statement in DDL:
        await conn.execute(text(statement))
