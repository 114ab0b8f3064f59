"""SQLite schema for the local rate store.

One table, named after the configured table name, holding the same items the
DynamoDB backend stores: primary key (Key, SortKey), item body as JSON.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"


def quote_identifier(name: str) -> str:
    if not name or "\x00" in name:
        raise ValueError(f"invalid table name {name!r}")
    return '"' + name.replace('"', '""') + '"'


def items_ddl(table_name: str) -> str:
    return f"""
CREATE TABLE IF NOT EXISTS {quote_identifier(table_name)} (
    key TEXT NOT NULL,
    sort_key TEXT NOT NULL,
    item TEXT NOT NULL, -- JSON document
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    PRIMARY KEY (key, sort_key)
);
"""


def init_db(path: Path, table_name: str) -> None:
    """Create the items table idempotently.

    Parameters
    ----------
    path: Path to SQLite database file (parent directories are created).
    table_name: Table holding the rate items.
    """
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    try:
        conn.execute(items_ddl(table_name))
        conn.commit()
    finally:
        conn.close()
