"""SQLite storage for extracted development applications."""

import logging
import sqlite3
from typing import Iterable, Optional
from dascraper.models import DevelopmentApplication

logger = logging.getLogger(__name__)

CREATE_TABLE = (
    "create table if not exists [data] ("
    "[council_reference] text primary key, [address] text, [description] text, "
    "[info_url] text, [comment_url] text, [date_scraped] text, [date_received] text, "
    "[on_notice_from] text, [on_notice_to] text)"
)
INSERT_ROW = "insert or ignore into [data] values (?, ?, ?, ?, ?, ?, ?, ?, ?)"


class RecordStore:
    """Stores applications keyed by application number.

    Inserting an application whose number is already stored leaves the
    existing row untouched.
    """

    def __init__(self, path: str = "data.sqlite"):
        """Open (and if needed create) the database.

        Args:
            path: SQLite database file, or ":memory:"
        """
        self.path = path
        self.connection: Optional[sqlite3.Connection] = sqlite3.connect(path)
        try:
            self.connection.execute(CREATE_TABLE)
        except sqlite3.Error:
            self.close()
            raise

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.connection is None:
            return
        if exc_type is None:
            self.connection.commit()
        else:
            self.connection.rollback()
        self.close()

    def insert(self, application: DevelopmentApplication) -> bool:
        """Insert an application unless its number is already stored.

        Returns:
            True if a new row was written
        """
        if self.connection is None:
            raise ValueError("Record store is closed.")
        cursor = self.connection.execute(INSERT_ROW, application.to_row() + (None, None))
        inserted = cursor.rowcount > 0
        if inserted:
            logger.info("Inserted new application \"%s\" into the database.", application.application_number)
        return inserted

    def insert_many(self, applications: Iterable[DevelopmentApplication]) -> int:
        """Insert applications, returning how many were new."""
        return sum(1 for application in applications if self.insert(application))

    def commit(self):
        if self.connection is not None:
            self.connection.commit()

    def close(self):
        if self.connection is not None:
            self.connection.close()
            self.connection = None

    def count(self) -> int:
        """Number of stored applications."""
        if self.connection is None:
            raise ValueError("Record store is closed.")
        return self.connection.execute("select count(*) from [data]").fetchone()[0]
