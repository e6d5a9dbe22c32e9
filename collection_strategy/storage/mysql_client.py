# ==============================================
# MySQLClient
# ==============================================
#
# PURPOSE:
#   Manages the MySQL connection on both sides of a run:
#     - SOURCE: reads debtors joined to their debts
#     - SINK:   upserts classified records into the strategy table
#
# CLASS: MySQLClient
# ------------------
#   Stateful — holds connection to MySQL.
#
#   Constructor:
#   ------------
#   - __init__(host, port, user, password, database,
#              debtors_table="debtors", debts_table="debts",
#              strategy_table="collection_strategies")
#       Store connection params. Don't connect yet.
#
#   Methods:
#   --------
#   - connect() / disconnect()
#
#   - iter_debt_records() -> Iterator[DebtRecord]
#       debtors INNER JOIN debts, only rows whose status trims and
#       upper-cases to PAST_DUE. The engine re-applies the full
#       scope filter, so this is only a pushdown.
#
#   - ensure_table() -> None
#       CREATE TABLE IF NOT EXISTS for the strategy table.
#       Primary key: (debtor_id, debt_id); debt_id '' when absent.
#
#   - write_batch(records: list[ClassifiedRecord]) -> int
#       Upsert in one transaction. Rolls back and RAISES on failure.
#
#   - fetch_classified(assignment_timestamp=None) -> list[ClassifiedRecord]
#       Reload stored assignments for reporting, sorted by
#       days_past_due DESC, current_amount DESC.
#
#   - execute(query, params=None) / fetch_all(query, params=None)
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MySQLClient(...) as db:` usage.
#
# RECOMMENDED INDEXES (source side):
#   debts(status), debts(days_past_due)
#
# ==============================================

from datetime import datetime, timezone
from typing import Any, Iterator, List, Optional, Sequence, cast

import pymysql
import pymysql.cursors

from collection_strategy.classification.decision import ClassifiedRecord
from collection_strategy.normalization.debt_record import (
    AMOUNT_INTEGER_DIGITS,
    AMOUNT_SCALE,
    MAX_ID_LENGTH,
    MAX_TEXT_LENGTH,
    DebtRecord,
)

_STRATEGY_COLUMNS = [
    "debtor_id",
    "debt_id",
    "name",
    "surname",
    "segment",
    "days_past_due",
    "current_amount",
    "status",
    "collection_strategy",
    "executor",
    "assignment_timestamp",
]


class MySQLClient:
    name = "mysql"

    def __init__(
        self,
        host,
        port,
        user,
        password,
        database,
        debtors_table="debtors",
        debts_table="debts",
        strategy_table="collection_strategies"
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.debtors_table = debtors_table
        self.debts_table = debts_table
        self.strategy_table = strategy_table
        self.connection = None
        self._table_ready = False

    def connect(self) -> None:
        # Establish connection to MySQL, create database if it doesn't exist
        if self.connection is not None:
            return
        self.connection = pymysql.connect(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
        )
        cursor = self.connection.cursor()
        cursor.execute(f"CREATE DATABASE IF NOT EXISTS {self.database}")
        cursor.execute(f"USE {self.database}")
        cursor.close()

    def disconnect(self) -> None:
        # Close connection cleanly
        if self.connection:
            self.connection.close()
            self.connection = None
            self._table_ready = False

    def iter_debt_records(self) -> Iterator[DebtRecord]:
        # Debtors with their debts, pre-filtered on status
        self._require_connection()
        query = (
            "SELECT d.debtor_id, d.name, d.surname, d.segment, "
            "de.debt_id, de.days_past_due, de.current_amount, de.status "
            f"FROM {self.debtors_table} d "
            f"INNER JOIN {self.debts_table} de ON d.debtor_id = de.debtor_id "
            "WHERE UPPER(TRIM(de.status)) = 'PAST_DUE'"
        )
        for row in self.fetch_all(query):
            yield DebtRecord.from_mapping(row)

    def __iter__(self) -> Iterator[DebtRecord]:
        return self.iter_debt_records()

    def ensure_table(self) -> None:
        # Create the strategy table if it doesn't exist
        self._require_connection()
        if self._table_ready:
            return
        create_query = (
            f"CREATE TABLE IF NOT EXISTS {self.strategy_table} ("
            f"debtor_id VARCHAR({MAX_ID_LENGTH}) NOT NULL, "
            f"debt_id VARCHAR({MAX_ID_LENGTH}) NOT NULL DEFAULT '', "
            f"name VARCHAR({MAX_TEXT_LENGTH}) NULL, "
            f"surname VARCHAR({MAX_TEXT_LENGTH}) NULL, "
            f"segment VARCHAR({MAX_TEXT_LENGTH}) NOT NULL, "
            "days_past_due INT NOT NULL, "
            f"current_amount DECIMAL({AMOUNT_INTEGER_DIGITS + AMOUNT_SCALE}, {AMOUNT_SCALE}) NOT NULL, "
            "status VARCHAR(32) NOT NULL, "
            "collection_strategy VARCHAR(32) NOT NULL, "
            f"executor VARCHAR({MAX_TEXT_LENGTH}) NOT NULL, "
            "assignment_timestamp DATETIME(6) NOT NULL, "
            "PRIMARY KEY (debtor_id, debt_id), "
            "INDEX idx_strategy (collection_strategy), "
            "INDEX idx_assigned (assignment_timestamp))"
        )
        self.execute(create_query)
        self._table_ready = True

    def write_batch(self, records: Sequence[ClassifiedRecord]) -> int:
        # Upsert classified records, return count written
        if not records:
            return 0
        self.ensure_table()

        column_names = ", ".join(_STRATEGY_COLUMNS)
        placeholders = ", ".join(["%s"] * len(_STRATEGY_COLUMNS))
        # Update everything except the primary key columns
        update_clause = ", ".join(
            f"{col} = VALUES({col})"
            for col in _STRATEGY_COLUMNS
            if col not in ("debtor_id", "debt_id")
        )
        query = (
            f"INSERT INTO {self.strategy_table} ({column_names}) "
            f"VALUES ({placeholders}) "
            f"ON DUPLICATE KEY UPDATE {update_clause}"
        )
        rows = [self._to_row(record) for record in records]

        cursor = self.connection.cursor()
        try:
            cursor.executemany(query, rows)
            self.connection.commit()
        except Exception:
            self.connection.rollback()
            raise
        finally:
            cursor.close()
        return len(rows)

    def fetch_classified(
        self,
        assignment_timestamp: Optional[datetime] = None
    ) -> List[ClassifiedRecord]:
        # Stored assignments, optionally for a single run
        self.ensure_table()
        query = f"SELECT {', '.join(_STRATEGY_COLUMNS)} FROM {self.strategy_table}"
        params = None
        if assignment_timestamp is not None:
            query += " WHERE assignment_timestamp = %s"
            params = (self._to_db_timestamp(assignment_timestamp),)
        query += " ORDER BY days_past_due DESC, current_amount DESC"

        records = []
        for row in self.fetch_all(query, params):
            if row.get("debt_id") == "":
                row["debt_id"] = None
            records.append(ClassifiedRecord.from_dict(row))
        return records

    def execute(self, query: str, params: tuple | None = None) -> None:
        # Execute a raw SQL query
        self._require_connection()
        cursor = self.connection.cursor()
        try:
            if params:
                cursor.execute(query, params)
            else:
                cursor.execute(query)
            self.connection.commit()
        finally:
            cursor.close()

    def fetch_all(self, query: str, params: tuple | None = None) -> list[dict]:
        # Execute SELECT and return rows as dicts
        self._require_connection()
        cursor = self.connection.cursor(pymysql.cursors.DictCursor)
        try:
            if params is not None:
                cursor.execute(query, params)
            else:
                cursor.execute(query)
            return cast(list[dict[str, Any]], list(cursor.fetchall()))
        finally:
            cursor.close()

    def _require_connection(self) -> None:
        if self.connection is None:
            raise RuntimeError("Not connected to MySQL")

    def _to_row(self, record: ClassifiedRecord) -> tuple:
        row = record.to_dict()
        row["debtor_id"] = str(row["debtor_id"])
        row["debt_id"] = "" if row["debt_id"] is None else str(row["debt_id"])
        row["assignment_timestamp"] = self._to_db_timestamp(row["assignment_timestamp"])
        return tuple(row[col] for col in _STRATEGY_COLUMNS)

    @staticmethod
    def _to_db_timestamp(value: datetime) -> datetime:
        # DATETIME has no zone: store UTC wall time
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
