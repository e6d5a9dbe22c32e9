# ==============================================
# Tests for Storage Adapters
# ==============================================
#
# MySQL, MongoDB and HTTP are replaced with unittest.mock fakes.
#
# ==============================================

from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from bson.decimal128 import Decimal128

from collection_strategy.classification import CollectionStrategy
from collection_strategy.normalization import DebtRecord
from collection_strategy.normalization.debt_record import (
    AMOUNT_INTEGER_DIGITS,
    AMOUNT_SCALE,
    MAX_ID_LENGTH,
    MAX_TEXT_LENGTH,
)
from collection_strategy.storage import DebtApiSource, MongoClient, MySQLClient
from collection_strategy.storage import mongo_client as mongo_module
from collection_strategy.storage import mysql_client as mysql_module


@pytest.fixture
def fake_mysql(monkeypatch):
    connection = MagicMock()
    cursor = connection.cursor.return_value
    monkeypatch.setattr(mysql_module.pymysql, "connect", MagicMock(return_value=connection))
    return connection, cursor


@pytest.fixture
def mysql_client(fake_mysql):
    client = MySQLClient("localhost", 3306, "root", "root", "collections")
    client.connect()
    return client


class TestMySQLClient:
    def test_connect_creates_database_once(self, fake_mysql):
        connection, cursor = fake_mysql
        client = MySQLClient("localhost", 3306, "root", "root", "collections")
        client.connect()
        client.connect()

        assert mysql_module.pymysql.connect.call_count == 1
        cursor.execute.assert_any_call("CREATE DATABASE IF NOT EXISTS collections")

    def test_requires_connection(self):
        client = MySQLClient("localhost", 3306, "root", "root", "collections")
        with pytest.raises(RuntimeError):
            client.fetch_all("SELECT 1")

    def test_iter_debt_records(self, mysql_client, fake_mysql):
        _, cursor = fake_mysql
        cursor.fetchall.return_value = [
            {"debtor_id": 1, "name": "Ana", "surname": "Rojas", "segment": "PREMIUM",
             "debt_id": 10, "days_past_due": 40, "current_amount": Decimal("500.00"),
             "status": "PAST_DUE"},
        ]

        records = list(mysql_client)

        assert records == [DebtRecord(
            debtor_id=1, name="Ana", surname="Rojas", segment="PREMIUM",
            days_past_due=40, current_amount=Decimal("500.00"), status="PAST_DUE", debt_id=10
        )]
        query = cursor.execute.call_args[0][0]
        assert "INNER JOIN debts" in query
        assert "UPPER(TRIM(de.status)) = 'PAST_DUE'" in query

    def test_write_batch_upserts_and_commits(self, mysql_client, fake_mysql, make_classified):
        connection, cursor = fake_mysql
        written = mysql_client.write_batch([make_classified(7, "PREMIUM", 90, "10.5")])

        assert written == 1
        query, rows = cursor.executemany.call_args[0]
        assert "ON DUPLICATE KEY UPDATE" in query
        assert "debtor_id = VALUES(debtor_id)" not in query
        row = rows[0]
        assert row[0] == "7"
        assert row[1] == ""  # no debt_id
        assert row[8] == "SENIOR EXECUTIVE VISIT"
        assert row[10] == datetime(2026, 1, 15, 6, 0)  # UTC, naive
        connection.commit.assert_called()

    def test_write_batch_rolls_back_and_raises(self, mysql_client, fake_mysql, make_classified):
        connection, cursor = fake_mysql
        cursor.executemany.side_effect = RuntimeError("deadlock")

        with pytest.raises(RuntimeError):
            mysql_client.write_batch([make_classified()])
        connection.rollback.assert_called_once()

    def test_strategy_table_matches_field_limits(self, mysql_client, fake_mysql, make_classified):
        """Anything the normalizer accepts fits the columns."""
        _, cursor = fake_mysql
        mysql_client.write_batch([make_classified()])

        ddl = next(
            call[0][0] for call in cursor.execute.call_args_list
            if call[0][0].startswith("CREATE TABLE")
        )
        assert f"segment VARCHAR({MAX_TEXT_LENGTH})" in ddl
        assert f"debtor_id VARCHAR({MAX_ID_LENGTH})" in ddl
        assert f"executor VARCHAR({MAX_TEXT_LENGTH})" in ddl
        assert f"current_amount DECIMAL({AMOUNT_INTEGER_DIGITS + AMOUNT_SCALE}, {AMOUNT_SCALE})" in ddl

    def test_write_empty_batch(self, mysql_client, fake_mysql):
        _, cursor = fake_mysql
        assert mysql_client.write_batch([]) == 0
        cursor.executemany.assert_not_called()

    def test_fetch_classified(self, mysql_client, fake_mysql):
        _, cursor = fake_mysql
        cursor.fetchall.return_value = [{
            "debtor_id": "7", "debt_id": "", "name": None, "surname": None,
            "segment": "PREMIUM", "days_past_due": 90, "current_amount": Decimal("10.5000"),
            "status": "PAST_DUE", "collection_strategy": "SENIOR EXECUTIVE VISIT",
            "executor": "Account manager", "assignment_timestamp": datetime(2026, 1, 15, 6, 0),
        }]

        records = mysql_client.fetch_classified()

        assert records[0].debt_id is None
        assert records[0].collection_strategy is CollectionStrategy.SENIOR_EXECUTIVE_VISIT
        assert "ORDER BY days_past_due DESC, current_amount DESC" in cursor.execute.call_args[0][0]

    def test_disconnect(self, mysql_client, fake_mysql):
        connection, _ = fake_mysql
        mysql_client.disconnect()
        connection.close.assert_called_once()
        assert mysql_client.connection is None


@pytest.fixture
def fake_mongo(monkeypatch):
    py_client = MagicMock()
    collection = py_client.__getitem__.return_value.__getitem__.return_value
    factory = MagicMock(return_value=py_client)
    monkeypatch.setattr(mongo_module, "PyMongoClient", factory)
    return factory, collection


class TestMongoClient:
    def test_connect_builds_uri(self, fake_mongo):
        factory, _ = fake_mongo
        client = MongoClient("db", 27017, "collections", user="u", password="p")
        client.connect()
        factory.assert_called_once_with("mongodb://u:p@db:27017/collections")

    def test_write_batch_upserts(self, fake_mongo, make_classified):
        _, collection = fake_mongo
        collection.bulk_write.return_value = MagicMock(upserted_count=1, matched_count=1)

        with MongoClient("localhost", 27017, "collections") as client:
            written = client.write_batch([
                make_classified(1, "BASIC", 70, "99.95", debt_id="A"),
                make_classified(2, "BASIC", 10, "5"),
            ])

        assert written == 2
        operations = collection.bulk_write.call_args[0][0]
        document = operations[0]._doc["$set"]
        assert operations[0]._filter == {"debtor_id": 1, "debt_id": "A"}
        assert document["current_amount"] == Decimal128("99.95")
        assert document["collection_strategy"] == "LEGAL ACTION"
        index_names = [call.kwargs.get("name") for call in collection.create_index.call_args_list]
        assert "debt_key" in index_names

    def test_requires_connection(self, make_classified):
        with pytest.raises(RuntimeError):
            MongoClient("localhost", 27017, "collections").write_batch([make_classified()])


def _response(payload):
    response = MagicMock()
    response.json.return_value = payload
    return response


class TestDebtApiSource:
    def test_pages_until_short_page(self):
        session = MagicMock()
        session.get.side_effect = [
            _response([{"debtor_id": 1}, {"debtor_id": 2}]),
            _response({"records": [{"debtor_id": 3}]}),
        ]

        records = list(DebtApiSource("http://api/debts", page_size=2, session=session))

        assert [record.debtor_id for record in records] == [1, 2, 3]
        second_call = session.get.call_args_list[1]
        assert second_call.kwargs["params"] == {"offset": 2, "limit": 2}

    def test_http_error_propagates(self):
        session = MagicMock()
        session.get.return_value.raise_for_status.side_effect = RuntimeError("503")
        with pytest.raises(RuntimeError):
            list(DebtApiSource("http://api/debts", session=session))

    def test_unexpected_payload(self):
        session = MagicMock()
        session.get.return_value = _response("oops")
        with pytest.raises(ValueError):
            list(DebtApiSource("http://api/debts", session=session))
