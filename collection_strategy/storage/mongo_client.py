# ==============================================
# MongoClient
# ==============================================
#
# PURPOSE:
#   Manages the MongoDB connection used as a strategy sink.
#   Each classified record becomes one document, upserted on
#   (debtor_id, debt_id) so re-running a day is idempotent.
#
# CLASS: MongoClient
# ------------------
#   Stateful — holds connection to MongoDB.
#
#   Constructor:
#   ------------
#   - __init__(host, port, database, user=None, password=None,
#              collection="collection_strategies")
#
#   Methods:
#   --------
#   - connect() -> None
#   - disconnect() -> None
#
#   - ensure_indexes() -> None
#       Unique compound index on (debtor_id, debt_id);
#       plain indexes on collection_strategy and assignment_timestamp.
#
#   - write_batch(records: list[ClassifiedRecord]) -> int
#       Bulk upsert. Amounts stored as Decimal128 (no float drift).
#       Raises on failure.
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MongoClient(...) as db:` usage.
#
# ==============================================

from decimal import Decimal
from typing import Sequence

import pymongo
from bson.decimal128 import Decimal128
from pymongo import MongoClient as PyMongoClient, UpdateOne
from pymongo.errors import ConnectionFailure, OperationFailure

from collection_strategy.classification.decision import ClassifiedRecord


class MongoClient:
    name = "mongo"

    def __init__(self, host, port, database, user=None, password=None, collection="collection_strategies"):
        # Store connection params. Don't connect yet.
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.collection_name = collection
        self.client = None  # Will hold the actual MongoDB client connection
        self._indexes_ready = False

    def connect(self):
        # Establish connection to MongoDB.
        if self.client is not None:
            return
        try:
            if self.user and self.password:
                uri = f"mongodb://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"
            else:
                uri = f"mongodb://{self.host}:{self.port}/{self.database}"
            self.client = PyMongoClient(uri)
            # Test connection
            self.client.admin.command('ping')
            print("Connected to MongoDB successfully.")
        except ConnectionFailure as e:
            print(f"Could not connect to MongoDB: {e}")
            self.client = None
            raise
        except OperationFailure as e:
            print(f"Authentication failed: {e}")
            self.client = None
            raise

    def disconnect(self):
        # Close connection.
        if self.client:
            self.client.close()
            print("Disconnected from MongoDB.")
            self.client = None
            self._indexes_ready = False

    def _collection(self):
        if not self.client:
            raise RuntimeError("Not connected to MongoDB.")
        return self.client[self.database][self.collection_name]

    def ensure_indexes(self):
        # Upsert key + the two fields reports filter on
        collection = self._collection()
        if self._indexes_ready:
            return
        collection.create_index(
            [("debtor_id", pymongo.ASCENDING), ("debt_id", pymongo.ASCENDING)],
            unique=True,
            name="debt_key",
        )
        collection.create_index("collection_strategy", unique=False)
        collection.create_index("assignment_timestamp", unique=False)
        self._indexes_ready = True

    def write_batch(self, records: Sequence[ClassifiedRecord]) -> int:
        # Upsert classified records. Return count processed.
        if not records:
            return 0
        self.ensure_indexes()
        collection = self._collection()

        operations = []
        for record in records:
            doc = self._to_document(record)
            operations.append(UpdateOne(
                {"debtor_id": doc["debtor_id"], "debt_id": doc["debt_id"]},  # Filter by the debt key
                {"$set": doc},                                                # Replace all fields
                upsert=True                                                    # Insert if doesn't exist
            ))

        result = collection.bulk_write(operations, ordered=True)
        return result.upserted_count + result.matched_count

    @staticmethod
    def _to_document(record: ClassifiedRecord) -> dict:
        doc = record.to_dict()
        if isinstance(doc["current_amount"], Decimal):
            doc["current_amount"] = Decimal128(doc["current_amount"])
        return doc

    def __enter__(self):
        # For `with MongoClient(...) as db:` usage.
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
