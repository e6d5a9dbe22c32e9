# ==============================================
# TOPIC 4: STORAGE (Sources + Sinks)
# ==============================================
#
# This package handles everything outside the engine:
# where debt records come from and where assignments go.
#
# A SOURCE is any iterable of DebtRecord / dict rows.
# A SINK is any object with write_batch(records) -> int.
#
# Modules:
# --------
# - mysql_client.py    → MySQL source (debtors JOIN debts) and strategy-table sink
# - mongo_client.py    → MongoDB sink
# - http_source.py     → Paged HTTP JSON source
# - memory.py          → In-memory sink
# - record_router.py   → Fans a batch out to several sinks
#
# ==============================================

from .mysql_client import MySQLClient
from .mongo_client import MongoClient
from .http_source import DebtApiSource
from .memory import InMemorySink
from .record_router import RecordRouter, RouteResult

__all__ = [
    "MySQLClient",
    "MongoClient",
    "DebtApiSource",
    "InMemorySink",
    "RecordRouter",
    "RouteResult"
]
