"""Shared fixtures: in-memory stand-ins for the two PostgreSQL stores."""
import threading
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import psycopg2
import pytest

from banking_chatbot.storage.database import ConnectionManager, StorePool


ACCOUNT_ID = "1011226111"


class NullPool:
    def closeall(self):
        pass


class FakeStore(StorePool):
    """StorePool that serves canned rows instead of talking to PostgreSQL.

    With a ``stall`` event every ping and query blocks until the event is set,
    like a server that accepts connections but never answers.
    """

    def __init__(
        self,
        name: str,
        rows: Optional[List[Dict[str, Any]]] = None,
        error: Optional[Exception] = None,
        down: bool = False,
        ping_failures: int = 0,
        ping_delay: float = 0.0,
        stall: Optional[threading.Event] = None,
        workers: int = 4,
    ):
        super().__init__(name, pool=NullPool(), host="db.test", database=f"{name}-db", maxconn=workers)
        self.rows = rows or []
        self.error = error
        self.down = down
        self.ping_failures = ping_failures
        self.ping_delay = ping_delay
        self.ping_calls = 0
        self.queries = []
        self.stall = stall
        self.close_calls = 0

    def _wait_if_stalled(self) -> None:
        if self.stall is not None:
            self.stall.wait()

    def ping(self) -> None:
        self.ping_calls += 1
        self._wait_if_stalled()
        if self.ping_delay:
            time.sleep(self.ping_delay)
        if self.down or self.ping_calls <= self.ping_failures:
            raise psycopg2.OperationalError("could not connect to server: Connection refused")

    def fetch_all(self, query: str, params=()) -> List[Dict[str, Any]]:
        self.queries.append((query, tuple(params)))
        self._wait_if_stalled()
        if self.error is not None:
            raise self.error
        return [dict(row) for row in self.rows]

    def version(self) -> str:
        if self.down:
            raise psycopg2.OperationalError("could not connect to server: Connection refused")
        return "PostgreSQL 15.4"

    def close(self) -> bool:
        self.close_calls += 1
        return super().close()


def make_manager(ledger: FakeStore, accounts: FakeStore, **kwargs) -> ConnectionManager:
    options = {"max_retries": 3, "retry_delay": 0.0, "timeout": 1.0}
    options.update(kwargs)
    return ConnectionManager(ledger, accounts, **options)


@pytest.fixture
def ledger_rows():
    """Ledger rows for ACCOUNT_ID, most recent first as the ledger query returns them."""
    return [
        {
            "timestamp": datetime(2024, 3, 5, 14, 30, tzinfo=timezone.utc),
            "amount": 2500,
            "from_acct": ACCOUNT_ID,
            "to_acct": "9099791699",
        },
        {
            "timestamp": datetime(2024, 2, 20, 9, 0, tzinfo=timezone.utc),
            "amount": "10000",
            "from_acct": "3456789012",
            "to_acct": ACCOUNT_ID,
        },
        {
            "timestamp": datetime(2024, 2, 1, 23, 59, 59, tzinfo=timezone.utc),
            "amount": 1250.5,
            "from_acct": ACCOUNT_ID,
            "to_acct": "9099791699",
        },
        {
            "timestamp": datetime(2024, 1, 15, 0, 0, tzinfo=timezone.utc),
            "amount": None,
            "from_acct": "3456789012",
            "to_acct": ACCOUNT_ID,
        },
        {
            "timestamp": datetime(2024, 1, 2, 8, 15, tzinfo=timezone.utc),
            "amount": 400,
            "from_acct": "7777123456",
            "to_acct": ACCOUNT_ID,
        },
    ]


@pytest.fixture
def owner_rows():
    return [{"firstname": "Testuser", "lastname": "Alpha"}]


@pytest.fixture
def ledger(ledger_rows):
    return FakeStore("ledger", rows=ledger_rows)


@pytest.fixture
def accounts(owner_rows):
    return FakeStore("accounts", rows=owner_rows)


@pytest.fixture
def manager(ledger, accounts):
    return make_manager(ledger, accounts)
