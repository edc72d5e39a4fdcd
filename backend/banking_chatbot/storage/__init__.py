from .database import ACCOUNTS, LEDGER, ConnectionManager, StorePool

__all__ = ["ACCOUNTS", "LEDGER", "ConnectionManager", "StorePool"]
