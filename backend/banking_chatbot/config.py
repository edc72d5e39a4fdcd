"""Configuration settings for the application."""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=(),
    )

    app_name: str = "Banking Chatbot API"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8008

    # Ledger store (transactions)
    ledger_db_host: str = ""
    ledger_db_port: int = 5432
    ledger_db_name: str = "ledger-db"
    ledger_db_user: str = ""
    ledger_db_password: str = ""

    # Identity store (users)
    accounts_db_host: str = ""
    accounts_db_port: int = 5432
    accounts_db_name: str = "accounts-db"
    accounts_db_user: str = ""
    accounts_db_password: str = ""

    db_pool_min: int = 0
    db_pool_max: int = 10
    # Seconds; keep at or below probe_timeout so a stalled connect frees its worker
    db_connect_timeout: int = 5

    # Reachability probe
    probe_max_retries: int = 3
    probe_retry_delay: float = 1.0
    probe_timeout: float = 5.0

    # Reasoning service
    model_id: str = "gemini-1.5-flash-002"
    google_api_key: str = ""
    openai_api_key: str = ""
    temperature: float = 0.1
    max_output_tokens: int = 2048
    top_p: float = 0.9
    top_k: int = 40

    def missing_required(self) -> List[str]:
        """Names of required settings that are empty."""
        required = ("model_id", "ledger_db_host", "accounts_db_host")
        return [name for name in required if not str(getattr(self, name)).strip()]


settings = Settings()
