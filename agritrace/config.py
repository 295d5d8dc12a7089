"""Runtime configuration — env-driven.

Centralized config using pydantic-settings.  Reads from a .env file and
AGRITRACE_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class AgritraceConfig(BaseSettings):
    """Configuration with environment variable overrides.

    All settings can be overridden via AGRITRACE_* environment variables
    or a .env file in the working directory.

    Examples
    --------
    Override via environment::

        export AGRITRACE_LOG_LEVEL=DEBUG
        export AGRITRACE_LEDGER_PATH=/data/ledger.db
        export AGRITRACE_ACTOR_ROLE=2

    Or via .env file::

        AGRITRACE_ENVIRONMENT=production
        AGRITRACE_AUTO_CONFIRM=false
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="AGRITRACE_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Ledger
    ledger_path: Path = Path(".agritrace/ledger.db")
    contract_address: str = ""
    network_name: str = "local"
    auto_confirm: bool = True  # local ledger: make writes visible immediately

    # Identity used by the CLI
    actor_label: str = "Local Operator"
    actor_role: int | None = None
    actor_address: str = "0x0000000000000000000000000000000000000001"

    # Presentation
    batch_list_limit: int = 20

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level singleton: import as `from agritrace.config import config`
config = AgritraceConfig()
