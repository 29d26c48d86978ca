"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
server can be started without any configuration at all; the JSON data
files are then created in ``./data`` relative to the working directory.
"""

import os
from dataclasses import dataclass
from decimal import Decimal


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Lius FinTech API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Directory holding the two JSON collections.  Relative paths are
    # resolved against the current working directory by ``core.db``.
    data_dir: str = os.getenv("DATA_DIR", "data")
    users_file: str = os.getenv("USERS_FILE", "users.json")
    transactions_file: str = os.getenv("TRANSACTIONS_FILE", "transactions.json")

    # Balance credited to every newly registered account.
    starting_balance: Decimal = Decimal(os.getenv("STARTING_BALANCE", "1000.00"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# must be set before importing this module.
settings = Settings()
