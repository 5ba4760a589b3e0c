from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


load_dotenv()

RULES_STORE_DEFAULT = ".duty_rules.json"
DATASETS_DIR_DEFAULT = "data"
DATA_SOURCES = ("csv", "memory")


@dataclass(frozen=True)
class AppSettings:
    rules_store_path: Path
    datasets_dir: Path
    data_source: str
    log_level: str


def get_settings() -> AppSettings:
    """
    Load service settings from environment variables (and a local .env).

    Reads:
      DUTY_RULES_STORE_PATH, DUTY_DATASETS_DIR, DUTY_DATA_SOURCE, DUTY_LOG_LEVEL
    """
    data_source = os.getenv("DUTY_DATA_SOURCE", "csv").strip().lower()
    if data_source not in DATA_SOURCES:
        raise ValueError(f"DUTY_DATA_SOURCE must be one of {', '.join(DATA_SOURCES)} (got '{data_source}').")

    return AppSettings(
        rules_store_path=Path(_env_or_default("DUTY_RULES_STORE_PATH", RULES_STORE_DEFAULT)),
        datasets_dir=Path(_env_or_default("DUTY_DATASETS_DIR", DATASETS_DIR_DEFAULT)),
        data_source=data_source,
        log_level=_env_or_default("DUTY_LOG_LEVEL", "INFO").upper(),
    )


def _env_or_default(name: str, default: str) -> str:
    value = os.getenv(name, "").strip()
    return value or default
