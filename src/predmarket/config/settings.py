"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"

DEFAULT_CONTRACT_ADDRESS = "0x6dBd263900a5104bA83E2D0e155390acF01EDFf0"


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    directory = _find_config_dir(config_dir)
    default_path = directory / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = directory / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        chain: dict[str, Any] | None = None,
        wallet: dict[str, Any] | None = None,
        reader: dict[str, Any] | None = None,
        transactions: dict[str, Any] | None = None,
        storage: dict[str, Any] | None = None,
        ui: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.chain = chain or {}
        self.wallet = wallet or {}
        self.reader = reader or {}
        self.transactions = transactions or {}
        self.storage = storage or {}
        self.ui = ui or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            chain=raw.get("chain"),
            wallet=raw.get("wallet"),
            reader=raw.get("reader"),
            transactions=raw.get("transactions"),
            storage=raw.get("storage"),
            ui=raw.get("ui"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def rpc_url(self) -> str:
        return self.chain.get("rpc_url", "https://sepolia.base.org")

    @property
    def contract_address(self) -> str:
        return self.chain.get("contract_address", DEFAULT_CONTRACT_ADDRESS)

    @property
    def chain_id(self) -> int:
        return int(self.chain.get("chain_id", 84532))

    @property
    def explorer_tx_url(self) -> str:
        return self.chain.get("explorer_tx_url", "https://sepolia.basescan.org/tx/{tx_hash}")

    @property
    def receipt_poll_interval_sec(self) -> float:
        return float(self.chain.get("receipt_poll_interval_sec", 2.0))

    @property
    def private_key_env(self) -> str:
        return self.wallet.get("private_key_env", "PREDMARKET_PRIVATE_KEY")

    @property
    def private_key(self) -> str | None:
        """Signing key from the configured environment variable, if set."""
        return os.environ.get(self.private_key_env) or None

    @property
    def viewer_address(self) -> str | None:
        return self.wallet.get("address") or None

    @property
    def max_concurrency(self) -> int:
        return max(1, int(self.reader.get("max_concurrency", 8)))

    @property
    def create_gas_limit(self) -> int:
        return int(self.transactions.get("create_gas_limit", 1_000_000))

    @property
    def db_path(self) -> str:
        return self.storage.get("db_path", "data/predmarket.duckdb")

    @property
    def tick_interval_sec(self) -> float:
        return float(self.ui.get("tick_interval_sec", 1.0))

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
