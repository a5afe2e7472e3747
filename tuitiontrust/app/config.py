from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from tuitiontrust.app.errors import ConfigurationError

load_dotenv()


DEFAULT_XRPL_RPC_URL = "https://s.altnet.rippletest.net:51234"
DEFAULT_EXPLORER_BASE_URL = "https://testnet.xrpl.org/transactions/"

# Settings attribute -> environment variable, used in error messages.
ENV_NAMES = {
    "xrpl_rpc_url": "XRPL_RPC_URL",
    "treasury_address": "TREASURY_ADDRESS",
    "treasury_secret": "TREASURY_SECRET",
    "issued_currency_code": "RLUSD_CURRENCY_CODE",
    "issued_currency_issuer": "RLUSD_ISSUER_ADDRESS",
    "cron_secret": "CRON_SECRET",
}


def _optional(name: str) -> Optional[str]:
    value = (os.getenv(name) or "").strip()
    return value or None


def _flag(name: str, default: str) -> bool:
    return (os.getenv(name) or default).strip().lower() == "true"


def _decimal_string(name: str, default: str) -> str:
    raw = (os.getenv(name) or default).strip()
    try:
        value = Decimal(raw)
    except InvalidOperation as exc:
        raise ConfigurationError(f"{name} must be a decimal number, got {raw!r}.") from exc
    if not value.is_finite() or value <= 0:
        raise ConfigurationError(f"{name} must be a positive number, got {raw!r}.")
    return raw


def _positive_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or str(default)).strip()
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}.") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}.")
    return value


def _positive_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or str(default)).strip()
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number of seconds, got {raw!r}.") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}.")
    return value


@dataclass(frozen=True)
class Settings:
    """
    Process-wide configuration, read once from the environment.

    Values that only some routes need stay optional here; the component that
    needs them calls require(...) when it is built, before any I/O happens.
    """
    xrpl_rpc_url: str = DEFAULT_XRPL_RPC_URL
    xrpl_use_stub: bool = False
    request_timeout: float = 20.0
    treasury_address: Optional[str] = None
    treasury_secret: Optional[str] = None
    issued_currency_code: Optional[str] = None
    issued_currency_issuer: Optional[str] = None
    explorer_base_url: str = DEFAULT_EXPLORER_BASE_URL
    cron_secret: Optional[str] = None
    distribution_amount: str = "0.05"
    enable_distribution_api: bool = True
    enable_trustline_setup_api: bool = False
    trustline_limit: str = "10000000000"
    sync_page_limit: int = 50

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            xrpl_rpc_url=_optional("XRPL_RPC_URL") or DEFAULT_XRPL_RPC_URL,
            xrpl_use_stub=_flag("XRPL_USE_STUB", "false"),
            request_timeout=_positive_float("XRPL_REQUEST_TIMEOUT", 20.0),
            treasury_address=_optional("TREASURY_ADDRESS"),
            treasury_secret=_optional("TREASURY_SECRET"),
            issued_currency_code=_optional("RLUSD_CURRENCY_CODE"),
            issued_currency_issuer=_optional("RLUSD_ISSUER_ADDRESS"),
            explorer_base_url=_optional("XRPL_EXPLORER_BASE_URL") or DEFAULT_EXPLORER_BASE_URL,
            cron_secret=_optional("CRON_SECRET"),
            distribution_amount=_decimal_string("DISTRIBUTION_AMOUNT", "0.05"),
            enable_distribution_api=_flag("ENABLE_DISTRIBUTION_API", "true"),
            enable_trustline_setup_api=_flag("ENABLE_TRUSTLINE_SETUP_API", "false"),
            trustline_limit=_decimal_string("TRUSTLINE_LIMIT", "10000000000"),
            sync_page_limit=_positive_int("SYNC_PAGE_LIMIT", 50),
        )

    def require(self, *names: str) -> None:
        missing = [ENV_NAMES.get(name, name.upper()) for name in names if not getattr(self, name)]
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}.")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
