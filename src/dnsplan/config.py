"""Environment-driven configuration loader."""

from __future__ import annotations

import base64
import os
import re
from dataclasses import dataclass

from dotenv import load_dotenv

from .models import DEFAULT_MANAGED_RECORDS, ConfigError
from .policy import POLICIES


@dataclass(frozen=True)
class TsigKey:
    """Holds TSIG credentials used for AXFR."""

    name: str
    algorithm: str
    secret: str


@dataclass(frozen=True)
class AppConfig:
    """Application-wide configuration values."""

    owner_id: str
    owner_id_old: str
    owner_migrate: bool
    managed_record_types: tuple[str, ...]
    domain_filter: tuple[str, ...]
    exclude_domains: tuple[str, ...]
    policy: str
    boolean_properties: tuple[str, ...]
    boolean_property_default: bool
    txt_prefix: str
    bind_server: str
    bind_port: int
    axfr_timeout: float
    tsig: TsigKey | None
    log_level: str


KEYFILE_PATTERN = re.compile(
    r'key\s+"(?P<name>[^"]+)"\s*\{'
    r"(?P<body>.*?)"
    r"\}",
    re.IGNORECASE | re.DOTALL,
)
ALGORITHM_PATTERN = re.compile(
    r"algorithm\s+(?P<algorithm>[\w-]+)\s*;",
    re.IGNORECASE,
)
SECRET_PATTERN = re.compile(
    r'secret\s+"(?P<secret>[^"]+)"\s*;',
    re.IGNORECASE,
)


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Return a boolean parsed from a string."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _parse_list(value: str | None, default: tuple[str, ...] = ()) -> tuple[str, ...]:
    """Split a comma separated value, dropping blanks."""
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _parse_keyfile(encoded: str, overrides: dict[str, str | None]) -> TsigKey | None:
    """Decode a base64-encoded BIND keyfile; None when no key is configured at all."""
    if not encoded:
        if not any(overrides.values()):
            return None
        if not all(overrides.values()):
            raise ConfigError("TSIG_NAME, TSIG_ALGORITHM and TSIG_SECRET must be set together.")
        return TsigKey(name=overrides["name"], algorithm=overrides["algorithm"], secret=overrides["secret"])
    try:
        decoded = base64.b64decode(encoded).decode("utf-8")
    except Exception as exc:  # noqa: BLE001
        raise ConfigError("Failed to decode TSIG key file base64 payload.") from exc

    match = KEYFILE_PATTERN.search(decoded)
    if not match:
        raise ConfigError("TSIG key file does not match expected format.")
    body = match.group("body")
    name = overrides.get("name") or match.group("name")
    algo_match = ALGORITHM_PATTERN.search(body)
    secret_match = SECRET_PATTERN.search(body)
    algorithm = overrides.get("algorithm") or (algo_match.group("algorithm") if algo_match else None)
    secret = overrides.get("secret") or (secret_match.group("secret") if secret_match else None)

    if not all([name, algorithm, secret]):
        raise ConfigError("TSIG key file missing name, algorithm, or secret.")

    return TsigKey(name=name, algorithm=algorithm, secret=secret)


def _parse_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got '{raw}'.") from exc


def load_config() -> AppConfig:
    """Load configuration values from the environment (and .env)."""
    load_dotenv()

    owner_migrate = _parse_bool(os.getenv("TXT_OWNER_MIGRATE", "false"))
    owner_id_old = os.getenv("TXT_OWNER_OLD", "")
    if owner_migrate and not owner_id_old:
        raise ConfigError("TXT_OWNER_OLD is required when TXT_OWNER_MIGRATE is enabled.")

    policy = os.getenv("POLICY", "sync").strip().lower()
    if policy not in POLICIES:
        raise ConfigError(f"POLICY must be one of {', '.join(sorted(POLICIES))}.")

    managed = _parse_list(os.getenv("MANAGED_RECORD_TYPES"), DEFAULT_MANAGED_RECORDS)
    managed_record_types = tuple(item.upper() for item in managed)

    try:
        axfr_timeout = float(os.getenv("AXFR_TIMEOUT", "10"))
    except ValueError as exc:
        raise ConfigError("AXFR_TIMEOUT must be a number.") from exc

    tsig = _parse_keyfile(
        os.getenv("TSIG_KEYFILE_B64", ""),
        overrides={
            "name": os.getenv("TSIG_NAME"),
            "algorithm": os.getenv("TSIG_ALGORITHM"),
            "secret": os.getenv("TSIG_SECRET"),
        },
    )

    config = AppConfig(
        owner_id=os.getenv("TXT_OWNER_ID", "default"),
        owner_id_old=owner_id_old,
        owner_migrate=owner_migrate,
        managed_record_types=managed_record_types,
        domain_filter=_parse_list(os.getenv("DOMAIN_FILTER")),
        exclude_domains=_parse_list(os.getenv("EXCLUDE_DOMAINS")),
        policy=policy,
        boolean_properties=_parse_list(os.getenv("BOOLEAN_PROPERTIES")),
        boolean_property_default=_parse_bool(os.getenv("BOOLEAN_PROPERTY_DEFAULT", "false")),
        txt_prefix=os.getenv("TXT_PREFIX", ""),
        bind_server=os.getenv("BIND_SERVER", "127.0.0.1"),
        bind_port=_parse_int("BIND_PORT", "53"),
        axfr_timeout=axfr_timeout,
        tsig=tsig,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
    return config
