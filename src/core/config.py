"""Configuration loader for the connectivity observer.

Loads settings from environment variables (.env file) and config/default.yaml,
with environment variables taking precedence over YAML defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from src.core.connectivity import NetworkType
from src.host.interfaces import NetworkCapability, NetworkRequest


# Project root is two levels up from this file (src/core/config.py -> project root)
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

_DEFAULT_TRANSPORTS = ("wifi", "cellular")


@dataclass(frozen=True)
class Settings:
    """Immutable configuration for the connectivity observer."""

    # Identity used for the battery optimisation exemption query
    app_id: str

    # Transports the network callback is registered for
    transports: tuple[NetworkType, ...]

    # Logging
    log_level: str


def _load_yaml_defaults(yaml_path: Path) -> dict[str, Any]:
    """Read config/default.yaml into a dict; missing or empty files give {}."""
    if not yaml_path.exists():
        return {}
    with open(yaml_path) as f:
        return yaml.safe_load(f) or {}


def _lookup(yaml_defaults: dict[str, Any], yaml_key: str) -> Any:
    """Walk a dot-separated key path; None when any part is missing."""
    node: Any = yaml_defaults
    for part in yaml_key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def _get(env_key: str, yaml_defaults: dict[str, Any], yaml_key: str, default: Any = None) -> Any:
    """Get a config value with precedence: env var > yaml default > hardcoded default.

    Args:
        env_key: Environment variable name.
        yaml_defaults: Dictionary from YAML config file.
        yaml_key: Dot-separated key path in YAML (e.g., "app.id").
        default: Fallback default value.

    Returns:
        The resolved configuration value.
    """
    env_val = os.environ.get(env_key)
    if env_val:
        return env_val
    node = _lookup(yaml_defaults, yaml_key)
    return default if node is None else node


def _get_list(
    env_key: str, yaml_defaults: dict[str, Any], yaml_key: str, default: list[str]
) -> list[str]:
    """Like _get, for list values.

    Strings from either source are split on commas; YAML lists are taken
    item by item. Blank items are dropped.
    """
    raw = _get(env_key, yaml_defaults, yaml_key, default)
    if isinstance(raw, str):
        items = raw.split(",")
    elif isinstance(raw, (list, tuple)):
        items = raw
    else:
        items = [raw]
    return [str(item).strip() for item in items if str(item).strip()]


def _parse_transports(names: list[str]) -> tuple[NetworkType, ...]:
    """Map transport names to NetworkType values, keeping order, dropping repeats.

    Raises:
        ValueError: If the list is empty or names an unknown transport.
    """
    if not names:
        raise ValueError("NETWORK_TRANSPORTS must name at least one transport.")

    transports: list[NetworkType] = []
    for name in names:
        try:
            transport = NetworkType(name.lower())
        except ValueError as e:
            valid = ", ".join(t.value for t in NetworkType if t is not NetworkType.NONE)
            raise ValueError(
                f"Unknown network transport '{name}'. Must be one of: {valid}"
            ) from e
        if transport is NetworkType.NONE:
            raise ValueError("Network transport 'none' cannot be requested.")
        if transport not in transports:
            transports.append(transport)
    return tuple(transports)


def load_settings(
    env_path: Path | None = None,
    yaml_path: Path | None = None,
) -> Settings:
    """Load settings from .env and config/default.yaml.

    Environment variables take precedence over YAML defaults.

    Args:
        env_path: Path to .env file. Defaults to PROJECT_ROOT/.env.
        yaml_path: Path to YAML config. Defaults to PROJECT_ROOT/config/default.yaml.

    Returns:
        Frozen Settings dataclass with all configuration values.

    Raises:
        ValueError: If app_id is empty or the transport list is invalid.
    """
    if env_path is None:
        env_path = PROJECT_ROOT / ".env"
    if yaml_path is None:
        yaml_path = PROJECT_ROOT / "config" / "default.yaml"

    load_dotenv(env_path, override=False)
    yaml_defaults = _load_yaml_defaults(yaml_path)

    app_id = str(_get("APP_ID", yaml_defaults, "app.id", "netwatch")).strip()
    if not app_id:
        raise ValueError("APP_ID must not be empty.")

    return Settings(
        app_id=app_id,
        transports=_parse_transports(
            _get_list("NETWORK_TRANSPORTS", yaml_defaults, "network.transports",
                      list(_DEFAULT_TRANSPORTS))
        ),
        log_level=str(
            _get("LOG_LEVEL", yaml_defaults, "logging.level", "INFO")
        ).upper(),
    )


def request_from_settings(settings: Settings) -> NetworkRequest:
    """Build the network callback request described by the settings.

    The request always asks for internet-capable, unrestricted networks.
    """
    return NetworkRequest(
        capabilities=(NetworkCapability.INTERNET, NetworkCapability.NOT_RESTRICTED),
        transports=settings.transports,
    )
