from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_LOG_FORMATS = {"json", "rich"}


def _default_config_path() -> Path:
    """Return bundled default config TOML path.

    Example:
        ```python
        path = _default_config_path()
        ```
    """
    return Path(__file__).with_name("default_config.toml")


def _read_config_toml(path: Path) -> dict[str, Any]:
    """Read config TOML and return the module table.

    Accepts either a `[module]` table or a flat document.

    Example:
        ```python
        raw = _read_config_toml(Path("/tmp/sh_module.toml"))
        ```
    """
    if not path.exists():
        return {
            "name": "ShModule",
            "log_level": "DEBUG",
            "log_format": "json",
            "verbose": False,
            "wire_compat": False,
            "protocol_version": 1,
            "handshake_cookie_key": "SH_MODULE_PLUGIN",
            "handshake_cookie_value": "b2a5c9d4e1f07a63",
        }
    raw = tomllib.loads(path.read_text(encoding="utf-8"))
    module_obj = raw.get("module", raw)
    if not isinstance(module_obj, dict):
        raise ValueError("Module config must be a TOML table")
    return module_obj


def _as_bool(value: Any, field_name: str) -> bool:
    """Validate a boolean config field.

    Example:
        ```python
        verbose = _as_bool(True, "verbose")
        ```
    """
    if not isinstance(value, bool):
        raise ValueError(f"'{field_name}' must be a boolean")
    return value


_DEFAULT_CONFIG_RAW = _read_config_toml(_default_config_path())
DEFAULT_NAME = str(_DEFAULT_CONFIG_RAW.get("name", "ShModule"))
DEFAULT_LOG_LEVEL = str(_DEFAULT_CONFIG_RAW.get("log_level", "DEBUG"))
DEFAULT_LOG_FORMAT = str(_DEFAULT_CONFIG_RAW.get("log_format", "json"))
DEFAULT_VERBOSE = _as_bool(_DEFAULT_CONFIG_RAW.get("verbose", False), "verbose")
DEFAULT_WIRE_COMPAT = _as_bool(_DEFAULT_CONFIG_RAW.get("wire_compat", False), "wire_compat")
DEFAULT_PROTOCOL_VERSION = int(_DEFAULT_CONFIG_RAW.get("protocol_version", 1))
DEFAULT_COOKIE_KEY = str(_DEFAULT_CONFIG_RAW.get("handshake_cookie_key", "SH_MODULE_PLUGIN"))
DEFAULT_COOKIE_VALUE = str(_DEFAULT_CONFIG_RAW.get("handshake_cookie_value", ""))


@dataclass(slots=True)
class ModuleConfig:
    """Runtime configuration for the command module.

    Example:
        ```python
        config = ModuleConfig(log_format="rich", wire_compat=True)
        ```
    """

    name: str = DEFAULT_NAME
    log_level: str = DEFAULT_LOG_LEVEL
    log_format: str = DEFAULT_LOG_FORMAT
    verbose: bool = DEFAULT_VERBOSE
    wire_compat: bool = DEFAULT_WIRE_COMPAT
    protocol_version: int = DEFAULT_PROTOCOL_VERSION
    handshake_cookie_key: str = DEFAULT_COOKIE_KEY
    handshake_cookie_value: str = DEFAULT_COOKIE_VALUE
    config_path: str | None = None

    def __post_init__(self) -> None:
        """Validate and normalize fields after dataclass initialization.

        Example:
            ```python
            ModuleConfig(log_level="info")
            ```
        """
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        if self.log_format not in _LOG_FORMATS:
            raise ValueError("log_format must be 'json' or 'rich'")
        if not self.name.strip():
            raise ValueError("name must be a non-empty string")
        if self.protocol_version < 1:
            raise ValueError("protocol_version must be a positive integer")

    @classmethod
    def from_file(cls, config_path: str) -> "ModuleConfig":
        """Create a config instance from a TOML file.

        Example:
            ```python
            config = ModuleConfig.from_file("/tmp/sh_module.toml")
            ```
        """
        raw = _read_config_toml(Path(config_path))
        return cls(
            name=str(raw.get("name", DEFAULT_NAME)),
            log_level=str(raw.get("log_level", DEFAULT_LOG_LEVEL)),
            log_format=str(raw.get("log_format", DEFAULT_LOG_FORMAT)),
            verbose=_as_bool(raw.get("verbose", DEFAULT_VERBOSE), "verbose"),
            wire_compat=_as_bool(raw.get("wire_compat", DEFAULT_WIRE_COMPAT), "wire_compat"),
            protocol_version=int(raw.get("protocol_version", DEFAULT_PROTOCOL_VERSION)),
            handshake_cookie_key=str(raw.get("handshake_cookie_key", DEFAULT_COOKIE_KEY)),
            handshake_cookie_value=str(raw.get("handshake_cookie_value", DEFAULT_COOKIE_VALUE)),
            config_path=config_path,
        )
