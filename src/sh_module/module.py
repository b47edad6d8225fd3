from __future__ import annotations

import logging
from typing import TextIO

from .config import ModuleConfig
from .dispatcher import Dispatcher
from .execution.engine import ExecutionEngine
from .execution.local_engine import LocalEngine
from .log import build_logger
from .sh import Shell


def _resolve_config(config: ModuleConfig | None, config_file: str | None) -> ModuleConfig:
    """Resolve the effective config object.

    Example:
        ```python
        config = _resolve_config(None, "/tmp/sh_module.toml")
        ```
    """
    if config is not None and config_file is not None:
        raise ValueError("Provide either 'config' or 'config_file', not both")
    if config_file is not None:
        return ModuleConfig.from_file(config_file)
    return config or ModuleConfig()


def create_dispatcher(
    config: ModuleConfig | None = None,
    *,
    config_file: str | None = None,
    engine: ExecutionEngine | None = None,
    logger: logging.Logger | None = None,
    log_stream: TextIO | None = None,
) -> Dispatcher:
    """Wire config, logger, engine and shell into a ready dispatcher.

    Example:
        ```python
        dispatcher = create_dispatcher(ModuleConfig(log_format="rich"))
        envelope = dispatcher.invoke("Run", ["true"])
        ```
    """
    resolved = _resolve_config(config, config_file)
    active_logger = logger or build_logger(resolved, stream=log_stream)
    shell = Shell(engine or LocalEngine(), logger=active_logger, verbose=resolved.verbose)
    active_logger.debug(f"{resolved.name} initialized")
    return Dispatcher(shell, logger=active_logger, wire_compat=resolved.wire_compat)
