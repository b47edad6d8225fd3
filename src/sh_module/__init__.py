from .config import ModuleConfig
from .decoder import DecodedCommand, decode, decode_with_env
from .dispatcher import Dispatcher
from .errors import (
    BoundaryTypeError,
    CommandFailed,
    CommandNotStarted,
    DecodeError,
    ExecError,
    exit_status,
)
from .execution.local_engine import LocalEngine
from .module import create_dispatcher
from .requests import METHODS
from .sh import ExecResult, Shell

__all__ = [
    "METHODS",
    "BoundaryTypeError",
    "CommandFailed",
    "CommandNotStarted",
    "DecodeError",
    "DecodedCommand",
    "Dispatcher",
    "ExecError",
    "ExecResult",
    "LocalEngine",
    "ModuleConfig",
    "Shell",
    "create_dispatcher",
    "decode",
    "decode_with_env",
    "exit_status",
]
