from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .errors import BoundaryTypeError, DecodeError


@dataclass(frozen=True, slots=True)
class DecodedCommand:
    """Validated command line produced from an untyped argument list.

    Example:
        ```python
        cmd = DecodedCommand(command="git", arguments=("status",))
        ```
    """

    command: str
    arguments: tuple[str, ...] = ()
    environment: dict[str, str] | None = None


def decode(args: Sequence[Any]) -> DecodedCommand:
    """Decode `[command, arg, ...]` into a `DecodedCommand`.

    Stops at the first non-string element; the index in the message counts
    from the element after the command.

    Example:
        ```python
        cmd = decode(["echo", "hello"])
        ```
    """
    if len(args) == 0:
        raise DecodeError("not enough arguments")
    command = args[0]
    if not isinstance(command, str):
        raise DecodeError("cmd argument was not a string")
    arguments: list[str] = []
    for index, value in enumerate(args[1:]):
        if not isinstance(value, str):
            raise DecodeError(f"argument {index} ({value}) to {command} was not a string")
        arguments.append(value)
    return DecodedCommand(command=command, arguments=tuple(arguments))


def as_environment(value: Any) -> dict[str, str]:
    """Narrow an untyped value to an environment mapping or raise `BoundaryTypeError`.

    Example:
        ```python
        env = as_environment({"GOOS": "linux"})
        ```
    """
    if not isinstance(value, Mapping):
        raise BoundaryTypeError(
            f"environment argument must be a mapping of str to str, got {type(value).__name__}"
        )
    env: dict[str, str] = {}
    for key, item in value.items():
        if not isinstance(key, str) or not isinstance(item, str):
            raise BoundaryTypeError(
                f"environment entry {key!r}={item!r} is not a str to str pair"
            )
        env[key] = item
    return env


def decode_with_env(args: Sequence[Any]) -> DecodedCommand:
    """Decode `[env, command, arg, ...]` where `env` maps str to str.

    A missing or malformed environment is a boundary error, not a decode error.

    Example:
        ```python
        cmd = decode_with_env([{"CGO_ENABLED": "0"}, "go", "build"])
        ```
    """
    if len(args) == 0:
        raise BoundaryTypeError("environment argument is missing")
    env = as_environment(args[0])
    decoded = decode(args[1:])
    return DecodedCommand(
        command=decoded.command,
        arguments=decoded.arguments,
        environment=env,
    )
