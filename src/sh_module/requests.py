from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Callable, Union

from .decoder import DecodedCommand, decode, decode_with_env
from .errors import UnknownMethodError


@dataclass(frozen=True, slots=True)
class RunRequest:
    """`Run`: execute, stdout shown only in verbose mode.

    Example:
        ```python
        req = RunRequest(command="go", arguments=("build",))
        ```
    """

    command: str
    arguments: tuple[str, ...] = ()
    method = "Run"


@dataclass(frozen=True, slots=True)
class RunVRequest:
    """`RunV`: execute with stdout forwarded.

    Example:
        ```python
        req = RunVRequest(command="go", arguments=("test", "./..."))
        ```
    """

    command: str
    arguments: tuple[str, ...] = ()
    method = "RunV"


@dataclass(frozen=True, slots=True)
class RunWithRequest:
    """`RunWith`: execute with environment overrides.

    Example:
        ```python
        req = RunWithRequest(env={"GOOS": "linux"}, command="go", arguments=("build",))
        ```
    """

    command: str
    arguments: tuple[str, ...] = ()
    env: dict[str, str] = field(default_factory=dict)
    method = "RunWith"


@dataclass(frozen=True, slots=True)
class RunWithVRequest:
    """`RunWithV`: execute with environment overrides and stdout forwarded.

    Example:
        ```python
        req = RunWithVRequest(env={"GOOS": "linux"}, command="go", arguments=("build", "-v"))
        ```
    """

    command: str
    arguments: tuple[str, ...] = ()
    env: dict[str, str] = field(default_factory=dict)
    method = "RunWithV"


@dataclass(frozen=True, slots=True)
class OutputRequest:
    """`Output`: execute and capture stdout.

    Example:
        ```python
        req = OutputRequest(command="git", arguments=("rev-parse", "HEAD"))
        ```
    """

    command: str
    arguments: tuple[str, ...] = ()
    method = "Output"


@dataclass(frozen=True, slots=True)
class OutputWithRequest:
    """`OutputWith`: execute with environment overrides and capture stdout.

    Example:
        ```python
        req = OutputWithRequest(env={"LC_ALL": "C"}, command="date")
        ```
    """

    command: str
    arguments: tuple[str, ...] = ()
    env: dict[str, str] = field(default_factory=dict)
    method = "OutputWith"


@dataclass(frozen=True, slots=True)
class ExecRequest:
    """`Exec`: execute with environment overrides, capturing stdout and stderr apart.

    Example:
        ```python
        req = ExecRequest(env={}, command="make", arguments=("check",))
        ```
    """

    command: str
    arguments: tuple[str, ...] = ()
    env: dict[str, str] = field(default_factory=dict)
    method = "Exec"


Request = Union[
    RunRequest,
    RunVRequest,
    RunWithRequest,
    RunWithVRequest,
    OutputRequest,
    OutputWithRequest,
    ExecRequest,
]


def _env_of(decoded: DecodedCommand) -> dict[str, str]:
    """Return the decoded environment, empty when none was given.

    Example:
        ```python
        env = _env_of(decode_with_env([{"A": "1"}, "env"]))
        ```
    """
    return dict(decoded.environment or {})


def _build_run(args: Sequence[Any]) -> Request:
    """Decode `Run` arguments.

    Example:
        ```python
        req = _build_run(["ls", "-l"])
        ```
    """
    decoded = decode(args)
    return RunRequest(command=decoded.command, arguments=decoded.arguments)


def _build_run_v(args: Sequence[Any]) -> Request:
    """Decode `RunV` arguments.

    Example:
        ```python
        req = _build_run_v(["ls", "-l"])
        ```
    """
    decoded = decode(args)
    return RunVRequest(command=decoded.command, arguments=decoded.arguments)


def _build_run_with(args: Sequence[Any]) -> Request:
    """Decode `RunWith` arguments.

    Example:
        ```python
        req = _build_run_with([{"A": "1"}, "env"])
        ```
    """
    decoded = decode_with_env(args)
    return RunWithRequest(env=_env_of(decoded), command=decoded.command, arguments=decoded.arguments)


def _build_run_with_v(args: Sequence[Any]) -> Request:
    """Decode `RunWithV` arguments.

    Example:
        ```python
        req = _build_run_with_v([{"A": "1"}, "env"])
        ```
    """
    decoded = decode_with_env(args)
    return RunWithVRequest(env=_env_of(decoded), command=decoded.command, arguments=decoded.arguments)


def _build_output(args: Sequence[Any]) -> Request:
    """Decode `Output`; slot 0 is reserved and ignored, the command starts at slot 1.

    Example:
        ```python
        req = _build_output([{}, "git", "describe"])
        ```
    """
    decoded = decode(args[1:])
    return OutputRequest(command=decoded.command, arguments=decoded.arguments)


def _build_output_with(args: Sequence[Any]) -> Request:
    """Decode `OutputWith` arguments.

    Example:
        ```python
        req = _build_output_with([{"LC_ALL": "C"}, "date"])
        ```
    """
    decoded = decode_with_env(args)
    return OutputWithRequest(env=_env_of(decoded), command=decoded.command, arguments=decoded.arguments)


def _build_exec(args: Sequence[Any]) -> Request:
    """Decode `Exec` arguments.

    Example:
        ```python
        req = _build_exec([{}, "make", "check"])
        ```
    """
    decoded = decode_with_env(args)
    return ExecRequest(env=_env_of(decoded), command=decoded.command, arguments=decoded.arguments)


_BUILDERS: dict[str, Callable[[Sequence[Any]], Request]] = {
    "Run": _build_run,
    "RunV": _build_run_v,
    "RunWith": _build_run_with,
    "RunWithV": _build_run_with_v,
    "Output": _build_output,
    "OutputWith": _build_output_with,
    "Exec": _build_exec,
}

METHODS: tuple[str, ...] = tuple(_BUILDERS)


def build_request(method: str, args: Sequence[Any]) -> Request:
    """Turn a method name and untyped argument list into a typed request.

    Raises `UnknownMethodError`, `DecodeError` or `BoundaryTypeError`.

    Example:
        ```python
        req = build_request("RunWith", [{"GOOS": "linux"}, "go", "build"])
        ```
    """
    builder = _BUILDERS.get(method)
    if builder is None:
        raise UnknownMethodError(method)
    return builder(list(args))
