from __future__ import annotations

import os
import re
import subprocess
import sys
from collections.abc import Mapping
from typing import Any, TextIO

from .types import ExecutionOutcome, ExecutionRequest, StreamMode

_VARIABLE_PATTERN = re.compile(r"\$(?:\{([^}]*)\}|([A-Za-z0-9_]+))")


def expand(value: str, env: Mapping[str, str] | None = None, base: Mapping[str, str] | None = None) -> str:
    """Expand `$NAME` and `${NAME}` from `env`, falling back to `base` (os.environ).

    Unknown names expand to the empty string. No other syntax is interpreted.

    Example:
        ```python
        text = expand("${GOOS}-$GOARCH", {"GOOS": "linux", "GOARCH": "arm64"})  # "linux-arm64"
        ```
    """
    overrides = env or {}
    fallback = os.environ if base is None else base

    def _lookup(match: re.Match[str]) -> str:
        """Resolve one matched variable reference.

        Example:
            ```python
            _lookup(_VARIABLE_PATTERN.search("$HOME"))
            ```
        """
        name = match.group(1) if match.group(1) is not None else match.group(2)
        if name in overrides:
            return overrides[name]
        return fallback.get(name, "")

    return _VARIABLE_PATTERN.sub(_lookup, value)


def _child_environment(env: Mapping[str, str] | None) -> dict[str, str]:
    """Return the parent environment with the request overrides applied on top.

    Example:
        ```python
        child_env = _child_environment({"CGO_ENABLED": "0"})
        ```
    """
    merged = dict(os.environ)
    if env:
        merged.update(env)
    return merged


def _file_descriptor(stream: TextIO) -> int | None:
    """Return the OS-level descriptor behind `stream`, or None for in-memory streams.

    Example:
        ```python
        fd = _file_descriptor(sys.stderr)  # 2
        ```
    """
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


class LocalEngine:
    """Execute commands as local child processes, without a shell.

    Example:
        ```python
        engine = LocalEngine()
        outcome = engine.execute(ExecutionRequest(command="echo", arguments=["hi"]))
        ```
    """

    def __init__(self, *, forward_stream: TextIO | None = None) -> None:
        """Initialize the engine.

        `forward_stream` receives output for `StreamMode.FORWARD`; it defaults to
        the current `sys.stderr` at execution time, since stdout belongs to the host transport.

        Example:
            ```python
            engine = LocalEngine(forward_stream=io.StringIO())
            ```
        """
        self._forward_stream = forward_stream

    def execute(self, request: ExecutionRequest) -> ExecutionOutcome:
        """Run one request to completion and return its outcome.

        Forwarded streams are handed to the child directly when the forward
        stream is backed by a file descriptor, so output appears as it is written.
        Otherwise they are captured and copied once the child exits.

        Example:
            ```python
            outcome = engine.execute(ExecutionRequest(command="false"))  # returncode == 1
            ```
        """
        argv = [expand(part, request.env) for part in [request.command, *request.arguments]]
        stdout_target = self._target(request.stdout)
        stderr_target = self._target(request.stderr)
        try:
            completed = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=stdout_target,
                stderr=stderr_target,
                env=_child_environment(request.env),
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except (OSError, ValueError) as exc:
            return ExecutionOutcome(ran=False, returncode=None, error=str(exc))

        stdout = completed.stdout or ""
        stderr = completed.stderr or ""
        if request.stdout is StreamMode.FORWARD:
            self._forward(stdout)
            stdout = ""
        if request.stderr is StreamMode.FORWARD:
            self._forward(stderr)
            stderr = ""
        return ExecutionOutcome(
            ran=True,
            returncode=completed.returncode,
            stdout=stdout,
            stderr=stderr,
        )

    def _stream(self) -> TextIO:
        """Return the stream that receives forwarded output.

        Example:
            ```python
            stream = engine._stream()  # sys.stderr unless a forward_stream was given
            ```
        """
        return self._forward_stream if self._forward_stream is not None else sys.stderr

    def _target(self, mode: StreamMode) -> Any:
        """Map a stream mode to the subprocess redirection target.

        Example:
            ```python
            target = engine._target(StreamMode.DISCARD)  # subprocess.DEVNULL
            ```
        """
        if mode is StreamMode.DISCARD:
            return subprocess.DEVNULL
        if mode is StreamMode.FORWARD:
            stream = self._stream()
            fd = _file_descriptor(stream)
            if fd is not None:
                stream.flush()
                return fd
        return subprocess.PIPE

    def _forward(self, text: str) -> None:
        """Copy captured child output to the forward stream.

        Example:
            ```python
            engine._forward("compiling...\\n")
            ```
        """
        if not text:
            return
        stream = self._stream()
        stream.write(text)
        stream.flush()
