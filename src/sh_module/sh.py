from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from .errors import CommandFailed, CommandNotStarted
from .execution.engine import ExecutionEngine
from .execution.types import ExecutionOutcome, ExecutionRequest, StreamMode
from .log import fields


@dataclass(slots=True)
class ExecResult:
    """Captured streams of a process that ran and exited cleanly.

    Example:
        ```python
        result = ExecResult(stdout="ok\\n", stderr="")
        ```
    """

    stdout: str
    stderr: str
    ran: bool = True


class Shell:
    """The seven execution variants, all mapped onto one `ExecutionEngine.execute` call.

    Example:
        ```python
        shell = Shell(LocalEngine())
        shell.run("go", "vet", "./...")
        ```
    """

    def __init__(
        self,
        engine: ExecutionEngine,
        *,
        logger: logging.Logger | None = None,
        verbose: bool = False,
    ) -> None:
        """Bind the variants to an engine.

        With `verbose`, the non-verbose run variants also forward stdout.

        Example:
            ```python
            shell = Shell(LocalEngine(), verbose=True)
            ```
        """
        self._engine = engine
        self._logger = logger or logging.getLogger(__name__)
        self._verbose = verbose

    def run(self, cmd: str, *args: str) -> None:
        """Run a command; stdout is shown only in verbose mode.

        Example:
            ```python
            shell.run("go", "build", "./...")
            ```
        """
        self.run_with(None, cmd, *args)

    def run_v(self, cmd: str, *args: str) -> None:
        """Run a command, always forwarding stdout and logging the command line.

        Example:
            ```python
            shell.run_v("go", "test", "./...")
            ```
        """
        self.run_with_v(None, cmd, *args)

    def run_with(self, env: Mapping[str, str] | None, cmd: str, *args: str) -> None:
        """Run a command with environment overrides.

        Example:
            ```python
            shell.run_with({"GOOS": "linux"}, "go", "build")
            ```
        """
        stdout = StreamMode.FORWARD if self._verbose else StreamMode.DISCARD
        self._execute(env, stdout, StreamMode.FORWARD, cmd, args)

    def run_with_v(self, env: Mapping[str, str] | None, cmd: str, *args: str) -> None:
        """Run a command with environment overrides, forwarding stdout.

        Example:
            ```python
            shell.run_with_v({"GOOS": "linux"}, "go", "build", "-v")
            ```
        """
        self._execute(env, StreamMode.FORWARD, StreamMode.FORWARD, cmd, args, announce=True)

    def output(self, cmd: str, *args: str) -> str:
        """Run a command and return its stdout without the trailing newline.

        Example:
            ```python
            sha = shell.output("git", "rev-parse", "HEAD")
            ```
        """
        return self.output_with(None, cmd, *args)

    def output_with(self, env: Mapping[str, str] | None, cmd: str, *args: str) -> str:
        """Run a command with environment overrides and return its stdout.

        Example:
            ```python
            version = shell.output_with({"GOFLAGS": "-mod=mod"}, "go", "version")
            ```
        """
        outcome = self._execute(env, StreamMode.CAPTURE, StreamMode.FORWARD, cmd, args)
        return outcome.stdout.removesuffix("\n")

    def execute(self, env: Mapping[str, str] | None, cmd: str, *args: str) -> ExecResult:
        """Run a command capturing stdout and stderr separately.

        Example:
            ```python
            result = shell.execute({}, "go", "env", "GOPATH")
            ```
        """
        outcome = self._execute(env, StreamMode.CAPTURE, StreamMode.CAPTURE, cmd, args)
        return ExecResult(stdout=outcome.stdout, stderr=outcome.stderr)

    def _execute(
        self,
        env: Mapping[str, str] | None,
        stdout: StreamMode,
        stderr: StreamMode,
        cmd: str,
        args: tuple[str, ...],
        *,
        announce: bool = False,
    ) -> ExecutionOutcome:
        """Hand one request to the engine and raise on start failure or non-zero exit.

        Example:
            ```python
            outcome = shell._execute(None, StreamMode.CAPTURE, StreamMode.CAPTURE, "true", ())
            ```
        """
        request = ExecutionRequest(
            command=cmd,
            arguments=list(args),
            env=dict(env) if env else None,
            stdout=stdout,
            stderr=stderr,
        )
        if announce:
            self._logger.info("exec", extra=fields(command=request.command_line, env=request.env))
        outcome = self._engine.execute(request)
        if not outcome.ran or outcome.returncode is None:
            raise CommandNotStarted(request.command_line, reason=outcome.error or "process did not start")
        if outcome.returncode != 0:
            raise CommandFailed(
                request.command_line,
                exit_code=outcome.returncode,
                stdout=outcome.stdout,
                stderr=outcome.stderr,
            )
        return outcome
