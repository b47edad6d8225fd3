from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Callable, Union

from .errors import DecodeError, ExecError, UnknownMethodError, cmd_ran, exit_status
from .log import fields
from .requests import (
    METHODS,
    ExecRequest,
    OutputRequest,
    OutputWithRequest,
    Request,
    RunRequest,
    RunVRequest,
    RunWithRequest,
    RunWithVRequest,
    build_request,
)
from .sh import Shell

Envelope = dict[str, Any]
InvokeResult = Union[Envelope, DecodeError]


def _failure(err: ExecError) -> Envelope:
    """Build the common failure envelope for an execution error.

    Example:
        ```python
        env = _failure(CommandFailed("false", exit_code=1))  # {"error": ..., "code": 1}
        ```
    """
    return {"error": str(err), "code": exit_status(err)}


class Dispatcher:
    """Translate method invocations into shell executions and result envelopes.

    In `wire_compat` mode decode errors of the six non-Exec methods are returned
    as the raw `DecodeError`, and Exec failures omit `ran`/`stdout`/`stderr`.
    Otherwise every decode error becomes `{"error": ...}` and Exec failures
    report whether the process started.

    Example:
        ```python
        dispatcher = Dispatcher(Shell(LocalEngine()))
        envelope = dispatcher.invoke("Run", ["go", "build"])
        ```
    """

    def __init__(
        self,
        shell: Shell,
        *,
        logger: logging.Logger | None = None,
        wire_compat: bool = False,
    ) -> None:
        """Bind the dispatcher to a shell and an injected logger.

        Example:
            ```python
            dispatcher = Dispatcher(shell, logger=logging.getLogger("test"), wire_compat=True)
            ```
        """
        self._shell = shell
        self._logger = logger or logging.getLogger(__name__)
        self._wire_compat = wire_compat
        self._handlers: dict[type, Callable[[Any], Envelope]] = {
            RunRequest: self._run,
            RunVRequest: self._run_v,
            RunWithRequest: self._run_with,
            RunWithVRequest: self._run_with_v,
            OutputRequest: self._output,
            OutputWithRequest: self._output_with,
            ExecRequest: self._exec,
        }

    @property
    def logger(self) -> logging.Logger:
        """Return the injected logger so transports can share the same channel.

        Example:
            ```python
            serve(dispatcher, handshake, logger=dispatcher.logger)
            ```
        """
        return self._logger

    @staticmethod
    def methods() -> list[str]:
        """Return the registered method names.

        Example:
            ```python
            names = Dispatcher.methods()  # ["Run", "RunV", ...]
            ```
        """
        return list(METHODS)

    def invoke(self, method: str, args: Sequence[Any]) -> InvokeResult:
        """Decode `args` for `method`, run it, and return its result envelope.

        `BoundaryTypeError` is not caught here; it aborts this call only.

        Example:
            ```python
            envelope = dispatcher.invoke("Output", [{}, "git", "rev-parse", "HEAD"])
            ```
        """
        self._logger.info("Invoke called", extra=fields(method=method, args=list(args)))
        try:
            request = build_request(method, args)
        except UnknownMethodError as err:
            self._logger.error("unknown method", extra=fields(method=method))
            return {"error": str(err)}
        except DecodeError as err:
            self._logger.error(
                "failed to parse args in call to method",
                extra=fields(method=method, err=str(err)),
            )
            if self._wire_compat and method != "Exec":
                return err
            return {"error": str(err)}
        return self.dispatch(request)

    def dispatch(self, request: Request) -> Envelope:
        """Run a typed request and build its envelope.

        Example:
            ```python
            envelope = dispatcher.dispatch(RunRequest(command="true"))  # {"code": 0}
            ```
        """
        handler = self._handlers.get(type(request))
        if handler is None:
            raise UnknownMethodError(getattr(request, "method", type(request).__name__))
        try:
            envelope = handler(request)
        except ExecError as err:
            self._logger.error("method failed", extra=fields(method=request.method, err=str(err)))
            return self._exec_failure(err) if isinstance(request, ExecRequest) else _failure(err)
        self._logger.info("method succeeded", extra=fields(method=request.method, code=envelope["code"]))
        return envelope

    def _run(self, request: RunRequest) -> Envelope:
        """Handle `Run`.

        Example:
            ```python
            dispatcher._run(RunRequest(command="true"))
            ```
        """
        self._shell.run(request.command, *request.arguments)
        return {"code": exit_status(None)}

    def _run_v(self, request: RunVRequest) -> Envelope:
        """Handle `RunV`.

        Example:
            ```python
            dispatcher._run_v(RunVRequest(command="true"))
            ```
        """
        self._shell.run_v(request.command, *request.arguments)
        return {"code": exit_status(None)}

    def _run_with(self, request: RunWithRequest) -> Envelope:
        """Handle `RunWith`.

        Example:
            ```python
            dispatcher._run_with(RunWithRequest(env={"A": "1"}, command="true"))
            ```
        """
        self._shell.run_with(request.env, request.command, *request.arguments)
        return {"code": exit_status(None)}

    def _run_with_v(self, request: RunWithVRequest) -> Envelope:
        """Handle `RunWithV`.

        Example:
            ```python
            dispatcher._run_with_v(RunWithVRequest(env={"A": "1"}, command="true"))
            ```
        """
        self._shell.run_with_v(request.env, request.command, *request.arguments)
        return {"code": exit_status(None)}

    def _output(self, request: OutputRequest) -> Envelope:
        """Handle `Output`.

        Example:
            ```python
            dispatcher._output(OutputRequest(command="echo", arguments=("hi",)))
            ```
        """
        output = self._shell.output(request.command, *request.arguments)
        return {"output": output, "code": exit_status(None)}

    def _output_with(self, request: OutputWithRequest) -> Envelope:
        """Handle `OutputWith`.

        Example:
            ```python
            dispatcher._output_with(OutputWithRequest(env={"A": "1"}, command="env"))
            ```
        """
        output = self._shell.output_with(request.env, request.command, *request.arguments)
        return {"output": output, "code": exit_status(None)}

    def _exec(self, request: ExecRequest) -> Envelope:
        """Handle `Exec`.

        Example:
            ```python
            dispatcher._exec(ExecRequest(env={}, command="true"))
            ```
        """
        result = self._shell.execute(request.env, request.command, *request.arguments)
        return {
            "ran": result.ran,
            "stdout": result.stdout,
            "stderr": result.stderr,
            "code": exit_status(None),
        }

    def _exec_failure(self, err: ExecError) -> Envelope:
        """Build the Exec failure envelope for the configured mode.

        Example:
            ```python
            env = dispatcher._exec_failure(CommandNotStarted("nope", reason="not found"))
            ```
        """
        envelope = _failure(err)
        if not self._wire_compat:
            envelope.update({"ran": cmd_ran(err), "stdout": err.stdout, "stderr": err.stderr})
        return envelope
