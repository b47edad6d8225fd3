from __future__ import annotations

SENTINEL_EXIT_CODE = -1


class ShModuleError(Exception):
    """Base class for errors raised by sh_module.

    Example:
        ```python
        raise ShModuleError("something went wrong")
        ```
    """


class DecodeError(ShModuleError):
    """Raised when an untyped argument list is not a valid command line.

    Example:
        ```python
        raise DecodeError("not enough arguments")
        ```
    """


class BoundaryTypeError(ShModuleError, TypeError):
    """Raised when a value crossing the invocation boundary has the wrong shape.

    Example:
        ```python
        raise BoundaryTypeError("environment argument must be a mapping of str to str")
        ```
    """


class UnknownMethodError(ShModuleError):
    """Raised when a request names a method outside the registry.

    Example:
        ```python
        raise UnknownMethodError("Bogus")
        ```
    """

    def __init__(self, method: str) -> None:
        """Store the offending method name.

        Example:
            ```python
            err = UnknownMethodError("Bogus")
            ```
        """
        super().__init__(f"unknown method: {method}")
        self.method = method


class ExecError(ShModuleError):
    """Base class for failures of an external process.

    Example:
        ```python
        raise ExecError("process failed")
        ```
    """

    ran: bool = False
    exit_code: int | None = None

    def __init__(self, message: str, *, stdout: str = "", stderr: str = "") -> None:
        """Store the message and any output captured before the failure.

        Example:
            ```python
            err = ExecError("process failed", stderr="boom")
            ```
        """
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr


class CommandNotStarted(ExecError):
    """The process could not be started (missing executable, permission denied).

    Example:
        ```python
        raise CommandNotStarted("nope", reason="No such file or directory")
        ```
    """

    def __init__(self, command_line: str, *, reason: str) -> None:
        """Build the message from the command line and the start failure reason.

        Example:
            ```python
            err = CommandNotStarted("nope --flag", reason="No such file or directory")
            ```
        """
        super().__init__(f'failed to run "{command_line}": {reason}')
        self.reason = reason


class CommandFailed(ExecError):
    """The process started and exited with a non-zero status.

    Example:
        ```python
        raise CommandFailed("false", exit_code=1)
        ```
    """

    ran = True

    def __init__(
        self,
        command_line: str,
        *,
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        """Build the message from the command line and the exit status.

        Example:
            ```python
            err = CommandFailed("false", exit_code=1, stderr="")
            ```
        """
        super().__init__(
            f'running "{command_line}" failed with exit code {exit_code}',
            stdout=stdout,
            stderr=stderr,
        )
        self.exit_code = exit_code


def exit_status(err: BaseException | None) -> int:
    """Return the exit status that corresponds to an execution error.

    `None` means success and maps to 0. Errors carrying an exit code map to
    that code (negative when the child was killed by a signal). Everything
    else maps to `SENTINEL_EXIT_CODE`.

    Example:
        ```python
        code = exit_status(CommandFailed("false", exit_code=1))  # 1
        ```
    """
    if err is None:
        return 0
    code = getattr(err, "exit_code", None)
    if isinstance(code, int) and not isinstance(code, bool):
        return code
    return SENTINEL_EXIT_CODE


def cmd_ran(err: BaseException | None) -> bool:
    """Report whether the process behind an execution error actually started.

    Example:
        ```python
        started = cmd_ran(CommandNotStarted("nope", reason="not found"))  # False
        ```
    """
    if err is None:
        return True
    return bool(getattr(err, "ran", False))
