from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class StreamMode(str, Enum):
    """Where one output stream of the child process goes.

    Example:
        ```python
        mode = StreamMode.CAPTURE
        ```
    """

    CAPTURE = "capture"
    FORWARD = "forward"
    DISCARD = "discard"


@dataclass(slots=True)
class ExecutionRequest:
    """Normalized request sent to an execution engine.

    Example:
        ```python
        req = ExecutionRequest(command="go", arguments=["build"], env={"CGO_ENABLED": "0"})
        ```
    """

    command: str
    arguments: list[str] = field(default_factory=list)
    env: dict[str, str] | None = None
    stdout: StreamMode = StreamMode.CAPTURE
    stderr: StreamMode = StreamMode.CAPTURE

    @property
    def command_line(self) -> str:
        """Return the command and its arguments joined for messages.

        Example:
            ```python
            text = ExecutionRequest(command="ls", arguments=["-l"]).command_line  # "ls -l"
            ```
        """
        return " ".join([self.command, *self.arguments])


@dataclass(slots=True)
class ExecutionOutcome:
    """Normalized response returned by an execution engine.

    `returncode` is None when the process never started; `error` then holds the reason.

    Example:
        ```python
        out = ExecutionOutcome(ran=True, returncode=0, stdout="hi\\n", stderr="")
        ```
    """

    ran: bool
    returncode: int | None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None
