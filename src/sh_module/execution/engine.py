from __future__ import annotations

from typing import Protocol

from .types import ExecutionOutcome, ExecutionRequest


class ExecutionEngine(Protocol):
    def execute(self, request: ExecutionRequest) -> ExecutionOutcome:
        """Run one external process and return its normalized outcome.

        Example:
            ```python
            outcome = engine.execute(ExecutionRequest(command="true"))
            ```
        """
        ...
