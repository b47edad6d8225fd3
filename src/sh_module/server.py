from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TextIO

from .config import ModuleConfig
from .dispatcher import Dispatcher
from .errors import BoundaryTypeError, DecodeError
from .log import fields

CORE_PROTOCOL_VERSION = 1
_NOT_A_PLUGIN = (
    "This binary is a plugin. These are not meant to be executed directly.\n"
    "Please execute the program that consumes these plugins, which will\n"
    "load any plugins automatically\n"
)


@dataclass(frozen=True, slots=True)
class HandshakeConfig:
    """Values a host must present before invocations are accepted.

    Example:
        ```python
        handshake = HandshakeConfig(protocol_version=1, cookie_key="SH_MODULE_PLUGIN", cookie_value="abc")
        ```
    """

    protocol_version: int
    cookie_key: str
    cookie_value: str

    @classmethod
    def from_config(cls, config: ModuleConfig) -> "HandshakeConfig":
        """Build the handshake from module config.

        Example:
            ```python
            handshake = HandshakeConfig.from_config(ModuleConfig())
            ```
        """
        return cls(
            protocol_version=config.protocol_version,
            cookie_key=config.handshake_cookie_key,
            cookie_value=config.handshake_cookie_value,
        )

    def handshake_line(self) -> str:
        """Return `core|app|transport|codec`, with the configured version in the app slot.

        Example:
            ```python
            line = handshake.handshake_line()  # "1|1|stdio|jsonl"
            ```
        """
        return f"{CORE_PROTOCOL_VERSION}|{self.protocol_version}|stdio|jsonl"


def encode_result(result: Any) -> Any:
    """Convert a dispatcher result into a JSON-compatible value.

    A raw `DecodeError` is tagged with `"kind": "decode"` so hosts can tell it apart.

    Example:
        ```python
        payload = encode_result(DecodeError("not enough arguments"))
        ```
    """
    if isinstance(result, DecodeError):
        return {"error": str(result), "kind": "decode"}
    return result


def handle_line(dispatcher: Dispatcher, line: str, logger: logging.Logger) -> dict[str, Any]:
    """Answer one JSON request line.

    Example:
        ```python
        response = handle_line(dispatcher, '{"id": 1, "op": "methods"}', logger)
        ```
    """
    try:
        message = json.loads(line)
    except json.JSONDecodeError as exc:
        return {"id": None, "fault": f"invalid request: {exc}"}
    if not isinstance(message, dict):
        return {"id": None, "fault": "invalid request: expected a JSON object"}

    request_id = message.get("id")
    op = message.get("op")
    if op == "methods":
        return {"id": request_id, "result": dispatcher.methods()}
    if op != "invoke":
        return {"id": request_id, "fault": f"unknown op: {op}"}

    method = message.get("method")
    args = message.get("args", [])
    if not isinstance(method, str) or not isinstance(args, list):
        return {"id": request_id, "fault": "invoke requires a string 'method' and a list 'args'"}
    try:
        result = dispatcher.invoke(method, args)
    except BoundaryTypeError as exc:
        logger.error("invocation aborted", extra=fields(method=method, err=str(exc)))
        return {"id": request_id, "fault": str(exc)}
    except Exception as exc:
        logger.exception("invocation crashed", extra=fields(method=method))
        return {"id": request_id, "fault": f"internal error: {exc}"}
    return {"id": request_id, "result": encode_result(result)}


def serve(
    dispatcher: Dispatcher,
    handshake: HandshakeConfig,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
    environ: Mapping[str, str] | None = None,
    logger: logging.Logger | None = None,
) -> int:
    """Serve invocations over JSON lines until stdin closes.

    Returns 1 without serving when the magic cookie is missing or wrong.

    Example:
        ```python
        code = serve(create_dispatcher(), HandshakeConfig.from_config(ModuleConfig()))
        ```
    """
    reader = stdin if stdin is not None else sys.stdin
    writer = stdout if stdout is not None else sys.stdout
    errors = stderr if stderr is not None else sys.stderr
    env = os.environ if environ is None else environ
    log = logger or logging.getLogger(__name__)

    if env.get(handshake.cookie_key) != handshake.cookie_value:
        errors.write(_NOT_A_PLUGIN)
        return 1

    writer.write(handshake.handshake_line() + "\n")
    writer.flush()
    for line in reader:
        if not line.strip():
            continue
        response = handle_line(dispatcher, line, log)
        writer.write(json.dumps(response, default=str) + "\n")
        writer.flush()
    log.debug("host closed the connection")
    return 0
