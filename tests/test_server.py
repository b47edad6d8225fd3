import io
import json
import logging

from sh_module import DecodeError, Dispatcher, Shell
from sh_module.execution import ExecutionOutcome, ExecutionRequest
from sh_module.server import HandshakeConfig, encode_result, serve

HANDSHAKE = HandshakeConfig(protocol_version=1, cookie_key="SH_MODULE_PLUGIN", cookie_value="cookie")


class _OkEngine:
    def execute(self, request: ExecutionRequest) -> ExecutionOutcome:
        return ExecutionOutcome(ran=True, returncode=0, stdout=f"{request.command}\n", stderr="")


def _serve(lines: list[str], *, wire_compat: bool = False, environ: dict | None = None) -> tuple[int, list[str], str]:
    dispatcher = Dispatcher(Shell(_OkEngine()), wire_compat=wire_compat)
    out = io.StringIO()
    err = io.StringIO()
    code = serve(
        dispatcher,
        HANDSHAKE,
        stdin=io.StringIO("".join(line + "\n" for line in lines)),
        stdout=out,
        stderr=err,
        environ={"SH_MODULE_PLUGIN": "cookie"} if environ is None else environ,
        logger=logging.getLogger("sh_module.tests.server"),
    )
    return code, out.getvalue().splitlines(), err.getvalue()


def test_serve_rejects_missing_cookie() -> None:
    code, out, err = _serve([], environ={})
    assert code == 1
    assert out == []
    assert "This binary is a plugin" in err


def test_serve_writes_handshake_first() -> None:
    code, out, _ = _serve([])
    assert code == 0
    assert out == ["1|1|stdio|jsonl"]


def test_handshake_line_puts_configured_version_in_app_slot() -> None:
    handshake = HandshakeConfig(protocol_version=3, cookie_key="SH_MODULE_PLUGIN", cookie_value="cookie")
    assert handshake.handshake_line() == "1|3|stdio|jsonl"


def test_serve_methods_and_invoke() -> None:
    _, out, _ = _serve(
        [
            json.dumps({"id": 1, "op": "methods"}),
            "",
            json.dumps({"id": 2, "op": "invoke", "method": "Output", "args": [{}, "echo"]}),
            json.dumps({"id": 3, "op": "invoke", "method": "Bogus", "args": []}),
        ]
    )
    responses = [json.loads(line) for line in out[1:]]
    assert responses[0] == {"id": 1, "result": Dispatcher.methods()}
    assert responses[1] == {"id": 2, "result": {"output": "echo", "code": 0}}
    assert responses[2] == {"id": 3, "result": {"error": "unknown method: Bogus"}}


def test_serve_survives_bad_lines_and_boundary_errors() -> None:
    _, out, _ = _serve(
        [
            "not json",
            json.dumps([1, 2]),
            json.dumps({"id": 4, "op": "invoke", "method": "RunWith", "args": ["nope", "ls"]}),
            json.dumps({"id": 5, "op": "reboot"}),
            json.dumps({"id": 6, "op": "invoke", "method": "Run", "args": ["ls"]}),
        ]
    )
    responses = [json.loads(line) for line in out[1:]]
    assert responses[0]["fault"].startswith("invalid request")
    assert responses[1]["fault"].startswith("invalid request")
    assert responses[2]["id"] == 4 and "environment" in responses[2]["fault"]
    assert responses[3] == {"id": 5, "fault": "unknown op: reboot"}
    assert responses[4] == {"id": 6, "result": {"code": 0}}


def test_serve_tags_raw_decode_errors() -> None:
    _, out, _ = _serve(
        [json.dumps({"id": 7, "op": "invoke", "method": "Run", "args": []})],
        wire_compat=True,
    )
    assert json.loads(out[1]) == {"id": 7, "result": {"error": "not enough arguments", "kind": "decode"}}


def test_encode_result_passes_envelopes_through() -> None:
    envelope = {"code": 0}
    assert encode_result(envelope) is envelope
    assert encode_result(DecodeError("x")) == {"error": "x", "kind": "decode"}
