import io
import sys

from sh_module.execution import ExecutionRequest, LocalEngine, StreamMode
from sh_module.execution.local_engine import expand

PY = sys.executable


def test_local_engine_captures_both_streams() -> None:
    engine = LocalEngine()
    outcome = engine.execute(
        ExecutionRequest(
            command=PY,
            arguments=["-c", "import sys; print('out'); print('err', file=sys.stderr)"],
        )
    )
    assert outcome.ran is True
    assert outcome.returncode == 0
    assert outcome.stdout == "out\n"
    assert outcome.stderr == "err\n"


def test_local_engine_reports_exit_code() -> None:
    outcome = LocalEngine().execute(
        ExecutionRequest(command=PY, arguments=["-c", "raise SystemExit(3)"])
    )
    assert outcome.ran is True
    assert outcome.returncode == 3


def test_local_engine_missing_executable_never_runs() -> None:
    outcome = LocalEngine().execute(ExecutionRequest(command="definitely-not-a-real-binary-xyz"))
    assert outcome.ran is False
    assert outcome.returncode is None
    assert outcome.error


def test_local_engine_forwards_and_discards() -> None:
    sink = io.StringIO()
    engine = LocalEngine(forward_stream=sink)
    outcome = engine.execute(
        ExecutionRequest(
            command=PY,
            arguments=["-c", "import sys; print('shown'); print('hidden', file=sys.stderr)"],
            stdout=StreamMode.FORWARD,
            stderr=StreamMode.DISCARD,
        )
    )
    assert outcome.stdout == ""
    assert outcome.stderr == ""
    assert sink.getvalue() == "shown\n"


def test_local_engine_forwards_straight_to_file_backed_stream(tmp_path) -> None:
    target = tmp_path / "forwarded.log"
    with target.open("w", encoding="utf-8") as sink:
        sink.write("before\n")
        engine = LocalEngine(forward_stream=sink)
        assert engine._target(StreamMode.FORWARD) == sink.fileno()
        outcome = engine.execute(
            ExecutionRequest(
                command=PY,
                arguments=["-c", "import sys; print('out'); print('err', file=sys.stderr)"],
                stdout=StreamMode.FORWARD,
                stderr=StreamMode.FORWARD,
            )
        )
    assert outcome.returncode == 0
    assert outcome.stdout == ""
    assert outcome.stderr == ""
    lines = target.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "before"
    assert sorted(lines[1:]) == ["err", "out"]


def test_local_engine_applies_env_overrides(monkeypatch) -> None:
    monkeypatch.setenv("SH_MODULE_BASE", "base")
    outcome = LocalEngine().execute(
        ExecutionRequest(
            command=PY,
            arguments=["-c", "import os; print(os.environ['SH_MODULE_BASE'], os.environ['SH_MODULE_EXTRA'])"],
            env={"SH_MODULE_EXTRA": "extra"},
        )
    )
    assert outcome.stdout == "base extra\n"


def test_local_engine_expands_arguments() -> None:
    outcome = LocalEngine().execute(
        ExecutionRequest(
            command=PY,
            arguments=["-c", "import sys; print(sys.argv[1])", "${TARGET}-$ARCH"],
            env={"TARGET": "linux", "ARCH": "arm64"},
        )
    )
    assert outcome.stdout == "linux-arm64\n"


def test_expand_prefers_overrides_then_base() -> None:
    base = {"HOME": "/home/dev", "GOOS": "darwin"}
    assert expand("$HOME/$GOOS", {"GOOS": "linux"}, base) == "/home/dev/linux"


def test_expand_unknown_variable_is_empty() -> None:
    assert expand("a${MISSING}b", {}, {}) == "ab"


def test_expand_leaves_plain_text_alone() -> None:
    assert expand("no variables; * | > here", {}, {}) == "no variables; * | > here"
