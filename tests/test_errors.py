from sh_module import CommandFailed, CommandNotStarted, exit_status
from sh_module.errors import SENTINEL_EXIT_CODE, cmd_ran


def test_exit_status_success_is_zero() -> None:
    assert exit_status(None) == 0


def test_exit_status_uses_process_exit_code() -> None:
    assert exit_status(CommandFailed("false", exit_code=3)) == 3


def test_exit_status_keeps_signal_codes_negative() -> None:
    assert exit_status(CommandFailed("sleep 100", exit_code=-9)) == -9


def test_exit_status_sentinel_when_never_started() -> None:
    err = CommandNotStarted("nope", reason="No such file or directory")
    assert exit_status(err) == SENTINEL_EXIT_CODE


def test_exit_status_sentinel_for_unrelated_errors() -> None:
    assert exit_status(RuntimeError("boom")) == SENTINEL_EXIT_CODE


def test_error_messages() -> None:
    failed = CommandFailed("go build", exit_code=2)
    not_started = CommandNotStarted("nope -x", reason="not found")
    assert str(failed) == 'running "go build" failed with exit code 2'
    assert str(not_started) == 'failed to run "nope -x": not found'


def test_cmd_ran() -> None:
    assert cmd_ran(None) is True
    assert cmd_ran(CommandFailed("false", exit_code=1)) is True
    assert cmd_ran(CommandNotStarted("nope", reason="not found")) is False
