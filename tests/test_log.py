import io
import json

from sh_module import ModuleConfig, create_dispatcher
from sh_module.execution import ExecutionOutcome, ExecutionRequest
from sh_module.log import build_logger, fields


def test_json_logger_emits_structured_fields() -> None:
    stream = io.StringIO()
    logger = build_logger(ModuleConfig(name="ShModuleJsonTest"), stream=stream)
    logger.info("Invoke called", extra=fields(method="Run", args=["ls"]))
    record = json.loads(stream.getvalue().strip())
    assert record["@level"] == "info"
    assert record["@message"] == "Invoke called"
    assert record["@module"] == "ShModuleJsonTest"
    assert record["method"] == "Run"
    assert record["args"] == ["ls"]
    assert "@timestamp" in record


def test_build_logger_respects_level() -> None:
    stream = io.StringIO()
    logger = build_logger(ModuleConfig(name="ShModuleLevelTest", log_level="ERROR"), stream=stream)
    logger.info("quiet")
    logger.error("loud")
    lines = stream.getvalue().strip().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["@message"] == "loud"


def test_build_logger_does_not_duplicate_handlers() -> None:
    config = ModuleConfig(name="ShModuleHandlersTest")
    build_logger(config, stream=io.StringIO())
    logger = build_logger(config, stream=io.StringIO())
    assert len(logger.handlers) == 1


def test_rich_logger_writes_message() -> None:
    stream = io.StringIO()
    logger = build_logger(ModuleConfig(name="ShModuleRichTest", log_format="rich"), stream=stream)
    logger.warning("rich output")
    assert "rich output" in stream.getvalue()


def test_rich_logger_renders_structured_fields() -> None:
    stream = io.StringIO()
    logger = build_logger(ModuleConfig(name="ShModuleRichFieldsTest", log_format="rich"), stream=stream)
    logger.info("Invoke called", extra=fields(method="RunWith", args=["go", "SHM_ARG_MARKER"]))
    text = stream.getvalue()
    assert "Invoke called" in text
    assert "method='RunWith'" in text
    assert "SHM_ARG_MARKER" in text


def test_rich_dispatcher_entry_log_carries_method_and_args() -> None:
    class _OkEngine:
        def execute(self, request: ExecutionRequest) -> ExecutionOutcome:
            return ExecutionOutcome(ran=True, returncode=0)

    stream = io.StringIO()
    dispatcher = create_dispatcher(
        ModuleConfig(name="ShModuleRichDispatchTest", log_format="rich"),
        engine=_OkEngine(),
        log_stream=stream,
    )
    dispatcher.invoke("Run", ["true", "SHM_ARG_MARKER"])
    text = stream.getvalue()
    assert "Run" in text
    assert "SHM_ARG_MARKER" in text
