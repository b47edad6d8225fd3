from pathlib import Path

import pytest

from sh_module import ModuleConfig


def test_default_config_values() -> None:
    config = ModuleConfig()
    assert config.name == "ShModule"
    assert config.log_level == "DEBUG"
    assert config.log_format == "json"
    assert config.wire_compat is False
    assert config.protocol_version == 1


def test_config_from_module_table(tmp_path: Path) -> None:
    path = tmp_path / "sh_module.toml"
    path.write_text(
        '[module]\nlog_level = "info"\nlog_format = "rich"\nwire_compat = true\nverbose = true\n',
        encoding="utf-8",
    )
    config = ModuleConfig.from_file(str(path))
    assert config.log_level == "INFO"
    assert config.log_format == "rich"
    assert config.wire_compat is True
    assert config.verbose is True
    assert config.config_path == str(path)


def test_config_from_flat_document(tmp_path: Path) -> None:
    path = tmp_path / "flat.toml"
    path.write_text('name = "Builder"\n', encoding="utf-8")
    assert ModuleConfig.from_file(str(path)).name == "Builder"


def test_missing_config_file_uses_defaults(tmp_path: Path) -> None:
    config = ModuleConfig.from_file(str(tmp_path / "absent.toml"))
    assert config.name == "ShModule"


def test_invalid_log_format_rejected() -> None:
    with pytest.raises(ValueError, match="log_format"):
        ModuleConfig(log_format="xml")


def test_invalid_log_level_rejected() -> None:
    with pytest.raises(ValueError, match="log_level"):
        ModuleConfig(log_level="TRACE")


def test_non_boolean_flag_rejected(tmp_path: Path) -> None:
    path = tmp_path / "bad.toml"
    path.write_text('[module]\nwire_compat = "yes"\n', encoding="utf-8")
    with pytest.raises(ValueError, match="wire_compat"):
        ModuleConfig.from_file(str(path))
