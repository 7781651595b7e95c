"""Tests for configuration loading."""

import logging

from discard_engine.config import (
    EngineConfig, configure_logging, find_config_file, get_default_config, load_config, save_config,
)


class TestConfig:

    def test_defaults(self):
        config = get_default_config()
        assert config.enabled_rules == ["*"]
        assert config.max_findings_per_file is None
        assert config.max_total_findings is None
        assert config.jobs == 1
        assert "obj" in config.exclude_dirs
        assert config.log_level == "WARNING"

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(str(tmp_path / "absent.yml")) == EngineConfig()

    def test_load_merges_over_defaults(self, tmp_path):
        path = tmp_path / ".discard-lint.yml"
        path.write_text("jobs: 4\nenabled_rules:\n  - DiscardReturnValueAnalyzer\n")

        config = load_config(str(path))

        assert config.jobs == 4
        assert config.enabled_rules == ["DiscardReturnValueAnalyzer"]
        assert config.max_findings_per_file is None

    def test_unknown_keys_are_ignored(self, tmp_path, caplog):
        path = tmp_path / ".discard-lint.yml"
        path.write_text("jobs: 2\ncolour: blue\n")

        with caplog.at_level(logging.WARNING, logger="discard_engine.config"):
            config = load_config(str(path))

        assert config.jobs == 2
        assert "colour" in caplog.text

    def test_invalid_yaml_uses_defaults(self, tmp_path, caplog):
        path = tmp_path / ".discard-lint.yml"
        path.write_text("jobs: [unclosed\n")

        with caplog.at_level(logging.WARNING, logger="discard_engine.config"):
            config = load_config(str(path))

        assert config == EngineConfig()
        assert "Failed to load config" in caplog.text

    def test_non_mapping_uses_defaults(self, tmp_path):
        path = tmp_path / ".discard-lint.yml"
        path.write_text("- just\n- a list\n")
        assert load_config(str(path)) == EngineConfig()

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "discard-lint.yaml"
        config = EngineConfig(jobs=8, exclude_dirs=["build"], log_level="DEBUG")

        save_config(config, str(path))

        assert load_config(str(path)) == config

    def test_find_config_file_walks_up(self, tmp_path):
        path = tmp_path / ".discard-lint.yaml"
        path.write_text("jobs: 2\n")
        nested = tmp_path / "src" / "deep"
        nested.mkdir(parents=True)

        assert find_config_file(str(nested)) == str(path)

    def test_configure_logging(self):
        configure_logging(EngineConfig(log_level="debug"))
        try:
            assert logging.getLogger("discard_engine").level == logging.DEBUG
            assert logging.getLogger("discard_rules").level == logging.DEBUG
        finally:
            configure_logging(EngineConfig())

    def test_configure_logging_unknown_level(self, caplog):
        with caplog.at_level(logging.WARNING, logger="discard_engine.config"):
            configure_logging(EngineConfig(log_level="LOUD"))
        assert logging.getLogger("discard_engine").level == logging.WARNING
        assert "LOUD" in caplog.text
