"""Tests for component logging."""

import logging

import pytest

from carbon_ledger.utils import logging_config
from carbon_ledger.utils.logging_config import ComponentLogger


@pytest.fixture
def fresh_logging():
    ComponentLogger.reset()
    yield
    ComponentLogger.reset()


class TestComponentLogger:
    def test_component_names(self, fresh_logging):
        logger = logging_config.get_logger('ledger')

        assert logger.name == "carbon_ledger.ledger"
        assert logger.propagate is True

    def test_module_paths_map_to_components(self, fresh_logging):
        assert logging_config.get_logger('carbon_ledger.core.minting').name == "carbon_ledger.ledger"
        assert logging_config.get_logger('carbon_ledger.repositories.memory_impl').name == "carbon_ledger.database"
        assert logging_config.get_logger('carbon_ledger.cli').name == "carbon_ledger.main"

    def test_no_log_directory_in_console_mode(self, fresh_logging):
        logging_config.initialize_logging()

        assert logging_config.get_log_directory() is None

    def test_file_mode_writes_component_files(self, fresh_logging, tmp_path, monkeypatch):
        config = logging_config.get_config()
        monkeypatch.setattr(config.app, "log_to_file", True)

        logging_config.initialize_logging(log_dir=str(tmp_path))
        logging_config.get_logger('ledger').info("minted 1")

        log_dir = logging_config.get_log_directory()
        assert log_dir is not None and log_dir.parent == tmp_path
        assert (log_dir / "ledger.log").exists()
        assert (log_dir / "unified.log").exists()

    def test_log_exception_includes_context(self, fresh_logging, caplog):
        with caplog.at_level(logging.ERROR, logger="carbon_ledger.ledger"):
            logging_config.log_exception('ledger', RuntimeError("boom"), {'operation': 'mint_one'})

        assert "RuntimeError: boom" in caplog.text
        assert "operation=mint_one" in caplog.text
