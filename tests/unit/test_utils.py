"""Tests for logging, progress and display helpers."""

import logging
from pathlib import Path

from genomeannot.core.pipeline_types import StageRecord
from genomeannot.utils.display import ConsoleFormatter
from genomeannot.utils.logging import get_logger, level_from_name, setup_logging
from genomeannot.utils.progress import iter_progress


class TestLogging:
    """Namespaced logger configuration."""

    def test_get_logger_namespace(self):
        assert get_logger("pipeline").name == "genomeannot.pipeline"

    def test_level_from_name(self):
        assert level_from_name("debug") == logging.DEBUG
        assert level_from_name(None) == logging.WARNING
        assert level_from_name("loud", default=logging.INFO) == logging.INFO

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        setup_logging(level=logging.WARNING, log_file=log_file)
        get_logger("test").debug("detail for the file")
        app_logger = logging.getLogger("genomeannot")
        assert app_logger.propagate is False
        for handler in app_logger.handlers:
            handler.flush()
        assert "detail for the file" in log_file.read_text()

    def test_setup_logging_replaces_handlers(self):
        setup_logging(level=logging.INFO)
        setup_logging(level=logging.DEBUG)
        assert len(logging.getLogger("genomeannot").handlers) == 1


class TestProgress:
    """tqdm wrapper."""

    def test_disabled(self):
        assert list(iter_progress([1, 2, 3], enabled=False)) == [1, 2, 3]

    def test_enabled(self):
        assert list(iter_progress(["a", "b"], total=2, desc="Stages")) == ["a", "b"]


class TestConsoleFormatter:
    """Console output."""

    def test_format_plan(self):
        records = [
            StageRecord("busco", status="skipped"),
            StageRecord("repeat_modeler", status="planned", commands=["BuildDatabase -name x"]),
        ]
        text = ConsoleFormatter().format_plan(records)
        assert "1. busco (already completed)" in text
        assert "$ BuildDatabase -name x" in text

    def test_format_outputs_skips_absent(self):
        text = ConsoleFormatter().format_outputs(
            {"Masked genome": Path("/w/genome.fa.softmasked"), "RNA-seq BAM": None}
        )
        assert "Masked genome" in text
        assert "RNA-seq BAM" not in text

    def test_success_message(self):
        formatter = ConsoleFormatter()
        formatter.start_message()
        assert "mode: ETP" in formatter.success_message("ETP")
        assert "Time elapsed" in formatter.success_message("ETP")
