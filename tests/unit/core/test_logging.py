"""Tests for structured logging configuration."""

import json
import logging
from collections.abc import Iterator

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop handlers bound to a closed capture stream after each test."""
    yield
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(logging.WARNING)
    structlog.reset_defaults()


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        """get_logger returns a bound logger."""
        from stageplan.core.logging import get_logger

        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "debug")
        assert hasattr(logger, "bind")

    def test_logger_outputs_structured(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Logger outputs structured JSON."""
        from stageplan.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        logger = get_logger("test")

        logger.info("test message", key="value")

        captured = capsys.readouterr()
        log_line = captured.out.strip().split("\n")[-1]
        data = json.loads(log_line)
        assert data["event"] == "test message"
        assert data["key"] == "value"
        assert data["level"] == "info"

    def test_logger_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Logger outputs human-readable in console mode."""
        from stageplan.core.logging import configure_logging, get_logger

        configure_logging(json_output=False)
        logger = get_logger("test")

        logger.info("test message", key="value")

        captured = capsys.readouterr()
        assert "test message" in captured.out
        assert not captured.out.strip().startswith("{")

    def test_stdlib_logging_uses_same_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Records from logging.getLogger() go through the structlog chain."""
        from stageplan.core.logging import configure_logging

        configure_logging(json_output=True)
        logging.getLogger("planner").warning("phase %s split", "p1")

        captured = capsys.readouterr()
        data = json.loads(captured.out.strip().split("\n")[-1])
        assert data["event"] == "phase p1 split"
        assert data["level"] == "warning"

    def test_level_filters_debug(self, capsys: pytest.CaptureFixture[str]) -> None:
        from stageplan.core.logging import configure_logging, get_logger

        configure_logging(json_output=True, level="INFO")
        get_logger("test").debug("hidden")

        assert "hidden" not in capsys.readouterr().out

    def test_graph_construction_logged_at_debug(self, capsys: pytest.CaptureFixture[str]) -> None:
        from stageplan.core.dag import StageGraph
        from stageplan.core.logging import configure_logging

        configure_logging(json_output=True, level="DEBUG")
        StageGraph.from_connections([("a", "b"), ("b", "c")])

        lines = [json.loads(line) for line in capsys.readouterr().out.strip().split("\n") if line]
        events = [line for line in lines if line["event"] == "Stage graph validated"]
        assert events
        assert events[-1]["stages"] == 3
        assert events[-1]["sources"] == ["a"]
        assert events[-1]["sinks"] == ["c"]
        assert events[-1]["logger"] == "stageplan.core.dag.graph"

    def test_reconfigure_replaces_handlers(self) -> None:
        from stageplan.core.logging import configure_logging

        configure_logging()
        configure_logging()

        assert len(logging.getLogger().handlers) == 1

    def test_set_fields_rendered_as_sorted_lists(self, capsys: pytest.CaptureFixture[str]) -> None:
        from stageplan.core.dag import StageGraph
        from stageplan.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        graph = StageGraph.from_connections([("s2", "t"), ("s1", "t")])
        get_logger("planner").info("phase start", sources=graph.sources)

        data = json.loads(capsys.readouterr().out.strip().split("\n")[-1])
        assert data["sources"] == ["s1", "s2"]
        assert data["logger"] == "planner"

    def test_configure_from_settings(self, capsys: pytest.CaptureFixture[str]) -> None:
        from stageplan.core.config import PlannerSettings
        from stageplan.core.logging import configure_logging_from_settings, get_logger

        configure_logging_from_settings(PlannerSettings(log_level="warning", json_logs=True))
        logger = get_logger("planner")
        logger.info("hidden")
        logger.warning("shown")

        assert logging.getLogger().level == logging.WARNING
        lines = [json.loads(line) for line in capsys.readouterr().out.strip().split("\n") if line]
        assert [line["event"] for line in lines] == ["shown"]
