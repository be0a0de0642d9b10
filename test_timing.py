#!/usr/bin/env python3
"""
tests for performance monitoring, config, and logging setup.

run with: pytest test_timing.py -v
"""

import logging

import pytest

from ubicity.core.config import UbicityConfig
from ubicity.core.logs import setup_logging
from ubicity.core.timing import PerformanceMonitor


class TestPerformanceMonitor:
    """test named timers."""

    def test_start_end(self):
        """test a start/end pair records one duration."""
        monitor = PerformanceMonitor()
        monitor.start("op")
        duration = monitor.end("op")
        assert duration >= 0
        assert monitor.get_stats("op").count == 1

    def test_end_without_start(self, caplog):
        """test unmatched end warns and returns zero."""
        monitor = PerformanceMonitor()
        with caplog.at_level(logging.WARNING, logger="ubicity.timing"):
            assert monitor.end("never") == 0.0
        assert "no start mark" in caplog.text
        assert monitor.get_stats("never") is None

    def test_stats(self):
        """test percentile summary over recorded values."""
        monitor = PerformanceMonitor()
        for value in range(1, 101):
            monitor.record("op", float(value))
        stats = monitor.get_stats("op")
        assert stats.count == 100
        assert stats.min == 1.0
        assert stats.max == 100.0
        assert stats.mean == pytest.approx(50.5)
        assert stats.median == 51.0
        assert stats.p95 == 96.0

    def test_timed_records_on_exception(self):
        """test timed() records even when the block raises."""
        monitor = PerformanceMonitor()
        with pytest.raises(RuntimeError):
            with monitor.timed("fails"):
                raise RuntimeError("boom")
        assert monitor.get_stats("fails").count == 1

    def test_reset(self):
        """test reset clears everything."""
        monitor = PerformanceMonitor()
        monitor.record("op", 1.0)
        monitor.reset()
        assert monitor.get_all_stats() == {}


class TestConfig:
    """test configuration defaults."""

    def test_defaults(self):
        """test documented defaults."""
        config = UbicityConfig.default()
        assert config.storage.data_dir == "./ubicity-data"
        assert config.analysis.hotspot_min_diversity == 3
        assert config.analysis.report_connection_limit == 10

    def test_minimal(self, tmp_path):
        """test minimal config roots storage."""
        config = UbicityConfig.minimal(str(tmp_path))
        assert config.storage.data_dir == str(tmp_path)

    def test_env_unset(self, monkeypatch):
        """test from_env without override keeps default."""
        monkeypatch.delenv("UBICITY_DATA_DIR", raising=False)
        assert UbicityConfig.from_env().storage.data_dir == "./ubicity-data"


class TestLogging:
    """test logging setup."""

    def test_setup_replaces_handlers(self, tmp_path):
        """test repeated setup does not stack handlers."""
        setup_logging(logging.INFO)
        logger = setup_logging(logging.DEBUG, log_file=str(tmp_path / "ubicity.log"))
        assert logger.name == "ubicity"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2

        logging.getLogger("ubicity.test").debug("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in (tmp_path / "ubicity.log").read_text(encoding="utf-8")

        setup_logging(logging.WARNING)
        assert len(logger.handlers) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
