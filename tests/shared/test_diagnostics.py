"""Tests for diagnostics module."""

import logging
from unittest.mock import patch

import psutil

from terrain_contours.shared.diagnostics import get_memory_info, log_memory_usage


class TestGetMemoryInfo:
    """Tests for get_memory_info function."""

    def test_returns_expected_keys(self):
        """Should return process and system memory figures."""
        info = get_memory_info()
        assert 'process_rss_mb' in info
        assert 'system_available_mb' in info
        assert info['process_rss_mb'] > 0

    def test_psutil_error(self):
        """psutil failures are reported in the dict."""
        with patch('psutil.Process', side_effect=psutil.Error('boom')):
            info = get_memory_info()
        assert 'error' in info


class TestLogMemoryUsage:
    """Tests for log_memory_usage function."""

    def test_logs_context(self, caplog):
        """Context label appears in the log record."""
        with caplog.at_level(logging.INFO, logger='terrain_contours.shared.diagnostics'):
            log_memory_usage('after 50 decoded tiles')
        assert 'after 50 decoded tiles' in caplog.text
