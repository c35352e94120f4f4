"""
Unit tests for the collector runner: logging setup and entry point wiring.
"""

import json
import logging

import pytest
from unittest.mock import MagicMock, patch

from contract_collector.config import CollectorConfig
from contract_collector.errors import ConfigError
from contract_collector.runner import (
    JsonLogFormatter,
    build_service,
    main,
    parse_args,
    setup_logging,
)
from contract_collector.service import CollectorService


@pytest.fixture
def restore_logging():
    """Undo root logger changes made by setup_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config():
    return CollectorConfig(
        chain_id='osmo-test-4',
        redis_endpoint='localhost:6379',
        collector_queue_name='collector',
        health_check_queue_name='health_check',
    )


class TestJsonLogFormatter:
    """Tests for JsonLogFormatter."""

    def test_formats_single_json_line(self):
        """A record becomes one JSON object with service fields."""
        formatter = JsonLogFormatter('collector', 'osmo-test-4')
        record = logging.LogRecord('collector', logging.WARNING, __file__, 1, 'Pushed %d', (3,), None)

        entry = json.loads(formatter.format(record))

        assert entry['level'] == 'warning'
        assert entry['message'] == 'Pushed 3'
        assert entry['service'] == 'collector'
        assert entry['chain_id'] == 'osmo-test-4'
        assert 'time' in entry


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_sets_level(self, restore_logging):
        """The root level is set and the service logger returned."""
        logger = setup_logging('debug', 'text', 'Collector')

        assert logging.getLogger().level == logging.DEBUG
        assert logger.name == 'collector'

    def test_json_formatter_by_default(self, restore_logging):
        """JSON output is the default."""
        setup_logging('info')
        assert isinstance(logging.getLogger().handlers[0].formatter, JsonLogFormatter)

    def test_unknown_level(self, restore_logging):
        """Unknown levels are config errors."""
        with pytest.raises(ConfigError):
            setup_logging('loud')


class TestBuildService:
    """Tests for build_service."""

    def test_wires_components(self, config):
        """Config is wired into a CollectorService."""
        with patch('contract_collector.queue.redis.Redis'):
            service = build_service(config, logging.getLogger('test'))

        assert isinstance(service, CollectorService)
        assert service.get_status()['health_check_queue'] == 'health_check'


class TestMain:
    """Tests for the main entry point."""

    def test_parse_args(self):
        """Command line flags are parsed."""
        args = parse_args(['--env-file', 'prod.env', '-v'])
        assert args.env_file == 'prod.env'
        assert args.verbose

    def test_config_error_exits_non_zero(self, capsys):
        """Config errors go to stderr and exit with 1."""
        with patch.object(CollectorConfig, 'from_env', side_effect=ConfigError("CHAIN_ID is required")):
            assert main([]) == 1

        assert "CHAIN_ID is required" in capsys.readouterr().err

    def test_clean_shutdown(self, config, restore_logging):
        """A clean run exits with 0 after installing signal handlers."""
        service = MagicMock()
        with patch.object(CollectorConfig, 'from_env', return_value=config), \
                patch('contract_collector.runner.build_service', return_value=service), \
                patch('contract_collector.runner.signal.signal') as install:
            assert main([]) == 0

        service.run.assert_called_once()
        assert install.call_count == 2

    def test_bad_redis_endpoint_exits_non_zero(self, config, restore_logging):
        """An endpoint rejected while wiring dependencies exits cleanly with 1."""
        with patch.object(CollectorConfig, 'from_env', return_value=config), \
                patch('contract_collector.runner.build_service', side_effect=ValueError("invalid port")), \
                patch('contract_collector.runner.signal.signal') as install:
            assert main([]) == 1

        install.assert_not_called()

    def test_bad_redis_port_from_config_exits_non_zero(self, config, restore_logging):
        """A bad port that bypassed config validation still exits with 1."""
        config.redis_endpoint = 'localhost:abc'
        with patch.object(CollectorConfig, 'from_env', return_value=config), \
                patch('contract_collector.runner.signal.signal'):
            assert main([]) == 1

    def test_service_failure_exits_non_zero(self, config, restore_logging):
        """A failing service exits with 1."""
        service = MagicMock()
        service.run.side_effect = ConnectionError("redis down")
        with patch.object(CollectorConfig, 'from_env', return_value=config), \
                patch('contract_collector.runner.build_service', return_value=service), \
                patch('contract_collector.runner.signal.signal'):
            assert main([]) == 1

    def test_signal_handler_stops_service(self, config, restore_logging):
        """SIGINT/SIGTERM stop the service."""
        service = MagicMock()
        with patch.object(CollectorConfig, 'from_env', return_value=config), \
                patch('contract_collector.runner.build_service', return_value=service), \
                patch('contract_collector.runner.signal.signal') as install:
            main([])

        handler = install.call_args_list[0][0][1]
        handler(2, None)
        service.stop.assert_called_once()
