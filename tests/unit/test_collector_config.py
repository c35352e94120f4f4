"""
Unit tests for CollectorConfig environment loading.
"""

import pytest
from unittest.mock import patch

from contract_collector.config import CollectorConfig
from contract_collector.errors import ConfigError

REQUIRED_ENV = {
    'CHAIN_ID': 'osmo-test-4',
    'REDIS_ENDPOINT': 'localhost:6379',
    'REDIS_DATABASE': '0',
    'COLLECTOR_QUEUE_NAME': 'collector',
    'HEALTH_CHECK_QUEUE_NAME': 'health_check',
}


class TestCollectorConfigFromEnv:
    """Tests for CollectorConfig.from_env."""

    def test_required_values(self):
        """Required variables populate the config."""
        config = CollectorConfig.from_env(environ=REQUIRED_ENV)

        assert config.chain_id == 'osmo-test-4'
        assert config.redis_endpoint == 'localhost:6379'
        assert config.redis_database == 0
        assert config.collector_queue_name == 'collector'
        assert config.health_check_queue_name == 'health_check'

    def test_defaults(self):
        """Optional settings fall back to defaults."""
        config = CollectorConfig.from_env(environ=REQUIRED_ENV)

        assert config.service_name == 'collector'
        assert config.log_level == 'info'
        assert config.log_format == 'json'
        assert config.rpc_timeout == 5.0
        assert config.queue_pop_timeout == 5

    def test_optional_overrides(self):
        """Optional variables override the defaults."""
        env = dict(
            REQUIRED_ENV,
            SERVICE_NAME='Collector-A',
            LOG_LEVEL='DEBUG',
            LOG_FORMAT='Text',
            RPC_TIMEOUT_SECONDS='2.5',
            QUEUE_POP_TIMEOUT_SECONDS='1',
        )
        config = CollectorConfig.from_env(environ=env)

        assert config.service_name == 'Collector-A'
        assert config.log_level == 'debug'
        assert config.log_format == 'text'
        assert config.rpc_timeout == 2.5
        assert config.queue_pop_timeout == 1

    def test_missing_values_are_all_reported(self):
        """Every missing variable is named in one error."""
        with pytest.raises(ConfigError) as exc_info:
            CollectorConfig.from_env(environ={'CHAIN_ID': 'osmo-test-4'})

        message = str(exc_info.value)
        for name in ('REDIS_ENDPOINT', 'REDIS_DATABASE', 'COLLECTOR_QUEUE_NAME', 'HEALTH_CHECK_QUEUE_NAME'):
            assert name in message

    def test_invalid_numbers(self):
        """Non-numeric values are reported by variable name."""
        env = dict(REQUIRED_ENV, REDIS_DATABASE='zero', RPC_TIMEOUT_SECONDS='fast')

        with pytest.raises(ConfigError) as exc_info:
            CollectorConfig.from_env(environ=env)

        assert 'REDIS_DATABASE' in str(exc_info.value)
        assert 'RPC_TIMEOUT_SECONDS' in str(exc_info.value)

    def test_invalid_log_format(self):
        """Unknown log formats are rejected."""
        with pytest.raises(ConfigError):
            CollectorConfig.from_env(environ=dict(REQUIRED_ENV, LOG_FORMAT='xml'))

    @pytest.mark.parametrize("endpoint", ["localhost:abc", ":6379", "localhost:0", "http://redis.internal"])
    def test_invalid_redis_endpoint(self, endpoint):
        """Malformed Redis endpoints are reported as config errors."""
        with pytest.raises(ConfigError) as exc_info:
            CollectorConfig.from_env(environ=dict(REQUIRED_ENV, REDIS_ENDPOINT=endpoint))

        assert 'REDIS_ENDPOINT' in str(exc_info.value)

    @pytest.mark.parametrize("endpoint", ["redis.internal", "redis.internal:6380", "rediss://user:pw@redis.internal:6379"])
    def test_valid_redis_endpoint(self, endpoint):
        """host, host:port and redis URLs are accepted."""
        config = CollectorConfig.from_env(environ=dict(REQUIRED_ENV, REDIS_ENDPOINT=endpoint))
        assert config.redis_endpoint == endpoint

    def test_loads_dotenv_file(self, tmp_path, monkeypatch):
        """Values can come from a .env file."""
        for name in REQUIRED_ENV:
            monkeypatch.delenv(name, raising=False)
        env_file = tmp_path / '.env'
        env_file.write_text('\n'.join(f'{k}={v}' for k, v in REQUIRED_ENV.items()))

        with patch.dict('os.environ', {}, clear=False):
            config = CollectorConfig.from_env(env_file=str(env_file))

        assert config.chain_id == 'osmo-test-4'
        assert config.health_check_queue_name == 'health_check'
