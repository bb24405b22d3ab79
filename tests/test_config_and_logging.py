import json
import logging

import pytest

from config_utils import AuditConsumerConfig, EmailConsumerConfig, OrderApiConfig, require_env
from exceptions import ConfigurationError
from logging_utils import StructuredLogger, configure_logging


class TestConfiguration:
    def test_order_api_config(self):
        config = OrderApiConfig({'ORDER_TABLE_NAME': 'orders', 'ORDER_TOPIC_ARN': 'arn:topic', 'LOG_LEVEL': 'debug'})

        assert config.orders_table == 'orders'
        assert config.order_topic_arn == 'arn:topic'
        assert config.log_level == 'DEBUG'

    def test_log_level_defaults_to_info(self):
        assert EmailConsumerConfig({'EMAIL_FROM': 'orders@example.com'}).log_level == 'INFO'

    @pytest.mark.parametrize('environ,missing', [
        ({'ORDER_TOPIC_ARN': 'arn:topic'}, 'ORDER_TABLE_NAME'),
        ({'ORDER_TABLE_NAME': 'orders'}, 'ORDER_TOPIC_ARN'),
        ({'ORDER_TABLE_NAME': '  ', 'ORDER_TOPIC_ARN': 'arn:topic'}, 'ORDER_TABLE_NAME'),
    ])
    def test_missing_order_api_settings(self, environ, missing):
        with pytest.raises(ConfigurationError) as exc_info:
            OrderApiConfig(environ)
        assert exc_info.value.variable == missing
        assert exc_info.value.message == f"{missing} environment variable is not set"

    def test_missing_consumer_settings(self):
        with pytest.raises(ConfigurationError):
            EmailConsumerConfig({})
        with pytest.raises(ConfigurationError):
            AuditConsumerConfig({})

    def test_require_env_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv('AUDIT_TABLE_NAME', ' order-audit ')
        assert require_env('AUDIT_TABLE_NAME') == 'order-audit'


class TestStructuredLogger:
    def test_entry_fields(self):
        entry = StructuredLogger('OrderApi').build_entry(
            logging.INFO, "Processing order request", data={'orderId': 'o-1'}, request_id='req-1'
        )

        assert entry['level'] == 'INFO'
        assert entry['component'] == 'OrderApi'
        assert entry['message'] == "Processing order request"
        assert entry['requestId'] == 'req-1'
        assert entry['data'] == {'orderId': 'o-1'}
        assert entry['timestamp'].endswith('Z')

    def test_error_entry_includes_exception(self, caplog):
        logger = StructuredLogger('AuditRecorder')

        try:
            raise ValueError("bad event")
        except ValueError as e:
            with caplog.at_level(logging.ERROR, logger='AuditRecorder'):
                logger.error("Failed to create audit record", exception=e)

        (record,) = caplog.records
        entry = json.loads(record.getMessage())
        assert entry['error']['type'] == 'ValueError'
        assert entry['error']['message'] == 'bad event'
        assert 'Traceback' in entry['error']['stackTrace']

    def test_component_is_required(self):
        with pytest.raises(ValueError):
            StructuredLogger('')

    def test_configure_logging_sets_root_level(self):
        root = logging.getLogger()
        previous = root.level
        try:
            configure_logging('warning')
            assert root.level == logging.WARNING
        finally:
            root.setLevel(previous)
