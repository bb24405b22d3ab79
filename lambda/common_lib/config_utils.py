"""
Environment configuration for the order pipeline Lambda functions

Each function builds its config once at cold start. A missing variable raises
ConfigurationError at import time so the function never serves a request
half-configured.
"""

import os

from exceptions import ConfigurationError

DEFAULT_LOG_LEVEL = 'INFO'


def require_env(name, environ=None):
    """
    Read a required environment variable

    Args:
        name (str): Variable name
        environ (dict): Mapping to read from (defaults to os.environ)

    Returns:
        str: The variable value

    Raises:
        ConfigurationError: If the variable is unset or blank
    """
    environ = os.environ if environ is None else environ
    value = environ.get(name, '')
    if not value or not value.strip():
        raise ConfigurationError(f"{name} environment variable is not set", name)
    return value.strip()


def get_log_level(environ=None):
    environ = os.environ if environ is None else environ
    return (environ.get('LOG_LEVEL') or DEFAULT_LOG_LEVEL).upper()


class OrderApiConfig:
    """Configuration for the order submission API"""

    def __init__(self, environ=None):
        self.orders_table = require_env('ORDER_TABLE_NAME', environ)
        self.order_topic_arn = require_env('ORDER_TOPIC_ARN', environ)
        self.log_level = get_log_level(environ)


class EmailConsumerConfig:
    """Configuration for the order confirmation email consumer"""

    def __init__(self, environ=None):
        self.email_from = require_env('EMAIL_FROM', environ)
        self.log_level = get_log_level(environ)


class AuditConsumerConfig:
    """Configuration for the order audit consumer"""

    def __init__(self, environ=None):
        self.audit_table = require_env('AUDIT_TABLE_NAME', environ)
        self.log_level = get_log_level(environ)
