"""
Structured logging shared by all Lambda functions

Every entry is written as a single JSON document so CloudWatch Logs Insights
can filter on component, requestId and the attached data.
"""

import json
import logging
import traceback
from datetime import datetime, timezone


def configure_logging(level='INFO'):
    """Set the root logger level the Lambda runtime already attached a handler to"""
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    return logger


def utc_now_iso():
    """Current UTC time in ISO-8601 with a trailing Z"""
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ')


class StructuredLogger:
    """Logs JSON entries tagged with a component name"""

    def __init__(self, component, logger=None):
        if not component:
            raise ValueError("component is required")
        self.component = component
        self.logger = logger or logging.getLogger(component)

    def info(self, message, data=None, request_id=None):
        self._log(logging.INFO, message, data, request_id)

    def warning(self, message, data=None, request_id=None):
        self._log(logging.WARNING, message, data, request_id)

    def error(self, message, exception=None, data=None, request_id=None):
        self._log(logging.ERROR, message, data, request_id, exception)

    def _log(self, level, message, data, request_id, exception=None):
        if not self.logger.isEnabledFor(level):
            return
        entry = self.build_entry(level, message, data, request_id, exception)
        self.logger.log(level, json.dumps(entry, default=str))

    def build_entry(self, level, message, data=None, request_id=None, exception=None):
        entry = {
            'timestamp': utc_now_iso(),
            'level': logging.getLevelName(level),
            'component': self.component,
            'message': message
        }

        if request_id:
            entry['requestId'] = request_id

        if data is not None:
            entry['data'] = data

        if exception is not None:
            entry['error'] = {
                'type': type(exception).__name__,
                'message': str(exception),
                'stackTrace': ''.join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                )
            }

        return entry
