"""
Common exceptions used across the order pipeline
"""


class BusinessLogicError(Exception):
    """Custom exception for business logic errors"""
    def __init__(self, message, status_code=400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class FormatError(BusinessLogicError):
    """Request body could not be parsed into an order submission"""
    def __init__(self, message="Invalid JSON format"):
        super().__init__(message, 400)


class OrderValidationError(BusinessLogicError):
    """Order submission has one or more invalid fields"""
    def __init__(self, errors, message="Validation failed"):
        self.errors = errors
        super().__init__(message, 400)


class PersistError(BusinessLogicError):
    """Storage write failed; nothing can be assumed written"""
    def __init__(self, message="Failed to save order"):
        super().__init__(message, 500)


class PublishError(BusinessLogicError):
    """Event broadcast failed after the order was persisted"""
    def __init__(self, message="Order saved but failed to publish event", order_id=None):
        self.order_id = order_id
        super().__init__(message, 500)


class EventParseError(Exception):
    """Queued order event is malformed or missing required fields"""
    def __init__(self, message, message_id=None):
        self.message = message
        self.message_id = message_id
        super().__init__(self.message)


class EmailDeliveryError(Exception):
    """Email provider rejected or failed to send a message"""
    def __init__(self, message, error_code=None):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ConfigurationError(Exception):
    """Required configuration is missing; raised at cold start, never per request"""
    def __init__(self, message, variable=None):
        self.message = message
        self.variable = variable
        super().__init__(self.message)


class TransientNetworkError(Exception):
    """Timeout, connection failure or server error seen by the API client"""
    def __init__(self, message, status_code=None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class UnexpectedStatusError(Exception):
    """API answered with a status code the client does not handle"""
    def __init__(self, status_code):
        self.status_code = status_code
        self.message = f"Unexpected response: {status_code}"
        super().__init__(self.message)
