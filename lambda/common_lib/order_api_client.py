"""
Order API client used by the mobile app and other callers

Submits orders to POST /order. Server errors, timeouts and connection
failures are retried with exponential backoff; validation failures (400) and
any other unexpected status are returned straight away.
"""

import logging
import time
import uuid
from decimal import Decimal, InvalidOperation

import httpx

import response_utils as resp
from exceptions import TransientNetworkError, UnexpectedStatusError
from request_utils import REQUEST_ID_HEADER
from validation_utils import validate_email

logger = logging.getLogger(__name__)

MAX_RETRIES = 2
TIMEOUT_SECONDS = 30

SERVER_ERROR_MESSAGE = "Server error occurred. Please try again later."
TIMEOUT_MESSAGE = "Request timed out. Please check your connection and try again."


def build_result(success, message, order_id=None, validation_errors=None):
    return {
        'success': success,
        'orderId': order_id,
        'message': message,
        'validationErrors': validation_errors or []
    }


def _is_positive_number(value, integer=False):
    if isinstance(value, bool) or value is None:
        return False
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return False
    if not number.is_finite() or number <= 0:
        return False
    return number == number.to_integral_value() if integer else True


def validate_order_form(order):
    """
    Client-side checks run before anything is sent

    Args:
        order (dict): customerName, customerEmail and items as entered

    Returns:
        dict: field -> message for every problem found, empty when OK
    """
    errors = {}

    name = (order.get('customerName') or '').strip()
    if len(name) < 2:
        errors['customerName'] = "Customer name must be at least 2 characters"

    email = (order.get('customerEmail') or '').strip()
    if not validate_email(email):
        errors['customerEmail'] = "Please enter a valid email address"

    items = order.get('items') or []
    if not items:
        errors['items'] = "Order must contain at least one item"

    for index, item in enumerate(items):
        prefix = f"items[{index}]"
        if not str(item.get('productId') or '').strip():
            errors[f"{prefix}.productId"] = "Product ID is required"
        if not _is_positive_number(item.get('quantity'), integer=True):
            errors[f"{prefix}.quantity"] = "Quantity must be a positive number"
        if not _is_positive_number(item.get('price')):
            errors[f"{prefix}.price"] = "Price must be a positive number"

    return errors


def build_order_payload(order):
    """Request body for POST /order; only fields the API accepts are sent"""
    payload = {
        'customerName': order.get('customerName'),
        'customerEmail': order.get('customerEmail'),
        'items': [
            {
                'productId': item.get('productId'),
                'productName': item.get('productName') or None,
                'quantity': int(Decimal(str(item.get('quantity')).strip())),
                'price': Decimal(str(item.get('price')).strip())
            }
            for item in order.get('items') or []
        ]
    }
    if order.get('customerId'):
        payload['customerId'] = order['customerId']
    return payload


def _read_json(response):
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class OrderApiClient:
    """Submits orders with bounded retries"""

    def __init__(self, api_endpoint, http_client=None, max_retries=MAX_RETRIES,
                 timeout=TIMEOUT_SECONDS, sleep=time.sleep):
        self.api_endpoint = api_endpoint.rstrip('/')
        self.max_retries = max_retries
        self._client = http_client or httpx.Client(timeout=httpx.Timeout(timeout))
        self._sleep = sleep

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @staticmethod
    def backoff_delay(attempt):
        """Seconds to wait before retry number `attempt` (1-based): 2, 4, ..."""
        return 2 ** attempt

    def submit_order(self, order):
        """
        Submit an order to the API

        Args:
            order (dict): customerName, customerEmail, items and optional customerId

        Returns:
            dict: success, orderId, message and validationErrors
        """
        form_errors = validate_order_form(order)
        if form_errors:
            return build_result(
                False,
                "Please fix the validation errors",
                validation_errors=[f"{field}: {message}" for field, message in form_errors.items()]
            )

        payload = build_order_payload(order)
        request_id = str(uuid.uuid4())
        retry_count = 0

        while True:
            try:
                return self._post_order(payload, request_id)
            except TransientNetworkError as e:
                if retry_count >= self.max_retries:
                    logger.warning(f"Giving up on order submission {request_id} after {retry_count} retries: {e.message}")
                    return build_result(False, e.message)
                retry_count += 1
                delay = self.backoff_delay(retry_count)
                logger.warning(
                    f"Order submission {request_id} failed ({e.message}), "
                    f"retry {retry_count}/{self.max_retries} in {delay}s"
                )
                self._sleep(delay)
            except UnexpectedStatusError as e:
                logger.warning(f"Order submission {request_id} got unexpected status {e.status_code}")
                return build_result(False, e.message)
            except httpx.HTTPError as e:
                logger.error(f"Order submission {request_id} failed: {e}")
                return build_result(False, f"An error occurred: {e}")

    def _post_order(self, payload, request_id):
        try:
            response = self._client.post(
                f"{self.api_endpoint}/order",
                content=resp.safe_json_dumps(payload),
                headers={'Content-Type': 'application/json', REQUEST_ID_HEADER: request_id}
            )
        except httpx.TimeoutException as e:
            raise TransientNetworkError(TIMEOUT_MESSAGE) from e
        except httpx.TransportError as e:
            raise TransientNetworkError(f"Network error: {e}") from e

        status_code = response.status_code
        body = _read_json(response)

        if status_code == 200:
            data = body.get('data') or {}
            return build_result(
                True,
                data.get('message') or body.get('message') or "Order submitted successfully",
                order_id=data.get('orderId')
            )

        if status_code == 400:
            errors = body.get('errors') or []
            return build_result(
                False,
                body.get('message') or "Validation failed",
                validation_errors=[f"{e.get('field')}: {e.get('message')}" for e in errors if isinstance(e, dict)]
            )

        if status_code == 500:
            raise TransientNetworkError(body.get('message') or SERVER_ERROR_MESSAGE, status_code)

        raise UnexpectedStatusError(status_code)
