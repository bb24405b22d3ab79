"""
Validation utilities for order submissions

Parsing turns the raw request body into a submission dict and rejects bodies
that are not shaped like an order at all. Validation then runs every rule
against the parsed submission and reports all violations together.
"""

import json
import re
from decimal import Decimal

from exceptions import FormatError

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100
MAX_ITEMS = 50
MAX_QUANTITY = 1000
MAX_PRICE = Decimal('999999.99')


def validate_email(email):
    """Validate email format using regex"""
    if not email or not isinstance(email, str):
        return False
    return EMAIL_PATTERN.match(email) is not None


def _has_text(value):
    return bool(value and value.strip())


def _get_field(data, name):
    """Field lookup that tolerates differently cased JSON keys"""
    if name in data:
        return data[name]
    lowered = name.lower()
    for key, value in data.items():
        if isinstance(key, str) and key.lower() == lowered:
            return value
    return None


def _as_string(value, default=''):
    if value is None:
        return default
    if not isinstance(value, str):
        raise FormatError()
    return value


def _as_int(value):
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise FormatError()
    return value


def _as_decimal(value):
    if value is None:
        return Decimal('0')
    if isinstance(value, bool):
        raise FormatError()
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise FormatError()
        return value
    raise FormatError()


def _parse_item(raw_item):
    if not isinstance(raw_item, dict):
        raise FormatError()
    return {
        'productId': _as_string(_get_field(raw_item, 'productId')),
        'productName': _as_string(_get_field(raw_item, 'productName'), default=None),
        'quantity': _as_int(_get_field(raw_item, 'quantity')),
        'price': _as_decimal(_get_field(raw_item, 'price'))
    }


def parse_order_submission(raw_body):
    """
    Parse a raw request body into an order submission

    Server-computed fields such as subtotal and totalAmount are dropped if the
    caller sent them.

    Args:
        raw_body (str): JSON request body

    Returns:
        dict: Submission with customerId, customerName, customerEmail and items

    Raises:
        FormatError: If the body is empty, not JSON, or not shaped like an order
    """
    if raw_body is None or not str(raw_body).strip():
        raise FormatError("Request body is required")

    try:
        data = json.loads(raw_body, parse_float=Decimal)
    except (json.JSONDecodeError, TypeError, ValueError):
        raise FormatError()

    if not isinstance(data, dict):
        raise FormatError()

    raw_items = _get_field(data, 'items')
    if raw_items is not None and not isinstance(raw_items, list):
        raise FormatError()

    return {
        'customerId': _as_string(_get_field(data, 'customerId'), default=None),
        'customerName': _as_string(_get_field(data, 'customerName')),
        'customerEmail': _as_string(_get_field(data, 'customerEmail')),
        'items': None if raw_items is None else [_parse_item(item) for item in raw_items]
    }


class OrderDataValidator:
    """
    Order submission validator

    Rules are (field, check, message) entries evaluated in order; a check
    returns True when the value is acceptable. No rule depends on another.
    """

    ORDER_RULES = [
        ('customerName', lambda o: _has_text(o.get('customerName')),
         "Customer name is required"),
        ('customerName', lambda o: not _has_text(o.get('customerName')) or len(o['customerName']) >= MIN_NAME_LENGTH,
         f"Customer name must be at least {MIN_NAME_LENGTH} characters"),
        ('customerName', lambda o: not _has_text(o.get('customerName')) or len(o['customerName']) <= MAX_NAME_LENGTH,
         f"Customer name must not exceed {MAX_NAME_LENGTH} characters"),
        ('customerEmail', lambda o: _has_text(o.get('customerEmail')),
         "Customer email is required"),
        ('customerEmail', lambda o: not _has_text(o.get('customerEmail')) or validate_email(o['customerEmail']),
         "Customer email must be a valid email address"),
        ('items', lambda o: o.get('items') is not None,
         "Order items are required"),
        ('items', lambda o: o.get('items') is None or len(o['items']) > 0,
         "Order must contain at least one item"),
        ('items', lambda o: o.get('items') is None or len(o['items']) <= MAX_ITEMS,
         f"Order cannot contain more than {MAX_ITEMS} items"),
    ]

    ITEM_RULES = [
        ('productId', lambda i: _has_text(i.get('productId')),
         "Product ID is required"),
        ('quantity', lambda i: i.get('quantity', 0) > 0,
         "Quantity must be greater than 0"),
        ('quantity', lambda i: i.get('quantity', 0) <= MAX_QUANTITY,
         f"Quantity cannot exceed {MAX_QUANTITY}"),
        ('price', lambda i: i.get('price', Decimal('0')) > 0,
         "Price must be greater than 0"),
        ('price', lambda i: i.get('price', Decimal('0')) <= MAX_PRICE,
         f"Price cannot exceed {MAX_PRICE}"),
    ]

    @classmethod
    def validate(cls, submission):
        """
        Run every rule against a parsed submission

        Args:
            submission (dict): Output of parse_order_submission

        Returns:
            list: {'field', 'message'} dicts, empty when the submission is valid
        """
        errors = []

        for field, check, message in cls.ORDER_RULES:
            if not check(submission):
                errors.append({'field': field, 'message': message})

        for index, item in enumerate(submission.get('items') or []):
            for field, check, message in cls.ITEM_RULES:
                if not check(item):
                    errors.append({'field': f"items[{index}].{field}", 'message': message})

        return errors
