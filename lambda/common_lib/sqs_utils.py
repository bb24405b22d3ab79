"""
SQS utilities for the order event consumers
Queues are subscribed to the order SNS topic, so bodies arrive either raw or
wrapped in an SNS notification envelope depending on the subscription.
"""

import json
from decimal import Decimal, InvalidOperation

from exceptions import EventParseError


def iter_sqs_messages(event):
    """Yield (message_id, body) for each SQS record in a Lambda event"""
    for record in event.get('Records', []):
        yield record.get('messageId'), record.get('body')


def unwrap_sns_envelope(payload):
    if isinstance(payload, dict) and payload.get('Type') == 'Notification' and 'Message' in payload:
        message = payload['Message']
        if isinstance(message, str):
            return json.loads(message, parse_float=Decimal)
        return message
    return payload


def parse_order_event(body, message_id=None):
    """
    Parse an order event from an SQS message body

    Args:
        body (str): Raw SQS body
        message_id (str): SQS message id, used in error messages

    Returns:
        dict: Order event with Decimal amounts and list items

    Raises:
        EventParseError: If the body is not JSON or lacks an orderId
    """
    if not body:
        raise EventParseError(f"Empty message body for message {message_id}", message_id)

    try:
        payload = unwrap_sns_envelope(json.loads(body, parse_float=Decimal))
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        raise EventParseError(f"Invalid message format for message {message_id}", message_id) from e

    if not isinstance(payload, dict):
        raise EventParseError(f"Invalid message format for message {message_id}", message_id)

    order_id = payload.get('orderId')
    if not order_id or not isinstance(order_id, str) or not order_id.strip():
        raise EventParseError(f"Order event missing required field orderId in message {message_id}", message_id)

    items = payload.get('items') or []
    if not isinstance(items, list):
        raise EventParseError(f"Order event items must be a list in message {message_id}", message_id)

    try:
        total_amount = Decimal(str(payload.get('totalAmount') or 0))
    except InvalidOperation as e:
        raise EventParseError(f"Order event totalAmount is not a number in message {message_id}", message_id) from e

    return {
        'orderId': order_id,
        'customerId': payload.get('customerId') or '',
        'customerName': payload.get('customerName') or '',
        'customerEmail': payload.get('customerEmail') or '',
        'items': items,
        'totalAmount': total_amount,
        'createdAt': payload.get('createdAt') or ''
    }
