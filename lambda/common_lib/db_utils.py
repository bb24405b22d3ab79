import uuid
import logging
from decimal import Decimal, ROUND_HALF_UP
from botocore.exceptions import BotoCoreError, ClientError
from boto3.dynamodb.types import TypeDeserializer

from exceptions import PersistError
from logging_utils import utc_now_iso

logger = logging.getLogger(__name__)

deserializer = TypeDeserializer()

CENTS = Decimal('0.01')


def to_money(value):
    """Round a Decimal amount to cents"""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def deserialize_item(item):
    return {k: deserializer.deserialize(v) for k, v in item.items()} if item else None


def describe_client_error(error):
    if isinstance(error, ClientError):
        return error.response['Error'].get('Code'), error.response['Error'].get('Message')
    return type(error).__name__, str(error)


# ------------------  Order Table Functions ------------------

def calculate_order_totals(items):
    """
    Price order items server side

    Args:
        items (list): Submission items with quantity and price

    Returns:
        tuple: (priced items with subtotal, total amount)
    """
    priced_items = []
    total = Decimal('0')

    for item in items:
        price = Decimal(item['price'])
        subtotal = to_money(item['quantity'] * price)
        total += subtotal

        priced_items.append({
            'productId': item['productId'],
            'productName': item.get('productName'),
            'quantity': item['quantity'],
            'price': price,
            'subtotal': subtotal
        })

    return priced_items, total


def build_order_data(submission):
    """Assign server-side fields to a validated submission"""
    items, total_amount = calculate_order_totals(submission['items'])
    return {
        'orderId': str(uuid.uuid4()),
        'customerId': submission.get('customerId') or '',
        'customerName': submission['customerName'],
        'customerEmail': submission['customerEmail'],
        'items': items,
        'totalAmount': total_amount,
        'createdAt': utc_now_iso()
    }


def serialize_order(order):
    """Build the order item in DynamoDB format"""
    items_list = []
    for item in order['items']:
        item_data = {
            'productId': {'S': item['productId']},
            'quantity': {'N': str(item['quantity'])},
            'price': {'N': str(item['price'])},
            'subtotal': {'N': str(item['subtotal'])}
        }
        if item.get('productName') is not None:
            item_data['productName'] = {'S': item['productName']}
        items_list.append({'M': item_data})

    return {
        'orderId': {'S': order['orderId']},
        'customerId': {'S': order['customerId']},
        'customerName': {'S': order['customerName']},
        'customerEmail': {'S': order['customerEmail']},
        'items': {'L': items_list},
        'totalAmount': {'N': str(order['totalAmount'])},
        'createdAt': {'S': order['createdAt']}
    }


def deserialize_order(item):
    order = deserialize_item(item)
    if order is None:
        return None
    for order_item in order.get('items', []):
        order_item['quantity'] = int(order_item['quantity'])
        order_item.setdefault('productName', None)
    return order


class OrderStore:
    """Persists orders in DynamoDB keyed by orderId"""

    def __init__(self, dynamodb_client, table_name):
        self.dynamodb = dynamodb_client
        self.table_name = table_name

    def save(self, submission):
        """
        Persist a validated submission as a new order

        Args:
            submission (dict): Validated order submission

        Returns:
            dict: The stored order including orderId, totalAmount and createdAt

        Raises:
            PersistError: If the write did not succeed
        """
        order = build_order_data(submission)

        try:
            logger.info(f"Saving order {order['orderId']} to DynamoDB table {self.table_name}")
            self.dynamodb.put_item(
                TableName=self.table_name,
                Item=serialize_order(order),
                ConditionExpression='attribute_not_exists(orderId)'
            )
        except (ClientError, BotoCoreError) as e:
            error_code, error_message = describe_client_error(e)
            logger.error(f"DynamoDB error while saving order {order['orderId']}: {error_code} - {error_message}")
            raise PersistError() from e

        logger.info(f"Successfully saved order {order['orderId']}")
        return order

    def get(self, order_id):
        """Get an order by ID, None when it does not exist"""
        try:
            result = self.dynamodb.get_item(
                TableName=self.table_name,
                Key={'orderId': {'S': order_id}},
                ConsistentRead=True
            )
        except (ClientError, BotoCoreError) as e:
            error_code, error_message = describe_client_error(e)
            logger.error(f"Error getting order {order_id}: {error_code} - {error_message}")
            raise PersistError("Failed to read order") from e

        return deserialize_order(result.get('Item'))


# ------------------  Audit Table Functions ------------------

def serialize_audit_record(record):
    details = record['orderDetails']
    return {
        'auditId': {'S': record['auditId']},
        'timestamp': {'S': record['timestamp']},
        'orderId': {'S': record['orderId']},
        'eventType': {'S': record['eventType']},
        'orderDetails': {
            'M': {
                'customerId': {'S': details['customerId']},
                'customerName': {'S': details['customerName']},
                'customerEmail': {'S': details['customerEmail']},
                'itemCount': {'N': str(details['itemCount'])},
                'totalAmount': {'N': str(details['totalAmount'])}
            }
        }
    }


class AuditStore:
    """Append-only audit records in DynamoDB keyed by auditId"""

    def __init__(self, dynamodb_client, table_name):
        self.dynamodb = dynamodb_client
        self.table_name = table_name

    def put_record(self, record):
        try:
            self.dynamodb.put_item(
                TableName=self.table_name,
                Item=serialize_audit_record(record),
                ConditionExpression='attribute_not_exists(auditId)'
            )
        except (ClientError, BotoCoreError) as e:
            error_code, error_message = describe_client_error(e)
            logger.error(f"DynamoDB error creating audit record {record['auditId']}: {error_code} - {error_message}")
            raise PersistError("Failed to write audit record") from e
        return record
