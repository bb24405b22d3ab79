import importlib.util
import json
import os
import re
import sys
import uuid
from types import SimpleNamespace

import pytest
from botocore.exceptions import ClientError

LAMBDA_DIR = os.path.join(os.path.dirname(__file__), '..', 'lambda')


def make_client_error(operation, code='InternalServerError', message='Service unavailable'):
    return ClientError({'Error': {'Code': code, 'Message': message}}, operation)


class FakeDynamoDB:
    """In-memory stand-in for the low-level DynamoDB client"""

    def __init__(self):
        self.tables = {}
        self.fail_put = None

    def put_item(self, TableName, Item, ConditionExpression=None):
        if self.fail_put:
            raise self.fail_put
        table = self.tables.setdefault(TableName, {})
        key_name = re.search(r'attribute_not_exists\((\w+)\)', ConditionExpression or '').group(1)
        key = Item[key_name]['S']
        if key in table:
            raise make_client_error('PutItem', 'ConditionalCheckFailedException', 'The conditional request failed')
        table[key] = Item
        return {}

    def get_item(self, TableName, Key, ConsistentRead=False):
        (key_value,) = Key.values()
        item = self.tables.get(TableName, {}).get(key_value['S'])
        return {'Item': item} if item else {}

    def items(self, table_name):
        return list(self.tables.get(table_name, {}).values())


class FakeSNS:
    def __init__(self):
        self.published = []
        self.fail_publish = None

    def publish(self, **kwargs):
        if self.fail_publish:
            raise self.fail_publish
        self.published.append(kwargs)
        return {'MessageId': str(uuid.uuid4())}


class FakeSES:
    def __init__(self):
        self.sent = []
        self.fail_send = None

    def send_email(self, **kwargs):
        if self.fail_send:
            raise self.fail_send
        self.sent.append(kwargs)
        return {'MessageId': str(uuid.uuid4())}


@pytest.fixture
def dynamodb():
    return FakeDynamoDB()


@pytest.fixture
def sns():
    return FakeSNS()


@pytest.fixture
def ses():
    return FakeSES()


@pytest.fixture
def aws_env(monkeypatch):
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('ORDER_TABLE_NAME', 'orders')
    monkeypatch.setenv('ORDER_TOPIC_ARN', 'arn:aws:sns:us-east-1:123456789012:order-events')
    monkeypatch.setenv('EMAIL_FROM', 'orders@example.com')
    monkeypatch.setenv('AUDIT_TABLE_NAME', 'order-audit')


def valid_order_body(**overrides):
    body = {
        'customerName': 'Jane Doe',
        'customerEmail': 'jane@x.com',
        'items': [{'productId': 'P1', 'quantity': 2, 'price': 9.99}]
    }
    body.update(overrides)
    return body


def api_event(body, headers=None):
    if not isinstance(body, str) and body is not None:
        body = json.dumps(body)
    return {
        'httpMethod': 'POST',
        'path': '/order',
        'headers': headers or {'Content-Type': 'application/json'},
        'body': body,
        'isBase64Encoded': False
    }


def lambda_context(request_id='lambda-request-1'):
    return SimpleNamespace(aws_request_id=request_id, function_name='test-function')


def sqs_event(*bodies):
    return {
        'Records': [
            {'messageId': f"msg-{index}", 'body': body, 'eventSource': 'aws:sqs'}
            for index, body in enumerate(bodies)
        ]
    }


def sns_envelope(message):
    return json.dumps({
        'Type': 'Notification',
        'MessageId': str(uuid.uuid4()),
        'TopicArn': 'arn:aws:sns:us-east-1:123456789012:order-events',
        'Message': message
    })


def load_lambda(function_dir):
    """Import a Lambda main.py under a unique module name"""
    path = os.path.join(LAMBDA_DIR, function_dir, 'main.py')
    module_name = f"lambda_{function_dir.replace('-', '_')}_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    finally:
        sys.modules.pop(module_name, None)
    return module
