from decimal import Decimal

import pytest

from audit_manager import AuditRecorder, build_audit_record
from conftest import make_client_error
from db_utils import AuditStore, deserialize_item
from exceptions import EventParseError, PersistError


@pytest.fixture
def order_event():
    return {
        'orderId': 'order-123',
        'customerId': 'cust-1',
        'customerName': 'Jane Doe',
        'customerEmail': 'jane@x.com',
        'items': [{'productId': 'P1', 'quantity': 2, 'price': Decimal('9.99'), 'subtotal': Decimal('19.98')}],
        'totalAmount': Decimal('19.98'),
        'createdAt': '2024-01-01T10:00:00.000000Z'
    }


def test_build_audit_record_snapshot(order_event):
    record = build_audit_record(order_event)

    assert record['auditId']
    assert record['timestamp'].endswith('Z')
    assert record['orderId'] == 'order-123'
    assert record['eventType'] == 'ORDER_CREATED'
    assert record['orderDetails'] == {
        'customerId': 'cust-1',
        'customerName': 'Jane Doe',
        'customerEmail': 'jane@x.com',
        'itemCount': 1,
        'totalAmount': Decimal('19.98')
    }


class TestAuditRecorder:
    def test_records_order_created(self, dynamodb, order_event):
        recorder = AuditRecorder(AuditStore(dynamodb, 'order-audit'))

        record = recorder.record_order_created(order_event)

        (item,) = dynamodb.items('order-audit')
        stored = deserialize_item(item)
        assert stored['auditId'] == record['auditId']
        assert stored['orderId'] == 'order-123'
        assert stored['orderDetails']['totalAmount'] == Decimal('19.98')

    def test_redelivery_creates_new_record(self, dynamodb, order_event):
        recorder = AuditRecorder(AuditStore(dynamodb, 'order-audit'))

        first = recorder.record_order_created(order_event)
        second = recorder.record_order_created(order_event)

        assert first['auditId'] != second['auditId']
        assert len(dynamodb.items('order-audit')) == 2

    def test_missing_order_id_creates_nothing(self, dynamodb, order_event):
        order_event['orderId'] = ''
        recorder = AuditRecorder(AuditStore(dynamodb, 'order-audit'))

        with pytest.raises(EventParseError):
            recorder.record_order_created(order_event)
        assert dynamodb.items('order-audit') == []

    def test_write_failure_propagates(self, dynamodb, order_event):
        dynamodb.fail_put = make_client_error('PutItem')
        recorder = AuditRecorder(AuditStore(dynamodb, 'order-audit'))

        with pytest.raises(PersistError):
            recorder.record_order_created(order_event)
