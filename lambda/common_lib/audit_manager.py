"""
Audit Management Module
Writes immutable audit records for order events
"""

import uuid

from exceptions import EventParseError
from logging_utils import StructuredLogger, utc_now_iso

ORDER_CREATED_EVENT_TYPE = 'ORDER_CREATED'


def build_audit_record(order_event):
    """Snapshot of an order event as a new audit record"""
    return {
        'auditId': str(uuid.uuid4()),
        'timestamp': utc_now_iso(),
        'orderId': order_event['orderId'],
        'eventType': ORDER_CREATED_EVENT_TYPE,
        'orderDetails': {
            'customerId': order_event.get('customerId') or '',
            'customerName': order_event.get('customerName') or '',
            'customerEmail': order_event.get('customerEmail') or '',
            'itemCount': len(order_event.get('items') or []),
            'totalAmount': order_event['totalAmount']
        }
    }


class AuditRecorder:
    """
    Records one audit entry per order event delivery

    Writes are keyed by a fresh auditId, so a redelivered event produces a
    second record rather than overwriting the first.
    """

    def __init__(self, audit_store, logger=None):
        self.audit_store = audit_store
        self.logger = logger or StructuredLogger('AuditRecorder')

    def record_order_created(self, order_event):
        """
        Write the audit record for an order event

        Returns:
            dict: The stored audit record

        Raises:
            EventParseError: Event has no orderId
            PersistError: Audit table write failed
        """
        order_id = order_event.get('orderId')
        if not order_id:
            raise EventParseError("Order event missing required field orderId")

        record = build_audit_record(order_event)
        self.logger.info(
            "Creating audit record",
            data={'orderId': order_id, 'auditId': record['auditId']}
        )

        try:
            self.audit_store.put_record(record)
        except Exception as e:
            self.logger.error(
                "Failed to create audit record",
                exception=e,
                data={'orderId': order_id, 'auditId': record['auditId']}
            )
            raise

        self.logger.info(
            "Audit record created",
            data={'orderId': order_id, 'auditId': record['auditId']}
        )
        return record
