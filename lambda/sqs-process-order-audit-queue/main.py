import os
import sys

import boto3

# Add common_lib to the path
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'common_lib'))

from audit_manager import AuditRecorder
from config_utils import AuditConsumerConfig
from db_utils import AuditStore
from logging_utils import StructuredLogger, configure_logging
from sqs_utils import iter_sqs_messages, parse_order_event

config = AuditConsumerConfig()
configure_logging(config.log_level)

logger = StructuredLogger('AuditQueueProcessor')

audit_recorder = AuditRecorder(AuditStore(boto3.client('dynamodb'), config.audit_table))


def lambda_handler(event, context):
    """
    Write an audit record for each order event from SQS

    Any failure is re-raised so SQS redelivers the batch.
    """
    records = event.get('Records', [])
    logger.info(f"Processing {len(records)} messages from SQS")

    for message_id, body in iter_sqs_messages(event):
        try:
            order_event = parse_order_event(body, message_id)
            record = audit_recorder.record_order_created(order_event)
            logger.info(
                "Processed message",
                data={'messageId': message_id, 'orderId': order_event['orderId'], 'auditId': record['auditId']}
            )
        except Exception as e:
            logger.error("Error processing message, it will be retried", exception=e, data={'messageId': message_id})
            raise

    logger.info("Completed processing all messages")
    return {'processed': len(records)}
