import os
import sys

import boto3

# Add common_lib to the path
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'common_lib'))

from config_utils import EmailConsumerConfig
from email_manager import OrderEmailNotifier
from email_utils import EmailSender, load_template
from logging_utils import StructuredLogger, configure_logging
from sqs_utils import iter_sqs_messages, parse_order_event

config = EmailConsumerConfig()
configure_logging(config.log_level)

logger = StructuredLogger('EmailQueueProcessor')

email_notifier = OrderEmailNotifier(
    email_sender=EmailSender(boto3.client('ses'), config.email_from),
    template=load_template(os.path.dirname(__file__))
)


def lambda_handler(event, context):
    """
    Send order confirmation emails for order events from SQS

    Any failure is re-raised so SQS redelivers the batch.
    """
    records = event.get('Records', [])
    logger.info(f"Processing {len(records)} messages from SQS")

    for message_id, body in iter_sqs_messages(event):
        try:
            order_event = parse_order_event(body, message_id)
            email_notifier.send_order_confirmation(order_event)
            logger.info("Processed message", data={'messageId': message_id, 'orderId': order_event['orderId']})
        except Exception as e:
            logger.error("Error processing message, it will be retried", exception=e, data={'messageId': message_id})
            raise

    logger.info("Completed processing all messages")
    return {'processed': len(records)}
