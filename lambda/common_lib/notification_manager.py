"""
Notification Management Module
Publishes order events to the SNS topic the downstream queues subscribe to
"""

import logging
from botocore.exceptions import BotoCoreError, ClientError

import response_utils as resp
from db_utils import describe_client_error
from exceptions import PublishError

logger = logging.getLogger(__name__)

ORDER_CREATED_EVENT = 'ORDER_CREATED'


def build_order_event(order):
    """Denormalized event payload for a persisted order"""
    return {
        'orderId': order['orderId'],
        'customerId': order.get('customerId') or '',
        'customerName': order['customerName'],
        'customerEmail': order['customerEmail'],
        'items': [
            {
                'productId': item['productId'],
                'productName': item.get('productName'),
                'quantity': item['quantity'],
                'price': item['price'],
                'subtotal': item['subtotal']
            }
            for item in order['items']
        ],
        'totalAmount': order['totalAmount'],
        'createdAt': order['createdAt']
    }


class OrderEventPublisher:
    """Publishes order events to a single SNS topic"""

    def __init__(self, sns_client, topic_arn):
        self.sns = sns_client
        self.topic_arn = topic_arn

    def publish(self, order):
        """
        Publish the event for a persisted order

        Delivery is at-least-once; subscribers may see the same event twice.

        Args:
            order (dict): Order returned by OrderStore.save

        Returns:
            str: SNS message id

        Raises:
            PublishError: If SNS did not accept the message
        """
        order_id = order['orderId']
        message = resp.safe_json_dumps(build_order_event(order))

        try:
            logger.info(f"Publishing order event for {order_id} to SNS topic {self.topic_arn}")
            response = self.sns.publish(
                TopicArn=self.topic_arn,
                Message=message,
                Subject=f"Order Created: {order_id}",
                MessageAttributes={
                    'eventType': {
                        'DataType': 'String',
                        'StringValue': ORDER_CREATED_EVENT
                    }
                }
            )
        except (ClientError, BotoCoreError) as e:
            error_code, error_message = describe_client_error(e)
            logger.error(f"SNS error while publishing order event for {order_id}: {error_code} - {error_message}")
            raise PublishError(order_id=order_id) from e

        message_id = response.get('MessageId')
        logger.info(f"Successfully published order event for {order_id}, MessageId: {message_id}")
        return message_id
