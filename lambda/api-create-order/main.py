import os
import sys

import boto3

# Add common_lib to the path
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'common_lib'))

from config_utils import OrderApiConfig
from db_utils import OrderStore
from logging_utils import configure_logging
from notification_manager import OrderEventPublisher
from order_manager import OrderSubmissionManager

# Built once per cold start; a missing variable fails the init phase
config = OrderApiConfig()
configure_logging(config.log_level)

order_manager = OrderSubmissionManager(
    order_store=OrderStore(boto3.client('dynamodb'), config.orders_table),
    event_publisher=OrderEventPublisher(boto3.client('sns'), config.order_topic_arn)
)


def lambda_handler(event, context):
    """Accept an order: validate, persist, publish the order event and respond"""
    return order_manager.handle(event, context)
