"""
Order Management Module
Handles the order submission workflow: parse, validate, persist, publish
"""

import request_utils as req
import response_utils as resp
from exceptions import BusinessLogicError, OrderValidationError, PublishError
from logging_utils import StructuredLogger
from validation_utils import OrderDataValidator, parse_order_submission

ORDER_RECEIVED_MESSAGE = "Order received successfully"


class OrderSubmissionManager:
    """
    Orchestrates a single order submission

    Each stage raises a BusinessLogicError subclass carrying the status code
    the caller should see. A PublishError means the order is already stored;
    it is reported as a failure so operators know the event needs replaying.
    No stage is retried here, retries belong to the caller.
    """

    def __init__(self, order_store, event_publisher, validator=OrderDataValidator, logger=None):
        self.order_store = order_store
        self.event_publisher = event_publisher
        self.validator = validator
        self.logger = logger or StructuredLogger('OrderApi')

    def handle(self, event, context=None):
        """
        Process an API Gateway proxy event

        Returns:
            dict: API Gateway proxy response with an X-Request-Id header
        """
        request_id = req.get_request_id(event, context)
        self.logger.info("Processing order request", request_id=request_id)

        try:
            order = self.submit(req.get_raw_body(event), request_id)
        except OrderValidationError as e:
            return resp.validation_error_response(e.errors, request_id, e.message)
        except BusinessLogicError as e:
            return resp.error_response(e.message, e.status_code, request_id)
        except Exception as e:
            self.logger.error("Unexpected error processing order", exception=e, request_id=request_id)
            return resp.error_response("Internal server error", 500, request_id)

        confirmation = {
            'orderId': order['orderId'],
            'message': ORDER_RECEIVED_MESSAGE,
            'createdAt': order['createdAt']
        }
        return resp.success_response(confirmation, ORDER_RECEIVED_MESSAGE, request_id=request_id)

    def submit(self, raw_body, request_id=None):
        """
        Run the workflow for a raw request body

        Returns:
            dict: The persisted order

        Raises:
            FormatError: Body is not an order
            OrderValidationError: Submission violates one or more rules
            PersistError: Order could not be stored
            PublishError: Order stored but its event was not published
        """
        try:
            submission = parse_order_submission(raw_body)
        except BusinessLogicError as e:
            self.logger.warning("Invalid request body", data={'reason': e.message}, request_id=request_id)
            raise

        errors = self.validator.validate(submission)
        if errors:
            self.logger.warning("Order validation failed", data={'errors': errors}, request_id=request_id)
            raise OrderValidationError(errors)

        try:
            order = self.order_store.save(submission)
        except BusinessLogicError as e:
            self.logger.error("Failed to save order", exception=e, request_id=request_id)
            raise

        try:
            self.event_publisher.publish(order)
        except PublishError as e:
            self.logger.error(
                "Failed to publish order event",
                exception=e,
                data={'orderId': e.order_id, 'replayRequired': True},
                request_id=request_id
            )
            raise

        self.logger.info(
            "Order processed successfully",
            data={'orderId': order['orderId'], 'totalAmount': str(order['totalAmount'])},
            request_id=request_id
        )
        return order
