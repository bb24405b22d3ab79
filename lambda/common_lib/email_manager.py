"""
Email Management Module
Sends order confirmation emails for order events
"""

from email_utils import EmailTemplate, render_order_confirmation
from exceptions import EventParseError
from logging_utils import StructuredLogger


class OrderEmailNotifier:
    """
    Renders and sends the order confirmation email

    Redelivered events send the confirmation again. Provider failures are
    not retried here; they propagate so the queue redelivers the message.
    """

    def __init__(self, email_sender, template=EmailTemplate.DEFAULT_ORDER_CONFIRMATION, logger=None):
        self.email_sender = email_sender
        self.template = template
        self.logger = logger or StructuredLogger('EmailNotifier')

    def send_order_confirmation(self, order_event):
        """
        Send the confirmation for one order event

        Returns:
            str: Provider message id

        Raises:
            EventParseError: Event has no customer email to send to
            EmailDeliveryError: Provider call failed
        """
        order_id = order_event['orderId']
        customer_email = order_event.get('customerEmail')
        if not customer_email:
            raise EventParseError(f"Order event {order_id} has no customerEmail")

        self.logger.info(
            "Sending order confirmation email",
            data={'orderId': order_id, 'email': customer_email}
        )

        html_body = render_order_confirmation(self.template, order_event)
        subject = EmailTemplate.ORDER_CONFIRMATION_SUBJECT.format(order_id=order_id)

        try:
            message_id = self.email_sender.send_email(customer_email, subject, html_body)
        except Exception as e:
            self.logger.error(
                "Failed to send order confirmation email",
                exception=e,
                data={'orderId': order_id, 'email': customer_email}
            )
            raise

        self.logger.info(
            "Order confirmation email sent",
            data={'orderId': order_id, 'messageId': message_id}
        )
        return message_id
