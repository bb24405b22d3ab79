import os
import re
import html
import logging
from decimal import Decimal
from botocore.exceptions import BotoCoreError, ClientError

from db_utils import describe_client_error, to_money
from exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


class EmailTemplate:
    """Email template constants and configurations"""

    ORDER_CONFIRMATION_SUBJECT = "Order Confirmation - Order #{order_id}"
    ORDER_CONFIRMATION_FILE = os.path.join('templates', 'order_confirmation.html')

    DEFAULT_ORDER_CONFIRMATION = """
<!DOCTYPE html>
<html>
<head>
    <style>
        body { font-family: Arial, sans-serif; }
        .header { background-color: #4CAF50; color: white; padding: 20px; text-align: center; }
        .content { padding: 20px; }
        table { width: 100%; border-collapse: collapse; }
        th, td { padding: 10px; text-align: left; border-bottom: 1px solid #ddd; }
    </style>
</head>
<body>
    <div class='header'><h1>Order Confirmation</h1></div>
    <div class='content'>
        <p>Dear {{CustomerName}},</p>
        <p>Thank you for your order!</p>
        <p><strong>Order ID:</strong> {{OrderId}}</p>
        <p><strong>Order Date:</strong> {{CreatedAt}}</p>
        <h3>Order Items:</h3>
        <table>
            <tr><th>Product</th><th>Quantity</th><th>Price</th><th>Subtotal</th></tr>
            {{OrderItems}}
        </table>
        <p><strong>Total: ${{TotalAmount}}</strong></p>
    </div>
</body>
</html>"""


def load_template(base_dir, relative_path=EmailTemplate.ORDER_CONFIRMATION_FILE):
    """Read a template shipped next to the function, falling back to the built-in one"""
    template_path = os.path.join(base_dir, relative_path)
    if os.path.isfile(template_path):
        with open(template_path, encoding='utf-8') as template_file:
            return template_file.read()
    logger.warning(f"Template {template_path} not found, using built-in order confirmation template")
    return EmailTemplate.DEFAULT_ORDER_CONFIRMATION


def format_money(value):
    return f"{to_money(Decimal(str(value))):.2f}"


def format_order_items_rows(items):
    """One table row per order item: name, quantity, price and subtotal"""
    rows = []
    for item in items:
        product_id = item.get('productId') or ''
        product_name = item.get('productName')
        label = f"{product_name} ({product_id})" if product_name else product_id
        quantity = int(item.get('quantity') or 0)
        price = Decimal(str(item.get('price') or 0))
        subtotal = item.get('subtotal')
        if subtotal is None:
            subtotal = quantity * price

        rows.append(
            "<tr>"
            f"<td>{html.escape(label)}</td>"
            f"<td>{quantity}</td>"
            f"<td>${format_money(price)}</td>"
            f"<td>${format_money(subtotal)}</td>"
            "</tr>"
        )
    return "\n".join(rows)


def render_order_confirmation(template, order_event):
    """Substitute order event values into a confirmation template"""
    replacements = {
        '{{CustomerName}}': html.escape(order_event.get('customerName') or ''),
        '{{OrderId}}': html.escape(order_event['orderId']),
        '{{CreatedAt}}': html.escape(order_event.get('createdAt') or ''),
        '{{OrderItems}}': format_order_items_rows(order_event.get('items') or []),
        '{{TotalAmount}}': format_money(order_event.get('totalAmount') or 0)
    }

    content = template
    for placeholder, value in replacements.items():
        content = content.replace(placeholder, value)
    return content


STYLE_BLOCK_PATTERN = re.compile(r'<style[^>]*>.*?</style>', re.IGNORECASE | re.DOTALL)
TAG_PATTERN = re.compile(r'<[^<]+?>')


def html_to_text(html_body):
    return TAG_PATTERN.sub('', STYLE_BLOCK_PATTERN.sub('', html_body))


class EmailSender:
    """Sends email through AWS SES"""

    def __init__(self, ses_client, from_address):
        self.ses = ses_client
        self.from_address = from_address

    def send_email(self, to_email, subject, html_body, text_body=None):
        """
        Send email using AWS SES

        Args:
            to_email (str): Recipient email address
            subject (str): Email subject
            html_body (str): HTML email body
            text_body (str): Plain text email body (optional)

        Returns:
            str: SES message id

        Raises:
            EmailDeliveryError: If SES did not accept the message
        """
        if not text_body:
            text_body = html_to_text(html_body)

        message = {
            'Subject': {'Data': subject, 'Charset': 'UTF-8'},
            'Body': {
                'Html': {'Data': html_body, 'Charset': 'UTF-8'},
                'Text': {'Data': text_body, 'Charset': 'UTF-8'}
            }
        }

        try:
            response = self.ses.send_email(
                Source=self.from_address,
                Destination={'ToAddresses': [to_email]},
                Message=message
            )
        except (ClientError, BotoCoreError) as e:
            error_code, error_message = describe_client_error(e)
            logger.error(f"Failed to send email to {to_email}. Error: {error_code} - {error_message}")
            raise EmailDeliveryError(f"Failed to send email to {to_email}: {error_message}", error_code) from e

        message_id = response['MessageId']
        logger.info(f"Email sent successfully to {to_email}. MessageId: {message_id}")
        return message_id
