import json
import logging
from decimal import Decimal

from request_utils import REQUEST_ID_HEADER

logger = logging.getLogger(__name__)

response_headers = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token,X-Request-Id",
    "Access-Control-Allow-Methods": "OPTIONS,POST"
}

def convert_decimal(obj):
    """Convert Decimal objects to float for JSON serialization"""
    if isinstance(obj, list):
        return [convert_decimal(i) for i in obj]
    elif isinstance(obj, dict):
        return {k: convert_decimal(v) for k, v in obj.items()}
    elif isinstance(obj, Decimal):
        return float(obj)
    return obj

def safe_json_dumps(data):
    """Serialize data to JSON, converting Decimals first"""
    return json.dumps(convert_decimal(data), default=str)

def build_headers(request_id):
    headers = dict(response_headers)
    if request_id:
        headers[REQUEST_ID_HEADER] = request_id
    return headers

def error_response(message, status_code=400, request_id=None, errors=None):
    logger.info(f"Error response: {message} (status: {status_code})")

    response_body = {
        "success": False,
        "message": message
    }
    if errors:
        response_body["errors"] = errors

    return {
        "statusCode": status_code,
        "headers": build_headers(request_id),
        "body": safe_json_dumps(response_body)
    }

def validation_error_response(errors, request_id=None, message="Validation failed"):
    return error_response(message, 400, request_id, errors=errors)

def success_response(data, message, status_code=200, request_id=None):
    response_body = {
        "success": True,
        "message": message,
        "data": data
    }

    return {
        "statusCode": status_code,
        "headers": build_headers(request_id),
        "body": safe_json_dumps(response_body)
    }
