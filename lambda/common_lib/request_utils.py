import base64
import uuid

REQUEST_ID_HEADER = 'X-Request-Id'


def get_header(event, key, default=None):
    """Header lookup that ignores case, API Gateway passes headers as sent"""
    headers = event.get('headers') or {}
    if key in headers:
        return headers[key]
    lowered = key.lower()
    for name, value in headers.items():
        if name.lower() == lowered:
            return value
    return default


def get_raw_body(event):
    """Return the request body as text, decoding base64 payloads"""
    body = event.get('body')
    if body is None:
        return None
    if event.get('isBase64Encoded'):
        try:
            return base64.b64decode(body).decode('utf-8')
        except (ValueError, UnicodeDecodeError):
            return None
    return body


def get_request_id(event, context=None):
    """
    Resolve the correlation id echoed back in the response

    Prefers a caller-supplied X-Request-Id header, then the Lambda request id,
    and generates one as a last resort.
    """
    request_id = get_header(event, REQUEST_ID_HEADER)
    if request_id and str(request_id).strip():
        return str(request_id).strip()

    aws_request_id = getattr(context, 'aws_request_id', None)
    if aws_request_id:
        return aws_request_id

    return str(uuid.uuid4())
