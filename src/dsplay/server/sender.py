"""ASGI response sending for buffered responses."""

from dsplay._internal.asgi import Send, encode_headers
from dsplay.http.response import Response


def _body_allowed(status: int) -> bool:
    # 1xx, 204, and 304 responses carry no message body
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send) -> None:
    """Translate a Response into ASGI send() calls."""
    headers = [("content-type", response.content_type), *response.headers]
    headers.extend(cookie.header() for cookie in response.cookies)

    body = response.body_bytes if _body_allowed(response.status) else b""
    if _body_allowed(response.status):
        headers.append(("content-length", str(len(body))))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": encode_headers(headers),
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
