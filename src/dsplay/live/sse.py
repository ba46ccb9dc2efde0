"""Server-Sent Events transport over ASGI.

Sends ``text/event-stream`` headers (with any cookies the stream carries),
writes each already-encoded event as a body chunk, watches for client
disconnect, and sends heartbeat comments while the stream is idle.
"""

import asyncio
import contextlib
import logging
from typing import Any

from dsplay._internal.asgi import Receive, Send, encode_headers
from dsplay.http.response import LiveResponse

logger = logging.getLogger("dsplay.server")

SSE_HEADERS: tuple[tuple[str, str], ...] = (
    ("content-type", "text/event-stream"),
    ("cache-control", "no-cache"),
    ("connection", "keep-alive"),
    ("x-accel-buffering", "no"),
)


async def handle_sse(response: LiveResponse, send: Send, receive: Receive) -> None:
    """Stream *response* until its events end or the client disconnects.

    1. Sends ``http.response.start``. Cookies go out here; nothing the
       stream does afterwards can change them.
    2. Runs two tasks:
       - **Event producer**: pulls the next event and sends it, or sends a
         ``: heartbeat`` comment when none arrives within the interval.
       - **Disconnect monitor**: awaits ``http.disconnect`` and lets the
         producer be cancelled.
    3. Closes the body and the event iterator.
    """
    headers = list(SSE_HEADERS)
    headers.extend(cookie.header() for cookie in response.cookies)
    await send(
        {
            "type": "http.response.start",
            "status": 200,
            "headers": encode_headers(headers),
        }
    )

    disconnected = asyncio.Event()
    events = response.events

    async def monitor_disconnect() -> None:
        while not disconnected.is_set():
            message = await receive()
            if message.get("type") == "http.disconnect":
                disconnected.set()
                return

    async def produce_events() -> None:
        # asyncio.wait leaves the pending __anext__ running on timeout, so
        # one pull survives across heartbeat intervals.
        pending_next: asyncio.Task[Any] | None = None
        try:
            iterator = events.__aiter__()
            while not disconnected.is_set():
                if pending_next is None:

                    async def _next() -> Any:
                        return await iterator.__anext__()

                    pending_next = asyncio.create_task(_next())

                done, _ = await asyncio.wait({pending_next}, timeout=response.heartbeat_interval)

                if not done:
                    if disconnected.is_set():
                        break
                    try:
                        await send(
                            {
                                "type": "http.response.body",
                                "body": b": heartbeat\n\n",
                                "more_body": True,
                            }
                        )
                    except RuntimeError:
                        break  # client gone
                    continue

                pending_next = None
                try:
                    chunk = done.pop().result()
                except StopAsyncIteration:
                    break

                try:
                    await send(
                        {
                            "type": "http.response.body",
                            "body": chunk.encode("utf-8"),
                            "more_body": True,
                        }
                    )
                except RuntimeError:
                    break  # client gone
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Live stream failed")
        finally:
            if pending_next is not None:
                if not pending_next.done():
                    pending_next.cancel()
                with contextlib.suppress(asyncio.CancelledError, StopAsyncIteration):
                    await pending_next

    producer_task = asyncio.create_task(produce_events())
    monitor_task = asyncio.create_task(monitor_disconnect())

    try:
        _done, pending = await asyncio.wait(
            {producer_task, monitor_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
        for task in pending:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
    finally:
        aclose = getattr(events, "aclose", None)
        if aclose is not None:
            with contextlib.suppress(RuntimeError):
                await aclose()
        with contextlib.suppress(RuntimeError):
            await send(
                {
                    "type": "http.response.body",
                    "body": b"",
                    "more_body": False,
                }
            )
