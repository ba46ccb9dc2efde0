"""Tests for live-update streams over the ASGI transport."""

import asyncio

from dsplay.bridge import session_subject, tab_subject
from dsplay.testing import TestClient


async def _wait_for_subscriber(app, subject: str) -> None:
    for _ in range(200):
        if app.bridge.subscriber_count(subject):
            return
        await asyncio.sleep(0.005)
    msg = f"nobody subscribed to {subject}"
    raise AssertionError(msg)


class TestStreamBasics:
    async def test_headers_and_first_patch(self, make_app) -> None:
        app = make_app({"clock/live.html": "<p id='c'>{{ url }}</p>"})
        async with TestClient(app) as client:
            result = await client.live("/clock/", max_events=1)
        assert result.status == 200
        assert result.headers["content-type"] == "text/event-stream"
        assert result.headers["cache-control"] == "no-cache"
        assert result.patches[0] == "<p id='c'>/clock/</p>"

    async def test_session_cookie_sent_with_headers(self, make_app) -> None:
        app = make_app({"clock/live.html": "tick"})
        async with TestClient(app) as client:
            result = await client.live("/clock/", max_events=1)
            assert "ds-play" in client.cookies
        assert len(result.cookies) == 1
        assert result.cookies[0].startswith("ds-play=")

    async def test_looping_stream(self, make_app) -> None:
        app = make_app({"clock/live.html": "---\nloop: true\ninterval: 10\n---\na\n===\nb\n===\nc"})
        async with TestClient(app) as client:
            result = await client.live("/clock/", max_events=4)
        assert result.patches[:4] == ["a", "b", "c", "a"]

    async def test_counted_stream_ends_on_its_own(self, make_app) -> None:
        app = make_app(
            {
                "intro/live_001.html": "---\nloop: true\ninterval: 10\ncount: 3\n---\nA",
                "intro/live_002.html": "B1\n===\nB2",
            }
        )
        async with TestClient(app) as client:
            result = await client.live("/intro/", max_events=50)
        assert result.patches == ["A", "A", "A", "B1", "B2"]

    async def test_drain_with_delay(self, make_app) -> None:
        app = make_app({"steps/live.html": "---\ndelay: 10\n---\none\n===\ntwo"})
        async with TestClient(app) as client:
            result = await client.live("/steps/", max_events=2)
        assert result.patches[:2] == ["one", "two"]

    async def test_multiline_fragment(self, make_app) -> None:
        app = make_app({"card/live.html": "<div id='card'>\n  <b>hi</b>\n</div>"})
        async with TestClient(app) as client:
            result = await client.live("/card/", max_events=1)
        event = result.events[0]
        assert event.event == "datastar-patch-elements"
        assert event.data.split("\n") == [
            "elements <div id='card'>",
            "elements   <b>hi</b>",
            "elements </div>",
        ]

    async def test_heartbeats_while_idle(self, make_app) -> None:
        app = make_app({"idle/live.html": "only"}, sse_heartbeat_interval=0.01)
        async with TestClient(app) as client:
            result = await client.live("/idle/", max_events=10, disconnect_after=0.2)
        assert result.patches == ["only"]
        assert result.heartbeats >= 1

    async def test_render_error_ends_stream(self, make_app) -> None:
        app = make_app({"bad/live.html": "{% if %}"})
        async with TestClient(app) as client:
            result = await client.live("/bad/", max_events=5)
        assert result.status == 200
        assert result.events == ()


class TestStreamSelection:
    async def test_live_file_for_method(self, make_app) -> None:
        app = make_app({"form/post_live.html": "streamed", "form/post.html": "plain"})
        async with TestClient(app) as client:
            result = await client.live("/form/", method="POST", signals={"x": 1}, max_events=1)
            plain = await client.post("/form/")
        assert result.patches == ["streamed"]
        assert plain.text == "plain"

    async def test_falls_back_to_html_without_live_file(self, make_app) -> None:
        app = make_app({"counter/get_live.html": "stream", "counter/post.html": "posted"})
        async with TestClient(app) as client:
            response = await client.datastar("POST", "/counter/", signals={"n": 1})
        assert response.status == 200
        assert response.text == "posted"

    async def test_signals_available_in_stream(self, make_app) -> None:
        app = make_app({"greet/live.html": "hello {{ signals.name }}"})
        async with TestClient(app) as client:
            result = await client.live("/greet/", signals={"name": "owl"}, max_events=1)
        assert result.patches == ["hello owl"]


class TestStreamCursor:
    async def test_non_looping_stream_advances_cursor(self, make_app) -> None:
        app = make_app({"x/live.html": "---\ndelay: 10\n---\none\n===\ntwo"})
        async with TestClient(app) as client:
            await client.live("/x/", max_events=1)
            state = app.sessions.decode_cookie(client.cookies["ds-play"])
        assert state.seq_positions == {"/x/:live:GET": 1}

    async def test_looping_stream_resumes_stored_cursor(self, make_app) -> None:
        app = make_app({"x/live.html": "---\nloop: true\ninterval: 5000\n---\na\n===\nb"})
        async with TestClient(app) as client:
            state = app.sessions.new()
            state.seq_positions["/x/:live:GET"] = 1
            client.cookies["ds-play"] = app.sessions.cookie(state).value
            result = await client.live("/x/", max_events=1)
        assert result.patches[0] == "b"


class TestBridge:
    async def test_session_publish_rerenders_stream(self, make_app) -> None:
        app = make_app(
            {
                "index.html": "home",
                "chat/get_live.html": "<p>{{ signals.msg }}</p>",
                "chat/post.html": "",
            }
        )
        async with TestClient(app) as client:
            await client.get("/")
            session_id = app.sessions.decode_cookie(client.cookies["ds-play"]).session_id

            stream = asyncio.create_task(
                client.live("/chat/", signals={"msg": "hi"}, max_events=2)
            )
            await _wait_for_subscriber(app, session_subject("dspen", session_id))

            response = await client.datastar("POST", "/chat/", signals={"msg": "yo"})
            result = await stream

        assert response.status == 204
        assert result.patches[:2] == ["<p>hi</p>", "<p>yo</p>"]

    async def test_tab_publish_crosses_sessions(self, make_app) -> None:
        app = make_app(
            {
                "chat/get_live.html": "<p>{{ signals.msg }}</p>",
                "chat/post.html": "",
            }
        )
        async with TestClient(app) as viewer, TestClient(app) as sender:
            stream = asyncio.create_task(
                viewer.live("/chat/", signals={"tab_id": "t1", "msg": "first"}, max_events=2)
            )
            await _wait_for_subscriber(app, tab_subject("dspen", "t1"))

            await sender.datastar("POST", "/chat/", signals={"tab_id": "t1", "msg": "second"})
            result = await stream

        assert result.patches[:2] == ["<p>first</p>", "<p>second</p>"]

    async def test_stream_unsubscribes_on_disconnect(self, make_app) -> None:
        app = make_app({"index.html": "home", "chat/live.html": "x"})
        async with TestClient(app) as client:
            await client.get("/")
            session_id = app.sessions.decode_cookie(client.cookies["ds-play"]).session_id
            await client.live("/chat/", max_events=1)
        assert app.bridge.subscriber_count(session_subject("dspen", session_id)) == 0
