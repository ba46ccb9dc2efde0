"""Tests for the HTML request path, end to end through the ASGI app."""

import logging

from dsplay.bridge import Inbox, session_subject
from dsplay.server.handler import normalize_path
from dsplay.testing import TestClient


class TestNormalizePath:
    def test_adds_trailing_slash(self) -> None:
        assert normalize_path("/counter") == "/counter/"
        assert normalize_path("/counter/") == "/counter/"
        assert normalize_path("") == "/"
        assert normalize_path("/") == "/"


class TestRouting:
    async def test_index(self, make_app) -> None:
        app = make_app({"index.html": "<h1>home</h1>"})
        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 200
        assert response.text == "<h1>home</h1>"
        assert "text/html" in response.content_type

    async def test_nested_directory_without_trailing_slash(self, make_app) -> None:
        app = make_app({"demo/clicks/index.html": "clicks"})
        async with TestClient(app) as client:
            response = await client.get("/demo/clicks")
        assert response.text == "clicks"

    async def test_unknown_path(self, make_app) -> None:
        app = make_app({"index.html": "home"})
        async with TestClient(app) as client:
            response = await client.get("/missing/")
        assert response.status == 404
        assert response.text == "Not Found"

    async def test_method_specific_file_wins(self, make_app) -> None:
        app = make_app({"index.html": "any", "post.html": "posted"})
        async with TestClient(app) as client:
            assert (await client.get("/")).text == "any"
            assert (await client.post("/")).text == "posted"
            assert (await client.request("PUT", "/")).text == "any"

    async def test_method_without_file_or_fallback(self, make_app) -> None:
        app = make_app({"form/post.html": "posted"})
        async with TestClient(app) as client:
            response = await client.get("/form/")
        assert response.status == 404

    async def test_live_only_route_is_not_html(self, make_app) -> None:
        app = make_app({"clock/live.html": "tick"})
        async with TestClient(app) as client:
            response = await client.get("/clock/")
        assert response.status == 404


class TestSequencing:
    async def test_sections_then_freeze(self, make_app) -> None:
        app = make_app({"steps/index.html": "one\n===\ntwo\n===\nthree"})
        async with TestClient(app) as client:
            bodies = [(await client.get("/steps/")).text for _ in range(5)]
        assert bodies == ["one", "two", "three", "three", "three"]

    async def test_loop_wraps(self, make_app) -> None:
        app = make_app({"steps/index.html": "---\nloop: true\n---\na\n===\nb\n===\nc"})
        async with TestClient(app) as client:
            bodies = [(await client.get("/steps/")).text for _ in range(5)]
        assert bodies == ["a", "b", "c", "a", "b"]

    async def test_files_concatenate_by_sequence_index(self, make_app) -> None:
        app = make_app(
            {
                "steps/index_002.html": "third",
                "steps/index_001.html": "first\n===\nsecond",
            }
        )
        async with TestClient(app) as client:
            bodies = [(await client.get("/steps/")).text for _ in range(4)]
        assert bodies == ["first", "second", "third", "third"]

    async def test_selected_section_decides_loop(self, make_app) -> None:
        app = make_app(
            {
                "steps/index_001.html": "a",
                "steps/index_002.html": "---\nloop: true\n---\nb",
            }
        )
        async with TestClient(app) as client:
            bodies = [(await client.get("/steps/")).text for _ in range(4)]
        assert bodies == ["a", "b", "a", "b"]

    async def test_cursors_are_per_method(self, make_app) -> None:
        app = make_app({"index.html": "a\n===\nb"})
        async with TestClient(app) as client:
            assert (await client.get("/")).text == "a"
            assert (await client.post("/")).text == "a"
            assert (await client.get("/")).text == "b"

    async def test_cursors_are_per_session(self, make_app) -> None:
        app = make_app({"index.html": "a\n===\nb"})
        async with TestClient(app) as first, TestClient(app) as second:
            assert (await first.get("/")).text == "a"
            assert (await first.get("/")).text == "b"
            assert (await second.get("/")).text == "a"

    async def test_single_section_leaves_cursor_alone(self, make_app) -> None:
        app = make_app({"index.html": "only"})
        async with TestClient(app) as client:
            await client.get("/")
            state = app.sessions.decode_cookie(client.cookies["ds-play"])
        assert state.seq_positions == {}


class TestStatus:
    async def test_custom_status(self, make_app) -> None:
        app = make_app({"items/post.html": "---\nstatus: 201\n---\ncreated"})
        async with TestClient(app) as client:
            response = await client.post("/items/")
        assert response.status == 201
        assert response.text == "created"

    async def test_empty_section_is_no_content(self, make_app) -> None:
        app = make_app({"index.html": "a\n===\n===\nc"})
        async with TestClient(app) as client:
            statuses = [(await client.get("/")).status for _ in range(3)]
        assert statuses == [200, 204, 200]

    async def test_empty_section_with_status(self, make_app) -> None:
        app = make_app({"gone/index.html": "---\nstatus: 410\n---\n"})
        async with TestClient(app) as client:
            response = await client.get("/gone/")
        assert response.status == 410
        assert response.body == b""


class TestTemplates:
    async def test_hit_counters(self, make_app) -> None:
        app = make_app(
            {
                "index.html": "{{ global_hits }}|{{ url_hits }}|{{ session_url_hits }}",
                "other/index.html": "other",
            }
        )
        async with TestClient(app) as first, TestClient(app) as second:
            assert (await first.get("/")).text == "1|1|1"
            await first.get("/other/")
            assert (await first.get("/")).text == "3|2|2"
            assert (await second.get("/")).text == "4|3|1"

    async def test_identity(self, make_app) -> None:
        app = make_app({"index.html": "{{ username }} {{ session_id }} {{ url }} {{ method }}"})
        async with TestClient(app) as client:
            first = (await client.get("/")).text
            second = (await client.get("/")).text
        username, session_id, url, method = first.split()
        assert session_id.startswith("s-")
        assert username not in session_id
        assert (url, method) == ("/", "GET")
        assert second == first

    async def test_template_error(self, make_app, caplog) -> None:
        app = make_app({"index.html": "{% if %}"})
        with caplog.at_level(logging.ERROR, logger="dsplay.server"):
            async with TestClient(app) as client:
                response = await client.get("/")
        assert response.status == 500
        assert response.text.startswith("Template error:")
        assert "text/plain" in response.content_type


class TestScanning:
    async def test_bad_frontmatter_fails_request(self, make_app) -> None:
        app = make_app({"index.html": "home", "broken/index.html": "---\nloop: maybe\n---\nx"})
        async with TestClient(app) as client:
            response = await client.get("/")
        assert response.status == 500
        assert response.text.startswith("Error scanning playgrounds:")

    async def test_lenient_scan_skips_bad_file(self, make_app) -> None:
        app = make_app(
            {"index.html": "home", "broken/index.html": "---\nloop: maybe\n---\nx"},
            strict_scan=False,
        )
        async with TestClient(app) as client:
            assert (await client.get("/")).text == "home"
            assert (await client.get("/broken/")).status == 404

    async def test_edits_show_up_without_restart(self, make_app) -> None:
        app = make_app({"index.html": "before"})
        async with TestClient(app) as client:
            assert (await client.get("/")).text == "before"
            (app.config.playground_dir / "index.html").write_text("after", encoding="utf-8")
            (app.config.playground_dir / "new").mkdir()
            (app.config.playground_dir / "new" / "index.html").write_text("new", encoding="utf-8")
            assert (await client.get("/")).text == "after"
            assert (await client.get("/new/")).text == "new"


class TestSessions:
    async def test_cookie_issued_on_every_response(self, make_app) -> None:
        app = make_app({"index.html": "home"})
        async with TestClient(app) as client:
            response = await client.get("/")
        set_cookie = dict(response.headers).get("set-cookie")
        assert set_cookie is not None
        assert set_cookie.startswith("ds-play=")
        assert "HttpOnly" in set_cookie

    async def test_corrupt_cookie_replaced(self, make_app) -> None:
        app = make_app({"index.html": "{{ session_url_hits }}"})
        async with TestClient(app) as client:
            response = await client.get("/", headers={"cookie": "ds-play=not-a-session"})
            assert response.status == 200
            assert response.text == "1"
            state = app.sessions.decode_cookie(client.cookies["ds-play"])
        assert state.url_hits == {"/": 1}


class TestLiveUpdateRequests:
    async def test_signals_reach_html_template(self, make_app) -> None:
        app = make_app({"counter/post.html": "<span>{{ signals.count }}</span>"})
        async with TestClient(app) as client:
            response = await client.datastar("POST", "/counter/", signals={"count": 3})
        assert response.text == "<span>3</span>"

    async def test_query_signals_on_get(self, make_app) -> None:
        app = make_app({"search/get.html": "{{ signals.q }}"})
        async with TestClient(app) as client:
            response = await client.datastar("GET", "/search/", signals={"q": "owl"})
        assert response.text == "owl"

    async def test_deeply_nested_signals_treated_as_empty(self, make_app) -> None:
        app = make_app({"counter/post.html": "<span>ok</span>"})
        body = b'{"count":' + b"[" * 100_000 + b"]" * 100_000 + b"}"
        async with TestClient(app) as client:
            response = await client.request(
                "POST",
                "/counter/",
                headers={"datastar-request": "true", "content-type": "application/json"},
                body=body,
            )
        assert response.status == 200
        assert response.text == "<span>ok</span>"

    async def test_signals_published_on_session_subject(self, make_app) -> None:
        app = make_app({"index.html": "home", "counter/post.html": ""})
        async with TestClient(app) as client:
            await client.get("/")
            session_id = app.sessions.decode_cookie(client.cookies["ds-play"]).session_id
            inbox = Inbox()
            app.bridge.subscribe(session_subject("dspen", session_id), inbox)

            response = await client.datastar("POST", "/counter/", signals={"count": 4})

        assert response.status == 204
        assert await inbox.get() == b'{"count":4}'

    async def test_plain_request_does_not_publish(self, make_app) -> None:
        app = make_app({"index.html": "home", "counter/post.html": ""})
        async with TestClient(app) as client:
            await client.get("/")
            session_id = app.sessions.decode_cookie(client.cookies["ds-play"]).session_id
            inbox = Inbox()
            app.bridge.subscribe(session_subject("dspen", session_id), inbox)
            await client.post("/counter/", json={"count": 4})
        assert inbox._queue.empty()


class TestStaticFiles:
    async def test_serves_files(self, make_app) -> None:
        app = make_app({"index.html": "home", "static/style.css": "body { color: red; }"})
        async with TestClient(app) as client:
            response = await client.get("/static/style.css")
        assert response.status == 200
        assert response.text == "body { color: red; }"
        assert response.content_type.startswith("text/css")
        assert dict(response.headers)["cache-control"] == "no-cache"

    async def test_missing_file_falls_through(self, make_app) -> None:
        app = make_app({"index.html": "home", "static/style.css": ""})
        async with TestClient(app) as client:
            response = await client.get("/static/nope.css")
        assert response.status == 404

    async def test_traversal_refused(self, make_app) -> None:
        app = make_app({"index.html": "home", "static/style.css": ""})
        async with TestClient(app) as client:
            response = await client.get("/static/../index.html")
        assert response.status == 403

    async def test_only_get_and_head(self, make_app) -> None:
        app = make_app({"index.html": "home", "static/style.css": "x"})
        async with TestClient(app) as client:
            response = await client.post("/static/style.css")
        assert response.status == 404
