"""Skeleton playground files — plain strings written by ``dsplay init``.

Keys are paths relative to the target directory.
"""

INDEX_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>dsplay</title>
    <link rel="stylesheet" href="/static/style.css">
    <script type="module" src="https://cdn.jsdelivr.net/gh/starfederation/datastar@1.0.0-RC.6/bundles/datastar.js"></script>
</head>
<body data-signals="{count: 0}">
    <h1>Hello, {{ username }}</h1>
    <p>You have loaded this page {{ session_url_hits }} times ({{ url_hits }} across all visitors).</p>

    <div id="clock" data-on-load="@get('/clock/')">waiting for the clock...</div>

    <button data-on-click="$count++; @post('/counter/')">Count</button>
    <div id="counter"></div>
</body>
</html>
"""

CLOCK_LIVE_HTML = """\
---
loop: true
interval: 1000
---
<div id="clock">tick {{ loop_iteration }} (message {{ live_message_count }})</div>
"""

COUNTER_POST_HTML = """\
<div id="counter">Clicked {{ signals.count }} times</div>
"""

STYLE_CSS = """\
body {
    font-family: system-ui, sans-serif;
    max-width: 40rem;
    margin: 2rem auto;
}
"""

FILES: dict[str, str] = {
    "index.html": INDEX_HTML,
    "clock/live.html": CLOCK_LIVE_HTML,
    "counter/post.html": COUNTER_POST_HTML,
    "static/style.css": STYLE_CSS,
}
