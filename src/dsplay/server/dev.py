"""Run a Playground on pounce.

Routes are rescanned on every request, so there is nothing to reload:
a single worker serves the live ``Playground`` object directly.
"""


def run_server(app: object, host: str, port: int) -> None:
    """Start a single-worker pounce server for *app*.

    pounce is an optional dependency (``pip install dsplay[server]``);
    any ASGI server can host a ``Playground`` instead.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(host=host, port=port, workers=1)
    server = Server(config, app)
    server.run()
