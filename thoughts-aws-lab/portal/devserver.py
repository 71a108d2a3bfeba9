"""Local Flask server that feeds HTTP requests through the Lambda handler."""
import base64
import logging

from flask import Flask, Response, request

from portal.lambdas.thoughts_api.config import Settings
from portal.lambdas.thoughts_api.handler import PortalContext, ThoughtsApi, build_context
from portal.lambdas.thoughts_api.notifier import build_notifier
from portal.lambdas.thoughts_api.store import MemoryThoughtTable, ThoughtStore

logger = logging.getLogger(__name__)


def to_event():
    """Build an API Gateway HTTP API (v2) event from the current Flask request."""
    raw = request.get_data()
    event = {
        "rawPath": request.path,
        "headers": {k.lower(): v for k, v in request.headers.items()},
        "requestContext": {
            "http": {
                "method": request.method,
                "path": request.path,
                "sourceIp": request.remote_addr,
            },
        },
        "isBase64Encoded": False,
    }
    if raw:
        try:
            event["body"] = raw.decode("utf-8")
        except UnicodeDecodeError:
            event["body"] = base64.b64encode(raw).decode("ascii")
            event["isBase64Encoded"] = True
    return event


def create_app(api):
    app = Flask(__name__)

    @app.route("/", defaults={"path": ""}, methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"])
    @app.route("/<path:path>", methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"])
    def invoke(path):
        result = api.handle(to_event())
        return Response(
            result["body"],
            status=result["statusCode"],
            headers=result["headers"],
        )

    return app


def memory_context(settings):
    return PortalContext(
        settings=settings,
        store=ThoughtStore(MemoryThoughtTable()),
        notifier=build_notifier(settings),
    )


def run_server(host, port, memory=False):
    settings = Settings.from_env()
    ctx = memory_context(settings) if memory else build_context(settings)
    if not (settings.auth_username and settings.auth_password):
        logger.warning("AUTH_USERNAME/AUTH_PASSWORD not set; every request will be rejected")

    app = create_app(ThoughtsApi(ctx))
    backend = "in-memory store" if memory else f"DynamoDB table {settings.table_name}"
    print(f"[*] Thoughts API ({backend}) listening on http://{host}:{port}")
    app.run(host=host, port=port, threaded=True)
