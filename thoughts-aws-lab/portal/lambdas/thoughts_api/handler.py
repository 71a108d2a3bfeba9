# portal/lambdas/thoughts_api/handler.py
import base64
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Protocol

from .auth import verify_basic_auth
from .config import Settings
from .notifier import build_notifier
from .store import STATUSES, DynamoThoughtTable, ThoughtNotFound, ThoughtStore

logger = logging.getLogger()
logger.setLevel(logging.INFO)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "*",
    "Access-Control-Allow-Headers": "*",
}

FLAG_FIELDS = ("isAcknowledged", "actionTaken")


class BadRequest(ValueError):
    pass


class Notifier(Protocol):
    def notify(self, thought) -> None: ...


@dataclass
class PortalContext:
    settings: Settings
    store: ThoughtStore
    notifier: Notifier


def build_context(settings=None):
    settings = settings or Settings.from_env()
    return PortalContext(
        settings=settings,
        store=ThoughtStore(DynamoThoughtTable.from_settings(settings)),
        notifier=build_notifier(settings),
    )


def _response(status_code, body, extra_headers=None):
    headers = {"Content-Type": "application/json", **CORS_HEADERS}
    if extra_headers:
        headers.update(extra_headers)
    return {
        "statusCode": status_code,
        "headers": headers,
        "body": json.dumps(body, default=str),
    }


def _method(event):
    return event.get("requestContext", {}).get("http", {}).get("method", "GET").upper()


def _redacted(event):
    headers = event.get("headers") or {}
    safe = {k: ("***" if k.lower() == "authorization" else v) for k, v in headers.items()}
    return {**event, "headers": safe}


def parse_body(event):
    raw = event.get("body")
    if not raw:
        return {}
    if event.get("isBase64Encoded"):
        try:
            raw = base64.b64decode(raw).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            raise BadRequest("body is not valid base64 UTF-8") from None
    try:
        body = json.loads(raw)
    except json.JSONDecodeError:
        raise BadRequest("body is not valid JSON") from None
    if not isinstance(body, dict):
        raise BadRequest("body must be a JSON object")
    return body


def _require_key(body):
    thought_id = body.get("id")
    timestamp = body.get("timestamp")
    if not isinstance(thought_id, str) or not thought_id:
        raise BadRequest("id is required")
    if not isinstance(timestamp, str) or not timestamp:
        raise BadRequest("timestamp is required")
    return thought_id, timestamp


def parse_create(body):
    content = body.get("content")
    if not isinstance(content, str) or not content.strip():
        raise BadRequest("content is required")
    category = body.get("category")
    if category is not None and not isinstance(category, str):
        raise BadRequest("category must be a string")
    return content, category


def parse_update(body):
    thought_id, timestamp = _require_key(body)
    changes = {}
    if "status" in body:
        if body["status"] not in STATUSES:
            raise BadRequest(f"status must be one of {', '.join(STATUSES)}")
        changes["status"] = body["status"]
    for flag in FLAG_FIELDS:
        if flag in body:
            if not isinstance(body[flag], bool):
                raise BadRequest(f"{flag} must be a boolean")
            changes[flag] = body[flag]
    if not changes:
        raise BadRequest("nothing to update")
    return thought_id, timestamp, changes


class ThoughtsApi:
    """
    Method-routed Thoughts API.
    Every non-OPTIONS request must carry the configured Basic credentials.
    """

    def __init__(self, ctx):
        self.ctx = ctx
        self.routes = {
            "GET": self.list_thoughts,
            "POST": self.create_thought,
            "PUT": self.update_thought,
            "DELETE": self.delete_thought,
        }

    def handle(self, event):
        method = _method(event)
        if method == "OPTIONS":
            return _response(200, {"message": "OK"})

        settings = self.ctx.settings
        try:
            if not verify_basic_auth(event, settings.auth_username, settings.auth_password):
                logger.info("Rejected %s request: bad credentials", method)
                return _response(
                    401,
                    {"message": "Unauthorized"},
                    {"WWW-Authenticate": f'Basic realm="{settings.auth_realm}"'},
                )

            route = self.routes.get(method)
            if route is None:
                return _response(405, {"message": "Method not allowed"})

            return _response(200, route(parse_body(event)))

        except BadRequest as e:
            logger.info("Bad request: %s", e)
            return _response(400, {"message": "Bad request", "error": str(e)})
        except ThoughtNotFound as e:
            logger.info("%s", e)
            return _response(404, {"message": "Thought not found", "error": str(e)})
        except Exception as e:
            logger.exception("Error processing %s request", method)
            return _response(500, {"message": "Error processing request", "error": str(e)})

    def list_thoughts(self, body):
        return {
            "message": "Thoughts retrieved successfully",
            "thoughts": self.ctx.store.list(),
        }

    def create_thought(self, body):
        content, category = parse_create(body)
        thought = self.ctx.store.create(content, category)
        self.ctx.notifier.notify(thought)
        return {"message": "Thought submitted successfully", "thought": thought}

    def update_thought(self, body):
        thought_id, timestamp, changes = parse_update(body)
        thought = self.ctx.store.update(thought_id, timestamp, changes)
        return {"message": "Thought updated successfully", "thought": thought}

    def delete_thought(self, body):
        thought_id, timestamp = _require_key(body)
        thought = self.ctx.store.soft_delete(thought_id, timestamp)
        return {"message": "Thought deleted successfully", "thought": thought}


_api = None


def get_api():
    global _api
    if _api is None:
        ctx = build_context()
        logger.setLevel(ctx.settings.log_level)
        _api = ThoughtsApi(ctx)
    return _api


def lambda_handler(event, context):
    logger.info("Received event: %s", json.dumps(_redacted(event), default=str))
    if _method(event) == "OPTIONS":
        return _response(200, {"message": "OK"})
    try:
        api = get_api()
    except Exception as e:
        logger.exception("Failed to initialise Thoughts API")
        return _response(500, {"message": "Error processing request", "error": str(e)})
    return api.handle(event)
