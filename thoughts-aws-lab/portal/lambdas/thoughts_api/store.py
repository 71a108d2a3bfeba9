# portal/lambdas/thoughts_api/store.py
"""
Thought persistence.

ThoughtStore owns the record shape (ids, defaults, ordering). The table it
writes to only needs put / scan / update, so DynamoDB in production and a
dict in tests are interchangeable.
"""
import copy
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

ID_PREFIX = "thought_"
DEFAULT_CATEGORY = "general"
STATUSES = ("pending", "in-progress", "completed")
UPDATABLE_FIELDS = ("status", "isAcknowledged", "actionTaken")

Thought = Dict[str, Any]


class ThoughtNotFound(Exception):
    def __init__(self, thought_id: str, timestamp: str):
        super().__init__(f"No thought with id={thought_id} timestamp={timestamp}")
        self.thought_id = thought_id
        self.timestamp = timestamp


def utc_timestamp() -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2024-05-01T12:00:00.123Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _not_deleted(item: Thought) -> bool:
    return item.get("isDeleted") is not True


class DynamoThoughtTable:
    """Thought table backed by a boto3 DynamoDB Table resource keyed by (id, timestamp)."""

    def __init__(self, table):
        self.table = table

    @classmethod
    def from_settings(cls, settings) -> "DynamoThoughtTable":
        resource = boto3.resource("dynamodb", region_name=settings.aws_region)
        return cls(resource.Table(settings.table_name))

    def put(self, item: Thought) -> None:
        self.table.put_item(Item=item)

    def scan(self) -> List[Thought]:
        kwargs = {
            "FilterExpression": Attr("isDeleted").not_exists() | Attr("isDeleted").eq(False),
        }
        items: List[Thought] = []
        while True:
            result = self.table.scan(**kwargs)
            items.extend(result.get("Items", []))
            last_key = result.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    def update(self, key: Tuple[str, str], fields: Dict[str, Any]) -> Thought:
        thought_id, timestamp = key
        names = {"#id": "id"}
        values = {}
        assignments = []
        for i, (field, value) in enumerate(fields.items()):
            names[f"#f{i}"] = field
            values[f":v{i}"] = value
            assignments.append(f"#f{i} = :v{i}")

        try:
            result = self.table.update_item(
                Key={"id": thought_id, "timestamp": timestamp},
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression="attribute_exists(#id)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise ThoughtNotFound(thought_id, timestamp) from e
            raise
        return result["Attributes"]


class MemoryThoughtTable:
    """In-process thought table for tests and the local dev server (thread-safe)."""

    def __init__(self, items=None):
        self._items: Dict[Tuple[str, str], Thought] = {}
        self._lock = threading.Lock()
        for item in items or []:
            self.put(item)

    def put(self, item: Thought) -> None:
        record = copy.deepcopy(item)
        with self._lock:
            self._items[(record["id"], record["timestamp"])] = record

    def scan(self) -> List[Thought]:
        # copy under the lock; update mutates records in place
        with self._lock:
            return [copy.deepcopy(item) for item in self._items.values() if _not_deleted(item)]

    def update(self, key: Tuple[str, str], fields: Dict[str, Any]) -> Thought:
        with self._lock:
            if key not in self._items:
                raise ThoughtNotFound(*key)
            self._items[key].update(fields)
            return copy.deepcopy(self._items[key])

    def get(self, thought_id: str, timestamp: str) -> Optional[Thought]:
        with self._lock:
            item = self._items.get((thought_id, timestamp))
            return copy.deepcopy(item) if item is not None else None


class ThoughtStore:
    def __init__(self, table, clock: Callable[[], str] = utc_timestamp):
        self.table = table
        self.clock = clock

    def create(self, content: str, category: Optional[str] = None) -> Thought:
        timestamp = self.clock()
        item = {
            "id": f"{ID_PREFIX}{timestamp}",
            "content": content,
            "timestamp": timestamp,
            "category": category or DEFAULT_CATEGORY,
            "status": "pending",
            "isAcknowledged": False,
            "actionTaken": False,
            "isDeleted": False,
        }
        self.table.put(item)
        logger.info("Created thought %s", item["id"])
        return item

    def list(self) -> List[Thought]:
        # ISO-8601 with fixed width sorts correctly as plain strings
        items = [item for item in self.table.scan() if _not_deleted(item)]
        return sorted(items, key=lambda item: item["timestamp"], reverse=True)

    def update(self, thought_id: str, timestamp: str, changes: Dict[str, Any]) -> Thought:
        fields = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
        if not fields:
            raise ValueError("no updatable fields supplied")
        thought = self.table.update((thought_id, timestamp), fields)
        logger.info("Updated thought %s: %s", thought_id, sorted(fields))
        return thought

    def soft_delete(self, thought_id: str, timestamp: str) -> Thought:
        thought = self.table.update((thought_id, timestamp), {"isDeleted": True})
        logger.info("Soft-deleted thought %s", thought_id)
        return thought
