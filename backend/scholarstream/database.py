"""
Scholar Stream Backend: Document Store Access
==============================================

What:  The MongoDB client wrapper, its FastAPI dependency, and the small
       helpers every service uses (id parsing, serialization, error translation).
How:   One pymongo AsyncMongoClient is created per process in the lifespan
       handler, stored on `app.state.store`, and handed to routes through
       `Depends(get_store)`. Services receive it as an argument.
Who:   Used by route handlers via dependency injection and by every service.
When:  Client is created at startup and closed at shutdown.

Collections:
    users         → platform accounts (keyed by lowercased email)
    scholarships  → admin-managed scholarship listings
    application   → student applications (collection name kept for existing data)
    reviews       → one review per (scholarshipId, userEmail)

Connection Pooling:
    The driver maintains its own pool; every request borrows from it without
    application-level locking. Per-document writes are serialized by MongoDB.
"""

import logging
import re
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from scholarstream.config import settings
from scholarstream.exceptions import DatabaseError, ScholarStreamError, ValidationError

logger = logging.getLogger(__name__)


USERS_COLLECTION = "users"
SCHOLARSHIPS_COLLECTION = "scholarships"
APPLICATIONS_COLLECTION = "application"
REVIEWS_COLLECTION = "reviews"


class MongoStore:
    """
    Process-wide handle on the document database.

    Exposes the four collections as attributes so services read like
    `store.users.find_one(...)`. Constructing the client does not open a
    connection; the first operation (or `connect()`) does.
    """

    def __init__(self, uri: str, database_name: str, **client_options: Any):
        self.client: AsyncMongoClient = AsyncMongoClient(
            uri,
            tz_aware=True,
            **client_options,
        )
        self.db = self.client[database_name]
        self.users: AsyncCollection = self.db[USERS_COLLECTION]
        self.scholarships: AsyncCollection = self.db[SCHOLARSHIPS_COLLECTION]
        self.applications: AsyncCollection = self.db[APPLICATIONS_COLLECTION]
        self.reviews: AsyncCollection = self.db[REVIEWS_COLLECTION]

    async def ping(self) -> None:
        """Round-trips a `ping` command. Raises PyMongoError when unreachable."""
        await self.client.admin.command("ping")

    async def connect(
        self,
        attempts: int = 3,
        min_wait: int = 1,
        max_wait: int = 8,
    ) -> None:
        """
        Verify connectivity at startup, retrying transient failures.

        How:   tenacity AsyncRetrying with exponential backoff + jitter.
               Only PyMongoError is retried; the last error is re-raised.
        """
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(PyMongoError),
            stop=stop_after_attempt(attempts),
            wait=wait_exponential_jitter(initial=min_wait, max=max_wait, jitter=1),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                await self.ping()
        logger.info("MongoDB connected successfully (database=%s)", self.db.name)

    async def close(self) -> None:
        """Closes every pooled connection."""
        await self.client.close()


def create_store() -> MongoStore:
    """Builds the store from settings. Called once by the lifespan handler."""
    return MongoStore(
        settings.mongodb_uri,
        settings.database_name,
        serverSelectionTimeoutMS=settings.db_server_selection_timeout_ms,
    )


# ── FastAPI Dependency ────────────────────────────────────────────────────
def get_store(request: Request) -> MongoStore:
    """
    FastAPI dependency returning the store created at startup.

    Example usage in a route:
        @router.get("/users")
        async def list_users(store: MongoStore = Depends(get_store)):
            return await user_service.list_users(store)

    Tests replace it with `app.dependency_overrides[get_store]`.
    """
    return request.app.state.store


# ── Helpers ───────────────────────────────────────────────────────────────
def to_object_id(value: Any, field: str = "id") -> ObjectId:
    """
    Parse a path/body value into an ObjectId.

    Raises:
        ValidationError: value is not a 24-character hex id (→ 400)
    """
    if isinstance(value, ObjectId):
        return value
    # ObjectId(None) would mint a fresh id instead of failing
    if value is None:
        raise ValidationError(message=f"Invalid {field}: a document id is required", field=field)
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationError(
            message=f"Invalid {field}: '{value}' is not a valid document id",
            field=field,
        )


def utc_timestamp() -> str:
    """
    Current UTC time as an ISO-8601 string with milliseconds and a Z suffix,
    e.g. "2025-01-15T12:00:00.123Z". createdAt/updatedAt/appliedAt use this form.
    """
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def leading_int(raw: Any) -> Optional[int]:
    """Integer prefix of a string ("12", " 12abc" → 12), or None."""
    match = _LEADING_INT.match(str(raw))
    return int(match.group(1)) if match else None


def parse_limit(raw: Optional[str], default: int, cap: Optional[int] = None) -> int:
    """
    Lenient query-string limit parsing.

    Reads the leading integer of `raw` ("12", "12abc" → 12). Absent,
    unparseable or non-positive values fall back to `default`. When `cap`
    is given the result never exceeds it.
    """
    value = default
    if raw is not None:
        parsed = leading_int(raw)
        if parsed is not None and parsed > 0:
            value = parsed
    if cap is not None:
        value = min(value, cap)
    return value


def serialize_document(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Convert a raw document into JSON-safe data (ObjectId → str, datetime → ISO)."""
    if doc is None:
        return None
    return jsonable_encoder(doc, custom_encoder={ObjectId: str})


def serialize_documents(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize_document(doc) for doc in docs]


@contextmanager
def translate_store_errors(message: str, **context: Any) -> Iterator[None]:
    """
    Wrap a block of store calls so failures surface as DatabaseError.

    Application errors (ScholarStreamError subclasses) propagate unchanged.
    Anything else is logged with its traceback and re-raised as
    DatabaseError carrying the short fixed `message` shown to the client.

    Example:
        with translate_store_errors("Failed to fetch users"):
            docs = await store.users.find().to_list()
    """
    try:
        yield
    except ScholarStreamError:
        raise
    except Exception as e:
        logger.error("%s: %s | Context: %s", message, str(e), context, exc_info=True)
        raise DatabaseError(
            message=message,
            context={**context, "error_type": type(e).__name__},
        ) from e
