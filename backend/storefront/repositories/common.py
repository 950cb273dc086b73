# storefront/repositories/common.py
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict

from google.api_core.exceptions import GoogleAPIError

from storefront.core.errors import StoreUnavailable

logger = logging.getLogger("storefront.store")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def store_errors(action: str):
    """Turns Firestore client failures into StoreUnavailable."""
    try:
        yield
    except GoogleAPIError as exc:
        logger.exception("Firestore %s failed", action)
        raise StoreUnavailable() from exc


def doc_to_dict(snap) -> Dict[str, Any]:
    data = snap.to_dict() or {}
    for key in ("created_at", "updated_at"):
        ts = data.get(key)
        if hasattr(ts, "to_datetime"):
            data[key] = ts.to_datetime()
    data["id"] = snap.id
    return data
