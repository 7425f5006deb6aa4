"""Snapshot codec for the app state tree.

The snapshot is a single JSON object under one storage key. Inline binary
media (``data:`` URIs) is blanked before writing so a large upload can never
push the snapshot past the storage quota. Loading and saving are best-effort:
failures are logged and treated as "no snapshot" / "not saved".
"""

import json
from typing import Any, Optional

from libs.common.logging import get_logger
from services.deck_service.schemas import AppState
from services.deck_service.storage import KeyValueStorage

logger = get_logger(__name__)

DATA_URI_PREFIX = "data:"


def strip_data_uris(value: Any) -> Any:
    """Return a copy of ``value`` with every ``data:`` string replaced by ``""``."""
    if isinstance(value, str):
        return "" if value.startswith(DATA_URI_PREFIX) else value
    if isinstance(value, dict):
        return {k: strip_data_uris(v) for k, v in value.items()}
    if isinstance(value, list):
        return [strip_data_uris(v) for v in value]
    return value


def serialize(state: AppState) -> str:
    payload = state.to_camel_dict()

    current_user = state.current_user
    payload["currentUser"] = current_user.to_camel_dict() if current_user else None

    return json.dumps(strip_data_uris(payload))


def deserialize(raw: str) -> Optional[AppState]:
    """Rebuild the state tree; raises on malformed input.

    ``currentUser`` is never trusted as embedded: only its id is kept, and only
    when that id still exists in the freshly loaded ``allUsers``.
    """
    data = json.loads(raw)
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError("Persisted state must be a JSON object")

    embedded_user = data.pop("currentUser", None)
    state = AppState.model_validate(data)

    if isinstance(embedded_user, dict):
        user_id = embedded_user.get("id")
        if state.find_user(user_id):
            state.current_user_id = user_id
        else:
            logger.info("Persisted session user %s no longer exists; logged out", user_id)
    return state


def load_state(storage: KeyValueStorage, key: str) -> Optional[AppState]:
    """Read and decode the snapshot. Any failure means cold start."""
    try:
        raw = storage.get_item(key)
        if raw is None:
            return None
        return deserialize(raw)
    except Exception as e:
        logger.warning(
            "Could not load state from storage: %s",
            e,
            extra={"extra_fields": {"storage_key": key}},
        )
        return None


def save_state(storage: KeyValueStorage, key: str, state: AppState) -> bool:
    """Encode and write the snapshot. Failures are logged and dropped."""
    try:
        storage.set_item(key, serialize(state))
        return True
    except Exception as e:
        logger.error(
            "Could not save state to storage: %s",
            e,
            extra={"extra_fields": {"storage_key": key}},
        )
        return False


def clear_state(storage: KeyValueStorage, key: str) -> bool:
    try:
        storage.remove_item(key)
        return True
    except Exception as e:
        logger.error("Could not clear persisted state: %s", e)
        return False
