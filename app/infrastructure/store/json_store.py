from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from app.application.exceptions import NotFound, SubscriptionStoreError
from app.application.ports.subscription_store import SubscriptionStorePort


class JsonSubscriptionStore(SubscriptionStorePort):
    """Keeps every standing watch in one JSON document, rewritten atomically on change."""

    def __init__(self, path: str = "./data/subscriptions.json") -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def put(self, key: str, value: dict[str, str]) -> str:
        with self._lock:
            data = self._load()
            data["subscriptions"][key] = {str(k): str(v) for k, v in value.items()}
            self._save(data)
        return key

    def delete(self, key: str) -> str:
        with self._lock:
            data = self._load()
            if key not in data["subscriptions"]:
                raise NotFound(f"no watch with id {key}")
            del data["subscriptions"][key]
            self._save(data)
        return key

    def list_all(self) -> dict[str, dict[str, str]]:
        with self._lock:
            return dict(self._load()["subscriptions"])

    def _load(self) -> dict:
        """Load the document, return an empty one if missing."""
        if not self._path.exists():
            return {"subscriptions": {}, "version": 1}
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            self._logger.error("Subscription file unreadable", extra={"reason": str(e)})
            raise SubscriptionStoreError(f"cannot read {self._path}: {e}") from e
        if not isinstance(data.get("subscriptions"), dict):
            raise SubscriptionStoreError(f"cannot read {self._path}: missing subscriptions mapping")
        data.setdefault("version", 1)
        return data

    def _save(self, data: dict) -> None:
        """Write to a temp file and rename over the original."""
        temp_path = self._path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(self._path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise SubscriptionStoreError(f"cannot write {self._path}: {e}") from e
