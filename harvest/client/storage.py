# harvest/client/storage.py
import json
import os

CART_KEY = "harvest_cart"
ORDERS_KEY = "harvest_orders"
SUBSCRIPTION_KEY = "harvest_subscription"
SESSION_KEY = "harvest_session"


class JsonStorage:
    """
    Small persisted key/value store backed by one JSON file.
    Every write goes straight to disk; nothing is ever evicted.
    """

    def __init__(self, path: str):
        self.path = path
        self._data = self._load()

    def _load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError:
                # a corrupt cache is dropped, the stores re-fetch
                return {}

    def _flush(self):
        tmp = f"{self.path}.tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self._data, f, default=str)
        os.replace(tmp, self.path)

    def get(self, key: str, default=None):
        return self._data.get(key, default)

    def set(self, key: str, value):
        self._data[key] = value
        self._flush()

    def remove(self, key: str):
        if self._data.pop(key, None) is not None:
            self._flush()
