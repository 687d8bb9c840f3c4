from harvest.client.api_client import HarvestClient, ApiError
from harvest.client.storage import JsonStorage
from harvest.client.stores import SessionStore, SubscriptionStore, CartStore, OrderStore

__all__ = [
    "HarvestClient",
    "ApiError",
    "JsonStorage",
    "SessionStore",
    "SubscriptionStore",
    "CartStore",
    "OrderStore",
]
