# harvest/client/stores.py
"""
Client-side state stores.

Each store mirrors one API resource into a JsonStorage (cache-aside):
it hydrates from storage on start, writes every successful response back
and exposes getters computed from the cached state. Failed actions return
False/None and keep the message in `error`; stale data is only replaced
by the next fetch.
"""
from datetime import datetime

from harvest.client.api_client import ApiError, HarvestClient
from harvest.client.storage import JsonStorage, CART_KEY, ORDERS_KEY, SESSION_KEY, SUBSCRIPTION_KEY
from harvest.domain.plans import is_category_allowed
from harvest.utils.logging import get_logger

logger = get_logger(__name__)


class _Store:
    def __init__(self, client: HarvestClient, storage: JsonStorage):
        self.client = client
        self.storage = storage
        self.error: str | None = None

    def _fail(self, action: str, e: Exception):
        self.error = e.message if isinstance(e, ApiError) else str(e)
        logger.warning(f"{type(self).__name__}.{action} failed: {self.error}")


class SessionStore(_Store):
    """Keeps the logged-in user and hands the saved token to the client."""

    def __init__(self, client: HarvestClient, storage: JsonStorage):
        super().__init__(client, storage)
        self.session: dict | None = storage.get(SESSION_KEY)
        if self.session:
            client.token = self.session["token"]

    @property
    def user(self) -> dict | None:
        return self.session["user"] if self.session else None

    def login(self, email: str, password: str) -> bool:
        try:
            data = self.client.login(email, password)
        except Exception as e:
            self._fail("login", e)
            return False
        self.session = {"user": data["user"], "token": data["token"]}
        self.storage.set(SESSION_KEY, self.session)
        self.error = None
        return True

    def logout(self):
        """Forget the token and every cached resource of the user."""
        self.client.token = None
        self.session = None
        for key in (SESSION_KEY, CART_KEY, ORDERS_KEY, SUBSCRIPTION_KEY):
            self.storage.remove(key)


class SubscriptionStore(_Store):
    def __init__(self, client: HarvestClient, storage: JsonStorage):
        super().__init__(client, storage)
        self.subscription: dict | None = storage.get(SUBSCRIPTION_KEY)

    def _save(self, subscription: dict):
        self.subscription = subscription
        self.storage.set(SUBSCRIPTION_KEY, subscription)
        self.error = None

    def fetch_current(self) -> bool:
        try:
            body = self.client.get("/subscription/current")
        except Exception as e:
            self._fail("fetch_current", e)
            return False
        self._save(body["data"])
        return True

    def change_plan(self, plan: str) -> bool:
        try:
            body = self.client.post("/subscription/change", json={"plan": plan})
        except Exception as e:
            self._fail("change_plan", e)
            return False
        self._save(body["data"])
        return True

    def remaining_kg(self) -> float:
        if not self.subscription:
            return 0.0
        return max(0.0, self.subscription["limit_in_kg"] - self.subscription["used_kg"])

    def used_kg(self) -> float:
        if not self.subscription:
            return 0.0
        return self.subscription["used_kg"] or 0.0

    def can_add_product(self, weight_in_kg: float) -> bool:
        if not self.subscription or not self.subscription.get("is_active"):
            return False
        return self.subscription["limit_in_kg"] - self.subscription["used_kg"] >= weight_in_kg

    def validate_category(self, category: str) -> bool:
        if not self.subscription:
            return False
        return is_category_allowed(category, self.subscription["plan"])


class CartStore(_Store):
    def __init__(self, client: HarvestClient, storage: JsonStorage, subscriptions: SubscriptionStore | None = None):
        super().__init__(client, storage)
        self.subscriptions = subscriptions
        self.cart: dict | None = storage.get(CART_KEY)

    def _save(self, cart: dict):
        self.cart = cart
        self.storage.set(CART_KEY, cart)
        self.error = None

    def fetch(self) -> bool:
        try:
            body = self.client.get("/cart")
        except Exception as e:
            self._fail("fetch", e)
            return False
        self._save(body["data"])
        return True

    def add_item(
        self,
        product_id: int,
        quantity: int = 1,
        weight_in_kg: float | None = None,
        category: str | None = None,
    ) -> bool:
        """
        Add a product. When the unit weight and category are known they are
        checked against the cached subscription first, saving a round trip;
        the server checks again either way.
        """
        if self.subscriptions and self.subscriptions.subscription:
            if category and not self.subscriptions.validate_category(category):
                self.error = f"Your {self.subscriptions.subscription['plan']} plan does not include {category}"
                return False
            if weight_in_kg is not None:
                needed = self.total_weight_in_kg() + weight_in_kg * quantity
                if not self.subscriptions.can_add_product(needed):
                    self.error = (
                        f"Adding this product would exceed your monthly limit. "
                        f"You have {self.subscriptions.remaining_kg():.2f} kg remaining before this cart."
                    )
                    return False

        try:
            body = self.client.post("/cart/add", json={"product_id": product_id, "quantity": quantity})
        except Exception as e:
            self._fail("add_item", e)
            return False
        self._save(body["data"]["cart"])
        return True

    def update_quantity(self, item_id: int, quantity: int) -> bool:
        try:
            self.client.put("/cart/update", json={"item_id": item_id, "quantity": quantity})
        except Exception as e:
            self._fail("update_quantity", e)
            return False
        # the update answers with the line only
        return self.fetch()

    def remove_item(self, item_id: int) -> bool:
        try:
            self.client.delete(f"/cart/remove/{item_id}")
        except Exception as e:
            self._fail("remove_item", e)
            return False
        if self.cart:
            items = [i for i in self.cart.get("items", []) if i["id"] != item_id]
            self._save({**self.cart, "items": items, "total_weight_in_kg": sum(i["weight_in_kg"] for i in items)})
        return True

    def clear(self) -> bool:
        try:
            self.client.delete("/cart/clear")
        except Exception as e:
            self._fail("clear", e)
            return False
        self.reset_local()
        return True

    def reset_local(self):
        """Empty the cached cart after the server has emptied the real one."""
        if self.cart:
            self._save({**self.cart, "items": [], "total_weight_in_kg": 0.0})

    def total_items(self) -> int:
        if not self.cart:
            return 0
        return sum(i["quantity"] for i in self.cart.get("items", []))

    def total_weight_in_kg(self) -> float:
        if not self.cart:
            return 0.0
        return sum((i["weight_in_kg"] for i in self.cart.get("items", [])), 0.0)

    def remaining_kg(self) -> float:
        """Allowance left once the current cart is ordered."""
        if self.subscriptions and self.subscriptions.subscription:
            left = self.subscriptions.remaining_kg()
        elif self.cart:
            left = self.cart.get("remaining_kg", 0.0)
        else:
            return 0.0
        return max(0.0, left - self.total_weight_in_kg())


class OrderStore(_Store):
    def __init__(
        self,
        client: HarvestClient,
        storage: JsonStorage,
        cart: CartStore | None = None,
        subscriptions: SubscriptionStore | None = None,
    ):
        super().__init__(client, storage)
        self.cart = cart
        self.subscriptions = subscriptions
        self.orders: list[dict] = storage.get(ORDERS_KEY, [])

    def _save(self, orders: list[dict]):
        self.orders = orders
        self.storage.set(ORDERS_KEY, orders)
        self.error = None

    def fetch_orders(self) -> bool:
        try:
            body = self.client.get("/orders")
        except Exception as e:
            self._fail("fetch_orders", e)
            return False
        self._save(body["data"])
        return True

    def fetch_order(self, order_id: int) -> dict | None:
        try:
            body = self.client.get(f"/orders/{order_id}")
        except Exception as e:
            self._fail("fetch_order", e)
            return None
        order = body["data"]
        others = [o for o in self.orders if o["id"] != order["id"]]
        self._save([order] + others)
        return order

    def create_order(
        self,
        delivery_address: str,
        delivery_date: datetime | None = None,
        notes: str | None = None,
    ) -> dict | None:
        payload = {"delivery_address": delivery_address, "notes": notes}
        if delivery_date:
            payload["delivery_date"] = delivery_date.isoformat()

        try:
            body = self.client.post("/orders/create", json=payload)
        except Exception as e:
            self._fail("create_order", e)
            return None

        order = body["data"]
        self._save([order] + self.orders)
        logger.info(f"Order {order['order_number']} created, {order['total_weight_in_kg']:g} kg")

        # the server emptied the cart and raised used_kg in the same transaction
        if self.cart:
            self.cart.reset_local()
        if self.subscriptions:
            self.subscriptions.fetch_current()
        return order
