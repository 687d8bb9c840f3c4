# harvest/services/order_service.py
import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from harvest.data.models.order import OrderModel
from harvest.data.models.order_item import OrderItemModel
from harvest.data.models.user import UserModel
from harvest.domain.enums import OrderStatus, ACTIVE_STATUSES
from harvest.domain.errors import NotFoundError, ConflictError, CapacityExceededError
from harvest.domain.plans import check_capacity, is_valid_status, total_weight
from harvest.domain.schemas import OrderCreateIn
from harvest.repos.cart_repo import CartRepo
from harvest.repos.order_repo import OrderRepo
from harvest.repos.producer_repo import ProducerRepo
from harvest.repos.subscription_repo import SubscriptionRepo
from harvest.services.lock_service import LockService
from harvest.services.notification_service import NotificationService
from harvest.utils.settings import CHECKOUT_LOCK_TTL_SECONDS
from harvest.utils.logging import get_logger

logger = get_logger(__name__)

URGENT_AFTER_MINUTES = 30


class OrderService:
    """
    Order domain: the cart-to-order transition and the order views of
    customers, producers and employees.
    """

    def __init__(self, db: Session, lock_service: LockService):
        self.repo = OrderRepo(db)
        self.carts = CartRepo(db)
        self.subscriptions = SubscriptionRepo(db)
        self.producers = ProducerRepo(db)
        self.lock_service = lock_service
        self.notification_service = NotificationService()

    # =====================================================
    # CHECKOUT
    # =====================================================
    def create_order_from_cart(self, user_id: int, payload: OrderCreateIn) -> OrderModel:
        """
        Use case: turn the user's cart into an order.

        1. cart must have items (ValueError -> 400)
        2. subscription must be active (PermissionError -> 403)
        3. used_kg + cart weight <= limit_in_kg (CapacityExceededError -> 400)
        4. order + items, usage increment and cart clearing commit together
        5. notification is queued after the commit

        A per-user Redis lock keeps two checkouts of the same user from
        interleaving; the guarded UPDATE on the subscription keeps the limit
        even if the lock is lost.
        """
        token = uuid.uuid4().hex
        if not self.lock_service.acquire_checkout_lock(user_id, token, ttl=CHECKOUT_LOCK_TTL_SECONDS):
            raise ConflictError("Another checkout is already in progress for this account")

        try:
            order = self._checkout(user_id, payload)
        finally:
            self.lock_service.release_checkout_lock(user_id, token)

        self.notification_service.send_order_notification(user_id, order.id, order.status)
        return order

    def _checkout(self, user_id: int, payload: OrderCreateIn) -> OrderModel:
        cart = self.carts.get_cart_by_user(user_id)
        if not cart or not cart.items:
            raise ValueError("Your cart is empty")

        subscription = self.subscriptions.get_by_user(user_id)
        if not subscription or not subscription.is_active:
            raise PermissionError("You do not have an active subscription")

        weight = total_weight(cart.items)
        # rejected before anything is written
        check_capacity(subscription, weight)

        try:
            order = self.repo.add_order(
                OrderModel(
                    user_id=user_id,
                    status=OrderStatus.PENDING.value,
                    total_weight_in_kg=weight,
                    delivery_address=payload.delivery_address,
                    delivery_date=payload.delivery_date,
                    notes=payload.notes,
                )
            )
            for item in cart.items:
                order.items.append(
                    OrderItemModel(
                        product_id=item.product_id,
                        quantity=item.quantity,
                        weight_in_kg=item.weight_in_kg,
                        name=item.name,
                        image=item.image,
                        producer_id=item.producer_id,
                        producer_name=item.producer_name,
                    )
                )

            if self.subscriptions.consume_kg(subscription.id, weight) == 0:
                # another writer used the allowance between the check and the update
                self.subscriptions.refresh(subscription)
                check_capacity(subscription, weight)
                raise CapacityExceededError("Your subscription limit was reached, please review your cart")

            self.carts.clear_items(cart.id)
            if self.carts.update_cart_version(cart.id, cart.version) == 0:
                raise ConflictError("Concurrency conflict: the cart was modified by another request")

            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        self.repo.refresh(order)
        logger.info(
            f"Order {order.id} created from cart {cart.id}: {weight:g} kg, "
            f"user {user_id} now at {subscription.used_kg:g}/{subscription.limit_in_kg:g} kg"
        )
        return order

    # =====================================================
    # CUSTOMER QUERIES
    # =====================================================
    def list_orders(self, user_id: int) -> list[OrderModel]:
        return self.repo.list_for_user(user_id)

    def get_order(self, order_id: int, user_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFoundError("Order not found")

        if order.user_id != user_id:
            raise PermissionError("You are not allowed to see this order")

        return order

    # =====================================================
    # PRODUCER
    # =====================================================
    def producer_orders(self, user_id: int) -> list[dict]:
        producer = self.producers.get_by_user(user_id)
        if not producer:
            raise PermissionError("Only producers can access this feature")

        orders = self.repo.list_for_producer(producer.id)
        return [_producer_view(order, producer.id) for order in orders]

    def update_status_as_producer(self, user_id: int, order_id: int, status) -> OrderModel:
        producer = self.producers.get_by_user(user_id)
        if not producer:
            raise PermissionError("Only producers can update order status")

        if not is_valid_status(status):
            raise ValueError("Invalid status")

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")

        if not any(item.producer_id == producer.id for item in order.items):
            raise PermissionError("This order does not contain your products")

        order, _ = self._set_status(order, status)
        return order

    # =====================================================
    # EMPLOYEE
    # =====================================================
    def active_orders(self, status: str | None = None, limit: int = 20) -> list[dict]:
        statuses = [status] if status else list(ACTIVE_STATUSES)
        orders = self.repo.list_by_status(statuses, limit=limit, oldest_first=True)
        return [_employee_view(order) for order in orders]

    def order_details(self, order_id: int) -> dict:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return _employee_view(order)

    def update_status_as_employee(self, order_id: int, status) -> tuple[OrderModel, str]:
        if not is_valid_status(status):
            raise ValueError("Invalid status")

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")

        return self._set_status(order, status)

    def dashboard_summary(self) -> dict:
        counts = self.repo.count_by_status()
        start_of_day = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        today_orders, today_kg = self.repo.stats_since(start_of_day)
        return {
            "by_status": {s.value: counts.get(s.value, 0) for s in OrderStatus},
            "active_orders": sum(counts.get(s, 0) for s in ACTIVE_STATUSES),
            "today_orders": today_orders,
            "today_kg": today_kg,
        }

    # =====================================================
    # ADMIN
    # =====================================================
    def all_orders(self, status: str | None = None) -> list[OrderModel]:
        if status and not is_valid_status(status):
            raise ValueError("Invalid status")
        return self.repo.list_all(status)

    def _set_status(self, order: OrderModel, status: str) -> tuple[OrderModel, str]:
        previous = order.status
        if previous == OrderStatus.CANCELLED.value and status != previous:
            raise ValueError("Cancelled orders cannot change status")

        order = self.repo.update_order_status(order, status)
        logger.info(f"Order {order.id} status updated: {previous} -> {status}")

        self.notification_service.send_order_notification(order.user_id, order.id, status)
        return order, previous


def _minutes_since(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return max(0, int((datetime.now(timezone.utc) - dt).total_seconds() // 60))


def _producer_view(order: OrderModel, producer_id: int) -> dict:
    user: UserModel = order.user
    return {
        "id": order.id,
        "order_number": order.order_number,
        "customer_name": user.name,
        "customer_email": user.email,
        "customer_phone": user.phone or "Not available",
        "delivery_address": order.delivery_address or "Not specified",
        "status": order.status,
        "date": order.created_at,
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "product_name": item.name,
                "quantity": item.quantity,
                "weight_in_kg": item.weight_in_kg,
            }
            for item in order.items
            if item.producer_id == producer_id
        ],
        "total_weight_in_kg": order.total_weight_in_kg,
        "notes": order.notes,
    }


def _employee_view(order: OrderModel) -> dict:
    age = _minutes_since(order.created_at)
    return {
        "id": order.id,
        "order_number": order.order_number,
        "user_id": order.user_id,
        "status": order.status,
        "total_weight_in_kg": order.total_weight_in_kg,
        "delivery_address": order.delivery_address,
        "delivery_date": order.delivery_date,
        "notes": order.notes,
        "created_at": order.created_at,
        "items": list(order.items),
        "customer": order.user,
        "order_age_minutes": age,
        "is_urgent": age > URGENT_AFTER_MINUTES,
    }
