from typing import Dict, Any
from sqlalchemy.orm import Session
from harvest.data.models.cart import CartModel
from harvest.data.models.cart_item import CartItemModel
from harvest.domain.errors import NotFoundError, ConflictError
from harvest.domain.plans import check_capacity, is_category_allowed, remaining_kg
from harvest.repos.cart_repo import CartRepo
from harvest.repos.product_repo import ProductRepo
from harvest.repos.subscription_repo import SubscriptionRepo
from harvest.utils.logging import get_logger

logger = get_logger(__name__)

CART_SCOPE = " before this cart"


class CartService:
    """
    Use cases of the cart domain.
    Commands (add, update, remove, clear) change state and bump the cart
    version; the query (get) only reads.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.subscriptions = SubscriptionRepo(db)

    # query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self._get_or_create(user_id)
        return self._summary(cart, user_id)

    # commands
    def add_product(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise ValueError("Quantity must be at least 1")

        product = self.products.get(product_id)
        if not product:
            raise NotFoundError("Product not found")

        if not product.available:
            raise ValueError("This product is not available")

        cart = self._get_or_create(user_id)
        existing_item = self.repo.get_cart_item_by_product(cart.id, product_id)
        new_quantity = quantity + (existing_item.quantity if existing_item else 0)

        if product.stock < new_quantity:
            raise ValueError(f"Only {product.stock} units available")

        subscription = self._active_subscription(user_id)

        if not is_category_allowed(product.category, subscription.plan):
            raise PermissionError(
                f"Your {subscription.plan} plan does not allow products in the {product.category} category."
            )

        # the whole cart has to fit in what is left of the month
        added_weight = product.weight_in_kg * quantity
        check_capacity(
            subscription,
            cart.total_weight_in_kg + added_weight,
            action="add this product",
            scope=CART_SCOPE,
        )

        if existing_item:
            logger.info(
                f"Product {product_id} already in cart {cart.id}, quantity "
                f"{existing_item.quantity} -> {new_quantity}"
            )
            existing_item.quantity = new_quantity
            existing_item.weight_in_kg = product.weight_in_kg * new_quantity
            item = existing_item
        else:
            logger.info(f"Adding product {product_id} to cart {cart.id}")
            item = CartItemModel(
                cart_id=cart.id,
                product_id=product.id,
                quantity=quantity,
                weight_in_kg=added_weight,
                name=product.name,
                image=product.image,
                producer_id=product.producer_id,
                producer_name=product.producer.business_name,
            )
        self.repo.add_cart_item(item)

        self._commit_version(cart)
        self.repo.refresh(item)

        summary = self._summary(cart, user_id)
        return {
            "item": item,
            "cart": summary,
            "remaining_kg": max(0.0, summary["remaining_kg"] - summary["total_weight_in_kg"]),
        }

    def update_quantity(self, user_id: int, item_id: int, quantity: int) -> CartItemModel | None:
        """Set the quantity of a cart line; 0 removes it (returns None)."""
        if quantity < 0:
            raise ValueError("Quantity cannot be negative")

        item, cart = self._owned_item(user_id, item_id)

        if quantity == 0:
            self.repo.delete_cart_item(item)
            self._commit_version(cart)
            logger.info(f"Item {item_id} removed from cart {cart.id}")
            return None

        subscription = self._active_subscription(user_id)

        product = item.product
        new_weight = product.weight_in_kg * quantity
        if product.stock < quantity:
            raise ValueError(f"Only {product.stock} units available")

        # only growth is checked; shrinking a line is always allowed, even
        # when a plan downgrade already left the cart over the limit
        if new_weight > item.weight_in_kg:
            check_capacity(
                subscription,
                cart.total_weight_in_kg - item.weight_in_kg + new_weight,
                action="increase the quantity",
                scope=CART_SCOPE,
            )

        item.quantity = quantity
        item.weight_in_kg = new_weight
        self.repo.add_cart_item(item)
        self._commit_version(cart)
        self.repo.refresh(item)

        logger.info(f"Item {item_id} in cart {cart.id} set to quantity {quantity}")
        return item

    def remove_item(self, user_id: int, item_id: int):
        item, cart = self._owned_item(user_id, item_id)
        self.repo.delete_cart_item(item)
        self._commit_version(cart)
        logger.info(f"Item {item_id} removed from cart {cart.id}")

    def clear(self, user_id: int) -> bool:
        """Empty the cart. Returns False when there was nothing to clear."""
        cart = self.repo.get_cart_by_user(user_id)
        if not cart or not cart.items:
            return False

        self.repo.clear_items(cart.id)
        self._commit_version(cart)
        logger.info(f"Cart {cart.id} cleared")
        return True

    # helpers
    def _get_or_create(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart

        created = self.repo.create_cart(CartModel(user_id=user_id, version=1))
        logger.info(f"Created cart {created.id} for user {user_id}")
        return created

    def _active_subscription(self, user_id: int):
        subscription = self.subscriptions.get_by_user(user_id)
        if not subscription or not subscription.is_active:
            raise PermissionError("You do not have an active subscription")
        return subscription

    def _owned_item(self, user_id: int, item_id: int):
        item = self.repo.get_cart_item(item_id)
        if not item:
            raise NotFoundError("Cart item not found")

        cart = item.cart
        if cart.user_id != user_id:
            raise PermissionError("You are not allowed to modify this cart")
        return item, cart

    def _commit_version(self, cart: CartModel):
        rowcount = self.repo.update_cart_version(cart.id, cart.version)

        # UPDATE carts SET version = 2 WHERE id = 1 AND version = 1 -> 0 rows means a lost race
        if rowcount == 0:
            self.repo.rollback()
            raise ConflictError("Concurrency conflict: the cart was modified by another request")

        self.repo.commit()
        self.repo.refresh(cart)

    def _summary(self, cart: CartModel, user_id: int) -> Dict[str, Any]:
        subscription = self.subscriptions.get_by_user(user_id)
        return {
            "id": cart.id,
            "user_id": cart.user_id,
            "version": cart.version,
            "items": list(cart.items),
            "total_weight_in_kg": cart.total_weight_in_kg,
            "limit_in_kg": subscription.limit_in_kg if subscription else 0.0,
            "used_kg": subscription.used_kg if subscription else 0.0,
            "remaining_kg": remaining_kg(subscription) if subscription else 0.0,
        }
