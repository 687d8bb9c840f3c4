# import all models so SQLAlchemy registers them on Base.metadata

from harvest.data.models.user import UserModel
from harvest.data.models.subscription import SubscriptionModel
from harvest.data.models.producer import ProducerModel
from harvest.data.models.product import ProductModel
from harvest.data.models.cart import CartModel
from harvest.data.models.cart_item import CartItemModel
from harvest.data.models.order import OrderModel
from harvest.data.models.order_item import OrderItemModel

__all__ = [
    "UserModel",
    "SubscriptionModel",
    "ProducerModel",
    "ProductModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
]
