# harvest/domain/enums.py
import enum


class Role(str, enum.Enum):
    CUSTOMER = "customer"
    EMPLOYEE = "employee"
    PRODUCER = "producer"
    ADMIN = "admin"


class Plan(str, enum.Enum):
    BASIC = "BASIC"
    STANDARD = "STANDARD"
    PREMIUM = "PREMIUM"


class Category(str, enum.Enum):
    FRUITS = "FRUITS"
    VEGETABLES = "VEGETABLES"
    LEGUMES = "LEGUMES"
    HERBS = "HERBS"
    SNACKS = "SNACKS"
    COFFEE = "COFFEE"
    CHOCOLATE = "CHOCOLATE"
    PROTEINS = "PROTEINS"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


VALID_STATUSES = frozenset(s.value for s in OrderStatus)
ACTIVE_STATUSES = (OrderStatus.CONFIRMED.value, OrderStatus.PREPARING.value, OrderStatus.READY.value)
