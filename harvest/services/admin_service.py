# harvest/services/admin_service.py
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from harvest.domain.enums import Role, ACTIVE_STATUSES
from harvest.repos.order_repo import OrderRepo
from harvest.repos.producer_repo import ProducerRepo
from harvest.repos.product_repo import ProductRepo
from harvest.repos.user_repo import UserRepo

LOW_STOCK_THRESHOLD = 5
RECENT_ORDERS = 10
MAX_PAGE_SIZE = 100


class AdminService:
    """Read-only views for the admin panel."""

    def __init__(self, db: Session):
        self.users = UserRepo(db)
        self.orders = OrderRepo(db)
        self.products = ProductRepo(db)
        self.producers = ProducerRepo(db)

    def list_users(self, page: int = 1, limit: int = 20, search: str | None = None, role: str | None = None):
        page = max(1, page)
        limit = min(MAX_PAGE_SIZE, max(1, limit))
        offset = (page - 1) * limit

        users, total = self.users.search(search, role, offset, limit)
        counts = self.users.order_counts([u.id for u in users])

        data = []
        for user in users:
            user.total_orders = counts.get(user.id, 0)
            data.append(user)

        meta = {
            "total": total,
            "page": page,
            "limit": limit,
            "has_next": offset + limit < total,
            "has_prev": page > 1,
            "filters": {"search": search, "role": role},
        }
        return data, meta

    def overview(self) -> dict:
        now = datetime.now(timezone.utc)
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        month_start = today.replace(day=1)

        today_orders, _ = self.orders.stats_since(today)
        month_orders, month_kg = self.orders.stats_since(month_start)

        recent = [
            {
                "id": order.id,
                "order_number": order.order_number,
                "customer_name": order.user.name,
                "total_weight_in_kg": order.total_weight_in_kg,
                "status": order.status,
                "created_at": order.created_at,
            }
            for order in self.orders.recent(RECENT_ORDERS)
        ]

        return {
            "summary": {
                "total_customers": self.users.count_by_role(Role.CUSTOMER.value),
                "total_producers": self.producers.count(),
                "available_products": self.products.count_available(),
                "active_orders": self.orders.count_in(ACTIVE_STATUSES),
                "low_stock_products": self.products.count_low_stock(LOW_STOCK_THRESHOLD),
            },
            "metrics": {
                "today_orders": today_orders,
                "month_orders": month_orders,
                "month_kg": month_kg,
            },
            "recent_orders": recent,
        }
