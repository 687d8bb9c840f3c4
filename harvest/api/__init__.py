# harvest/api/__init__.py
from fastapi import FastAPI

from harvest.api.routers import (
    admin,
    auth,
    carts,
    employee,
    health,
    orders,
    producers,
    products,
    subscriptions,
)

ROUTERS = (
    health.router,
    auth.router,
    subscriptions.router,
    producers.router,
    products.router,
    carts.router,
    orders.router,
    employee.router,
    admin.router,
)


def include_routers(app: FastAPI):
    for router in ROUTERS:
        app.include_router(router)
