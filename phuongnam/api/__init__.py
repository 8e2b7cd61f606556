"""HTTP routers, one module per resource."""

from phuongnam.api import categories, chat, customers, foods, reservations, system

ROUTERS = [
    system.router,
    reservations.router,
    foods.router,
    categories.router,
    customers.router,
    chat.router,
]

__all__ = ["ROUTERS"]
