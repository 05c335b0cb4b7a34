"""
HTTP routers, one per resource, mounted by main.create_app.
"""
from routes import (
    auth,
    bornes,
    categories,
    chats,
    customers,
    deliveries,
    employees,
    menus,
    orders,
    products,
    promotions,
    restaurants,
    trackers,
    users,
)

routers = [
    auth.router,
    users.router,
    customers.router,
    employees.router,
    restaurants.router,
    categories.router,
    products.router,
    menus.router,
    promotions.router,
    orders.router,
    deliveries.router,
    chats.router,
    trackers.router,
    bornes.router,
]
