"""
One repository per collection. Each wraps create/find/update/delete calls
against the shared database; nothing here caches or spans transactions.
"""
from repositories.accounts import AccountRepository
from repositories.addresses import AddressRepository
from repositories.bornes import BorneRepository
from repositories.categories import CategoryRepository
from repositories.chats import ChatRepository
from repositories.customers import CustomerRepository
from repositories.deliveries import DeliveryRepository
from repositories.employees import EmployeeRepository
from repositories.menus import MenuRepository
from repositories.orders import OrderRepository
from repositories.products import ProductRepository
from repositories.promotions import PromotionRepository
from repositories.restaurants import RestaurantRepository
from repositories.sessions import SessionRepository
from repositories.trackers import TrackerRepository

__all__ = [
    "AccountRepository",
    "AddressRepository",
    "BorneRepository",
    "CategoryRepository",
    "ChatRepository",
    "CustomerRepository",
    "DeliveryRepository",
    "EmployeeRepository",
    "MenuRepository",
    "OrderRepository",
    "ProductRepository",
    "PromotionRepository",
    "RestaurantRepository",
    "SessionRepository",
    "TrackerRepository",
]
