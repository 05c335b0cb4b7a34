import logging
from typing import Optional

from pymongo.database import Database

from config import Settings
from database import connect
from repositories import (
    AccountRepository,
    AddressRepository,
    BorneRepository,
    CategoryRepository,
    ChatRepository,
    CustomerRepository,
    DeliveryRepository,
    EmployeeRepository,
    MenuRepository,
    OrderRepository,
    ProductRepository,
    PromotionRepository,
    RestaurantRepository,
    SessionRepository,
    TrackerRepository,
)

logger = logging.getLogger(__name__)


class DomainContext:
    """Every repository, built once against a single database.

    Constructed at startup and handed to request handlers through the
    ``get_context`` dependency; tests build one on an in-memory database.
    """

    def __init__(self, db: Database):
        self.db = db
        self.accounts = AccountRepository(db)
        self.addresses = AddressRepository(db)
        self.employees = EmployeeRepository(db)
        self.customers = CustomerRepository(db)
        self.sessions = SessionRepository(db)
        self.restaurants = RestaurantRepository(db)
        self.categories = CategoryRepository(db)
        self.products = ProductRepository(db)
        self.menus = MenuRepository(db)
        self.promotions = PromotionRepository(db)
        self.orders = OrderRepository(db)
        self.deliveries = DeliveryRepository(db)
        self.chats = ChatRepository(db)
        self.trackers = TrackerRepository(db)
        self.bornes = BorneRepository(db)

    @classmethod
    def connect(cls, settings: Settings) -> "DomainContext":
        settings.require_database()
        return cls(connect(settings.database_url, settings.database_name))

    def close(self) -> None:
        client: Optional[object] = getattr(self.db, "client", None)
        if client is not None:
            client.close()
            logger.info("Closed MongoDB connection")
