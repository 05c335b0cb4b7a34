"""
Database Schemas for the ESGIKing ordering and delivery platform

Each Pydantic model below corresponds to a MongoDB collection.
The collection name is the pluralized lowercase resource name
(e.g., Account -> "users", Category -> "categories").
References to other documents are carried as id strings and stored
as ObjectIds by the repositories.
"""
from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class EmployeeRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    PREPARER = "preparer"
    DELIVERYMAN = "deliveryman"


OrderStatus = Literal["pending", "preparing", "accepted", "delivered", "cancelled"]
DeliveryStatus = Literal["pending", "preparing", "ready", "delivering", "delivered", "canceled"]
BorneStatus = Literal["disabled", "functional", "error", "maintenance"]
PromotionType = Literal["percentage", "fixed"]
OrderItemType = Literal["product", "menu"]


class Account(BaseModel):
    first_name: str = Field(..., description="Given name")
    last_name: str = Field(..., description="Family name")
    email: EmailStr = Field(..., description="Unique email address")
    password_hash: str = Field(..., description="BCrypt password hash")
    address: Optional[str] = Field(None, description="Reference to addresses _id")


class Address(BaseModel):
    street: str
    city: str
    postal_code: str
    longitude: float = Field(..., ge=-180, le=180)
    latitude: float = Field(..., ge=-90, le=90)


class Employee(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    role: EmployeeRole
    user: str = Field(..., description="Reference to users _id")
    restaurant: Optional[str] = Field(None, description="Reference to restaurants _id")
    session: Optional[str] = None
    tracker: Optional[str] = None


class Customer(BaseModel):
    user: str = Field(..., description="Reference to users _id")
    orders: List[str] = []
    session: Optional[str] = None


class Session(BaseModel):
    user: Optional[str] = Field(None, description="Customer account holding the session")
    employee: Optional[str] = Field(None, description="Employee holding the session")
    token: str = Field(..., description="Random bearer credential")


class Restaurant(BaseModel):
    name: str
    description: str = ""
    telephone: Optional[str] = None
    address: str = Field(..., description="Reference to addresses _id")
    responsible: Optional[str] = Field(None, description="Employee in charge")
    employees: List[str] = []


class Category(BaseModel):
    name: str
    description: str = ""
    promotion: Optional[str] = None
    products: List[str] = []


class Product(BaseModel):
    name: str
    description: str = ""
    price: float = Field(..., ge=0)
    category: str = Field(..., description="Reference to categories _id")
    promotion: Optional[str] = None


class Menu(BaseModel):
    name: str
    description: str = ""
    products: List[str] = []
    promotion: Optional[str] = None


class Promotion(BaseModel):
    type: PromotionType
    value: float = Field(..., ge=0)
    start_date: datetime
    end_date: datetime
    conditions: Optional[str] = None
    restaurant: Optional[str] = None
    responsible: Optional[str] = Field(None, description="Employee who created the promotion")


class OrderItem(BaseModel):
    type: OrderItemType
    item: str = Field(..., description="Reference to products or menus _id")
    quantity: int = Field(..., ge=1)


class Order(BaseModel):
    customer: str = Field(..., description="Reference to customers _id")
    restaurant: str = Field(..., description="Reference to restaurants _id")
    items: List[OrderItem]
    promotion: Optional[str] = None
    status: OrderStatus = "pending"
    preparer: Optional[str] = None
    delivery_man: Optional[str] = None


class Delivery(BaseModel):
    address: str
    order: str = Field(..., description="Reference to orders _id")
    customer: str = Field(..., description="Reference to customers _id")
    employee: Optional[str] = Field(None, description="Assigned deliveryman")
    status: DeliveryStatus = "pending"
    estimated_delivery: datetime
    actual_delivery: Optional[datetime] = None


class Chat(BaseModel):
    delivery: str = Field(..., description="Reference to deliveries _id")
    author: Optional[str] = Field(None, description="Account that wrote the message")
    message: str = Field(..., min_length=1)
    is_read: bool = False


class Tracker(BaseModel):
    employee: str = Field(..., description="Reference to employees _id")
    longitude: float = Field(0, ge=-180, le=180)
    latitude: float = Field(0, ge=-90, le=90)


class Borne(BaseModel):
    restaurant: str = Field(..., description="Reference to restaurants _id")
    status: BorneStatus = "disabled"
