"""
SQLAlchemy Database Models

Relational schema for the digital menu:
- Users (restaurant owners, OTP login)
- Restaurants, Categories, Dishes (owner-managed menu registry)
- Orders and their line items
- Server-side customer carts

Prices and totals are integers in the currency's minor unit.

Version: 1.0.0
"""

import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from digital_menu.database import Base


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"


# =============================================================================
# ASSOCIATION TABLES
# =============================================================================

dish_categories = Table(
    "dish_categories",
    Base.metadata,
    Column("dish_id", ForeignKey("dishes.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)

dish_restaurants = Table(
    "dish_restaurants",
    Base.metadata,
    Column("dish_id", ForeignKey("dishes.id", ondelete="CASCADE"), primary_key=True),
    Column("restaurant_id", ForeignKey("restaurants.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """
    Restaurant owner account.

    Created (or re-used) whenever a login code is requested. The code itself
    is never stored, only its SHA-256 digest.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(320), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False, default="")
    country = Column(String(100), nullable=False, default="")

    # =========================================================================
    # ONE-TIME CODE
    # =========================================================================
    otp_hash = Column(String(64), nullable=True)
    otp_expiry = Column(DateTime(timezone=True), nullable=True)
    otp_attempts = Column(Integer, nullable=False, default=0)
    otp_sent_at = Column(DateTime(timezone=True), nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    restaurants = relationship("Restaurant", back_populates="owner")

    @property
    def has_profile(self) -> bool:
        return bool(self.name) and bool(self.country)

    def __repr__(self):
        return f"<User #{self.id} - {self.email}>"


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    location = Column(String(255), nullable=False)
    slug = Column(String(160), unique=True, index=True, nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    owner = relationship("User", back_populates="restaurants")
    categories = relationship(
        "Category",
        back_populates="restaurant",
        cascade="all, delete-orphan",
    )
    dishes = relationship(
        "Dish",
        secondary=dish_restaurants,
        back_populates="restaurants",
    )
    orders = relationship(
        "Order",
        back_populates="restaurant",
        cascade="all, delete-orphan",
    )
    carts = relationship(
        "Cart",
        back_populates="restaurant",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Restaurant #{self.id} - {self.name}>"


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(80), nullable=False)
    restaurant_id = Column(
        Integer,
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    restaurant = relationship("Restaurant", back_populates="categories")
    dishes = relationship(
        "Dish",
        secondary=dish_categories,
        back_populates="categories",
    )

    def __repr__(self):
        return f"<Category #{self.id} - {self.name}>"


class Dish(Base):
    __tablename__ = "dishes"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Integer, nullable=False)
    spice_level = Column(String(40), nullable=False, default="")
    image_url = Column(String(500), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    categories = relationship(
        "Category",
        secondary=dish_categories,
        back_populates="dishes",
    )
    restaurants = relationship(
        "Restaurant",
        secondary=dish_restaurants,
        back_populates="dishes",
    )

    def __repr__(self):
        return f"<Dish #{self.id} - {self.name} ({self.price})>"


class Order(Base):
    """
    A customer's submitted cart.

    ``total`` is always computed on the server from dish prices at the time
    the order was placed.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    customer_name = Column(String(100), nullable=False)
    table_number = Column(String(20), nullable=False)
    restaurant_id = Column(
        Integer,
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    total = Column(Integer, nullable=False)
    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    restaurant = relationship("Restaurant", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def __repr__(self):
        return f"<Order #{self.id} - {self.customer_name} - {self.status.value}>"


class OrderItem(Base):
    """One dish-quantity-price line of an order."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    dish_id = Column(Integer, ForeignKey("dishes.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(120), nullable=False)
    price = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)

    order = relationship("Order", back_populates="items")

    @property
    def line_total(self) -> int:
        return self.price * self.quantity


class Cart(Base):
    """
    Server-side cart for one customer at one restaurant, addressed by an
    opaque token held by the browser.
    """
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    token = Column(String(64), unique=True, index=True, nullable=False)
    restaurant_id = Column(
        Integer,
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    customer_name = Column(String(100), nullable=True)
    table_number = Column(String(20), nullable=True)
    last_order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    restaurant = relationship("Restaurant", back_populates="carts")
    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.id",
    )


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (UniqueConstraint("cart_id", "dish_id", name="uq_cart_item_dish"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    cart_id = Column(
        Integer,
        ForeignKey("carts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    dish_id = Column(
        Integer,
        ForeignKey("dishes.id", ondelete="CASCADE"),
        nullable=False,
    )
    quantity = Column(Integer, nullable=False)

    cart = relationship("Cart", back_populates="items")
    dish = relationship("Dish")
