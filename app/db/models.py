from datetime import datetime

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, Integer, Float, DateTime, ForeignKey

# Each source database gets its own metadata; tables never join across them.

class AdminBase(DeclarativeBase):
    pass

class CustomerBase(DeclarativeBase):
    pass

class ImsBase(DeclarativeBase):
    pass

class MachineBase(DeclarativeBase):
    pass


# --- admin: reference/catalog data ---

class City(AdminBase):
    __tablename__ = "Cities"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120))

class Location(AdminBase):
    __tablename__ = "Locations"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    display_name: Mapped[str] = mapped_column("displayName", String(200))
    city_id: Mapped[int] = mapped_column("cityId", ForeignKey("Cities.id"))

class Product(AdminBase):
    __tablename__ = "Products"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200))

class Variant(AdminBase):
    __tablename__ = "Variants"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    product_id: Mapped[int] = mapped_column("productId", ForeignKey("Products.id"))
    unit_weight: Mapped[float | None] = mapped_column("unitWeight", Float, nullable=True)


# --- customer: orders ---

class User(CustomerBase):
    __tablename__ = "Users"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone_number: Mapped[str | None] = mapped_column("phoneNumber", String(32), nullable=True)

class Order(CustomerBase):
    __tablename__ = "Orders"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int | None] = mapped_column("userId", Integer, nullable=True, index=True)
    location_id: Mapped[int] = mapped_column("locationId", Integer, index=True)
    status: Mapped[str] = mapped_column(String(32))
    order_at: Mapped[datetime] = mapped_column("orderAt", DateTime, index=True)
    total_amount: Mapped[float] = mapped_column("totalAmount", Float)

class OrderItem(CustomerBase):
    __tablename__ = "OrderItems"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column("orderId", ForeignKey("Orders.id"), index=True)
    variant_id: Mapped[int] = mapped_column("variantId", Integer, index=True)
    qty: Mapped[float] = mapped_column(Float)
    selling_price: Mapped[float] = mapped_column("sellingPrice", Float)


# --- ims: inventory ledger ---

class LocationInventory(ImsBase):
    __tablename__ = "LocationInventories"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    location_id: Mapped[int] = mapped_column("locationId", Integer, index=True)
    variant_id: Mapped[int] = mapped_column("variantId", Integer, index=True)
    qty: Mapped[float] = mapped_column(Float)

class LocationInventoryLog(ImsBase):
    __tablename__ = "LocationInventoryLogs"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    location_inventory_id: Mapped[int] = mapped_column(
        "locationInventoryId", ForeignKey("LocationInventories.id"), index=True
    )
    type: Mapped[str] = mapped_column(String(16))  # inward | outward | intransit | default
    qty: Mapped[float] = mapped_column(Float)
    price_with_tax: Mapped[float | None] = mapped_column("priceWithTax", Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column("createdAt", DateTime, index=True)


# --- machine: scale readings ---

class Scale(MachineBase):
    __tablename__ = "Scales"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    variant_id: Mapped[int] = mapped_column("variantId", Integer, index=True)
    current_weight: Mapped[float] = mapped_column("currentWeight", Float)
    updated_at: Mapped[datetime] = mapped_column("updatedAt", DateTime)
