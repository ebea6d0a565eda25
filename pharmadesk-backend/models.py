# models.py

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(100), unique=True, index=True, nullable=False)
    user_pass = Column(String(255), nullable=False)
    user_department = Column(String(100), nullable=False)
    user_type = Column(String(50), nullable=False)
    user_status = Column(Integer, nullable=False, default=1)


class Manufacturer(Base):
    __tablename__ = "Manufacturers"

    ManufacturerID = Column(Integer, primary_key=True, index=True)
    ManufacturerName = Column(String(255), nullable=False)


class Customer(Base):
    __tablename__ = "Customers"

    CustomerID = Column(Integer, primary_key=True, index=True)
    CustomerName = Column(String(255), nullable=False)


class Product(Base):
    __tablename__ = "Products"

    ProductID = Column(Integer, primary_key=True, index=True)
    ProductName = Column(String(255), nullable=False)
    GenericName = Column(String(255), nullable=False)
    Strength = Column(String(100), nullable=False)
    PharmaceuticalForm = Column(String(100), nullable=False)
    RouteOfAdministration = Column(String(100), nullable=False)
    ManufacturerID = Column(
        Integer,
        ForeignKey("Manufacturers.ManufacturerID", ondelete="SET NULL"),
        nullable=True,
    )
    ATC_Code = Column(String(20), nullable=False)
    Description = Column(Text, nullable=False, default="")
    PrescriptionRequired = Column(Boolean, nullable=False, default=False)
    DrugIdentificationNumber = Column(String(50), nullable=False)


class InventoryItem(Base):
    __tablename__ = "Inventory"

    InventoryID = Column(Integer, primary_key=True, index=True)
    ProductID = Column(
        Integer,
        ForeignKey("Products.ProductID", ondelete="CASCADE"),
        nullable=False,
    )
    BatchNumber = Column(String(100), nullable=False)
    ExpiryDate = Column(Date, nullable=False)
    QuantityInStock = Column(Integer, nullable=False, default=0)
    Location = Column(String(100), nullable=True)
    CostPrice = Column(Numeric(10, 2), nullable=False)
    SellingPrice = Column(Numeric(10, 2), nullable=False)


class Sale(Base):
    __tablename__ = "Sales"

    SaleID = Column(Integer, primary_key=True, index=True)
    SaleDate = Column(Date, nullable=False, index=True)
    CustomerID = Column(
        Integer,
        ForeignKey("Customers.CustomerID", ondelete="SET NULL"),
        nullable=True,
    )
    TotalAmount = Column(Numeric(10, 2), nullable=False)
