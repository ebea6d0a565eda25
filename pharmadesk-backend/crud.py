# crud.py
# Data-access classes. Each returns an envelope; expected failures never raise.
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import databases
import sqlalchemy
from sqlalchemy.sql import Select

from models import Customer, InventoryItem, Manufacturer, Product, Sale, User
from responses import envelope
from security import create_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)

users = User.__table__
products = Product.__table__
inventory = InventoryItem.__table__
sales = Sale.__table__
manufacturers = Manufacturer.__table__
customers = Customer.__table__


def _column_names(query: Select) -> List[str]:
    return [column.name for column in query.selected_columns]


class TableStore:
    """Shared plumbing for a single-table data-access class."""

    table: sqlalchemy.Table
    label = "Record"

    def __init__(self, database: databases.Database):
        self.database = database
        self.pk = list(self.table.primary_key.columns)[0]

    # Subclasses override to add joined display columns
    def select_query(self) -> Select:
        return sqlalchemy.select(self.table)

    async def _fetch_all(self, query: Select) -> List[Dict[str, Any]]:
        names = _column_names(query)
        rows = await self.database.fetch_all(query)
        return [{name: row[name] for name in names} for row in rows]

    async def _fetch_one(self, query: Select) -> Optional[Dict[str, Any]]:
        row = await self.database.fetch_one(query)
        if row is None:
            return None
        return {name: row[name] for name in _column_names(query)}

    async def _exists(self, record_id: int) -> bool:
        query = sqlalchemy.select(self.pk).where(self.pk == record_id)
        return await self.database.fetch_one(query) is not None

    async def create(self, values: Dict[str, Any]) -> Dict[str, Any]:
        try:
            record_id = await self.database.execute(self.table.insert().values(**values))
        except Exception:
            logger.exception("Failed to create %s", self.label.lower())
            return envelope(False, f"Unable to create {self.label.lower()}.")
        logger.info("Created %s %s", self.label.lower(), record_id)
        return envelope(True, f"{self.label} created successfully.", data={self.pk.name: record_id, **values})

    async def list(self) -> Dict[str, Any]:
        try:
            records = await self._fetch_all(self.select_query())
        except Exception:
            logger.exception("Failed to list %s records", self.label.lower())
            return envelope(False, f"Unable to retrieve {self.label.lower()} records.")
        return envelope(True, f"{len(records)} {self.label.lower()} record(s) found.", data=records)

    async def get(self, record_id: int) -> Dict[str, Any]:
        try:
            record = await self._fetch_one(self.select_query().where(self.pk == record_id))
        except Exception:
            logger.exception("Failed to fetch %s %s", self.label.lower(), record_id)
            return envelope(False, f"Unable to retrieve {self.label.lower()}.")
        if record is None:
            return envelope(False, f"{self.label} not found.")
        return envelope(True, f"{self.label} found.", data=record)

    async def update(self, record_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        if not fields:
            return envelope(False, "No fields to update.")
        try:
            if not await self._exists(record_id):
                return envelope(False, f"{self.label} not found.")
            await self.database.execute(
                self.table.update().where(self.pk == record_id).values(**fields)
            )
            record = await self._fetch_one(self.select_query().where(self.pk == record_id))
        except Exception:
            logger.exception("Failed to update %s %s", self.label.lower(), record_id)
            return envelope(False, f"Unable to update {self.label.lower()}.")
        logger.info("Updated %s %s", self.label.lower(), record_id)
        return envelope(True, f"{self.label} updated successfully.", data=record)

    async def delete(self, record_id: int) -> Dict[str, Any]:
        try:
            if not await self._exists(record_id):
                return envelope(False, f"{self.label} not found.")
            await self.database.execute(self.table.delete().where(self.pk == record_id))
        except Exception:
            logger.exception("Failed to delete %s %s", self.label.lower(), record_id)
            return envelope(False, f"Unable to delete {self.label.lower()}.")
        logger.info("Deleted %s %s", self.label.lower(), record_id)
        return envelope(True, f"{self.label} deleted successfully.")

    async def count(self) -> Dict[str, Any]:
        query = sqlalchemy.select(sqlalchemy.func.count()).select_from(self.table)
        try:
            total = await self.database.fetch_val(query)
        except Exception:
            logger.exception("Failed to count %s records", self.label.lower())
            return envelope(False, f"Unable to count {self.label.lower()} records.")
        return envelope(True, f"{self.label} count retrieved.", count=total or 0)


# -------------------------------------------------------------------
# Users
# -------------------------------------------------------------------

class Users:
    def __init__(self, database: databases.Database):
        self.database = database

    async def _find(self, user_id: str):
        query = users.select().where(users.c.user_id == user_id)
        return await self.database.fetch_one(query)

    @staticmethod
    def _public(row) -> Dict[str, Any]:
        return {
            "id": row["id"],
            "user_id": row["user_id"],
            "user_department": row["user_department"],
            "user_type": row["user_type"],
            "user_status": row["user_status"],
        }

    async def create_user(
        self,
        user_id: str,
        password: str,
        department: str,
        user_type: str,
        user_status: int,
    ) -> Dict[str, Any]:
        try:
            if await self._find(user_id) is not None:
                return envelope(False, "User ID already exists.")
            query = users.insert().values(
                user_id=user_id,
                user_pass=get_password_hash(password),
                user_department=department,
                user_type=user_type,
                user_status=user_status,
            )
            new_id = await self.database.execute(query)
        except Exception:
            logger.exception("Failed to create user %s", user_id)
            return envelope(False, "Unable to create user.")
        logger.info("Created user %s", user_id)
        return envelope(
            True,
            "User created successfully.",
            data={
                "id": new_id,
                "user_id": user_id,
                "user_department": department,
                "user_type": user_type,
                "user_status": user_status,
            },
        )

    async def login_user(self, user_id: str, password: str) -> Dict[str, Any]:
        try:
            row = await self._find(user_id)
        except Exception:
            logger.exception("Failed to look up user %s", user_id)
            return envelope(False, "Unable to log in.")
        # Same message for unknown user and wrong password
        if row is None or not verify_password(password, row["user_pass"]):
            logger.warning("Failed login for user %s", user_id)
            return envelope(False, "Invalid user ID or password.")
        if not row["user_status"]:
            logger.warning("Login refused for inactive user %s", user_id)
            return envelope(False, "User account is inactive.")

        user = self._public(row)
        user["access_token"] = create_access_token(data={"sub": user_id})
        user["token_type"] = "bearer"
        return envelope(True, "Login successful.", data=user)

    async def get_user(self, user_id: str) -> Dict[str, Any]:
        try:
            row = await self._find(user_id)
        except Exception:
            logger.exception("Failed to look up user %s", user_id)
            return envelope(False, "Unable to retrieve user.")
        if row is None:
            return envelope(False, "User not found.")
        return envelope(True, "User found.", data=self._public(row))


# -------------------------------------------------------------------
# Products
# -------------------------------------------------------------------

class Products(TableStore):
    table = products
    label = "Product"

    def select_query(self) -> Select:
        return (
            sqlalchemy.select(products, manufacturers.c.ManufacturerName)
            .select_from(
                products.outerjoin(
                    manufacturers,
                    products.c.ManufacturerID == manufacturers.c.ManufacturerID,
                )
            )
            .order_by(products.c.ProductName)
        )

    async def create_product(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self.create(fields)

    async def get_products(self) -> Dict[str, Any]:
        return await self.list()

    async def get_product_by_id(self, product_id: int) -> Dict[str, Any]:
        return await self.get(product_id)

    async def update_product(self, product_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self.update(product_id, fields)

    async def delete_product(self, product_id: int) -> Dict[str, Any]:
        return await self.delete(product_id)


# -------------------------------------------------------------------
# Inventory
# -------------------------------------------------------------------

class Inventory(TableStore):
    table = inventory
    label = "Inventory item"

    def select_query(self) -> Select:
        return (
            sqlalchemy.select(inventory, products.c.ProductName)
            .select_from(
                inventory.outerjoin(products, inventory.c.ProductID == products.c.ProductID)
            )
            .order_by(inventory.c.ExpiryDate)
        )

    async def create_item(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        try:
            known = await self._product_exists(fields["ProductID"])
        except Exception:
            logger.exception("Failed to look up product %s", fields["ProductID"])
            return envelope(False, "Unable to create inventory item.")
        if not known:
            return envelope(False, "Product not found.")
        return await self.create(fields)

    async def update_item(self, inventory_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        if "ProductID" in fields:
            try:
                known = await self._product_exists(fields["ProductID"])
            except Exception:
                logger.exception("Failed to look up product %s", fields["ProductID"])
                return envelope(False, "Unable to update inventory item.")
            if not known:
                return envelope(False, "Product not found.")
        return await self.update(inventory_id, fields)

    async def _product_exists(self, product_id: int) -> bool:
        query = sqlalchemy.select(products.c.ProductID).where(products.c.ProductID == product_id)
        return await self.database.fetch_one(query) is not None


# -------------------------------------------------------------------
# Sales
# -------------------------------------------------------------------

class Sales(TableStore):
    table = sales
    label = "Sale"

    def select_query(self) -> Select:
        return (
            sqlalchemy.select(sales, customers.c.CustomerName)
            .select_from(
                sales.outerjoin(customers, sales.c.CustomerID == customers.c.CustomerID)
            )
            .order_by(sales.c.SaleDate.desc(), sales.c.SaleID.desc())
        )

    # Records the sale header only; stock levels are left untouched.
    async def create_sale(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self.create(fields)

    async def today_total(self, day: Optional[date] = None) -> Dict[str, Any]:
        day = day or date.today()
        query = sqlalchemy.select(
            sqlalchemy.func.coalesce(sqlalchemy.func.sum(sales.c.TotalAmount), 0)
        ).where(sales.c.SaleDate == day)
        try:
            total = await self.database.fetch_val(query)
        except Exception:
            logger.exception("Failed to total sales for %s", day)
            return envelope(False, "Unable to compute sales total.")
        return envelope(True, f"Sales total for {day.isoformat()}.", total=float(total or 0))


# -------------------------------------------------------------------
# Lookups used for dropdown population
# -------------------------------------------------------------------

class Manufacturers(TableStore):
    table = manufacturers
    label = "Manufacturer"

    def select_query(self) -> Select:
        return sqlalchemy.select(manufacturers).order_by(manufacturers.c.ManufacturerName)


class Customers(TableStore):
    table = customers
    label = "Customer"

    def select_query(self) -> Select:
        return sqlalchemy.select(customers).order_by(customers.c.CustomerName)
