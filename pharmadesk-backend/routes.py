# routes.py
import logging
from typing import Optional

import databases
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer

import crud
from database import get_database
from responses import envelope, respond, send_json_response
from schemas import (
    CustomerCreate,
    InventoryCreate,
    InventoryUpdate,
    ManufacturerCreate,
    ProductCreate,
    ProductUpdate,
    SaleCreate,
)
from security import decode_access_token

logger = logging.getLogger(__name__)

router = APIRouter()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api?action=loginUser")

# Status codes follow the dispatcher: create 201/400, read 200/404, update and delete 200/400.
# Single records are addressable as /<resource>/{id} and as /<resource>?id=N.


def missing_id(label: str):
    return send_json_response(envelope(False, f"{label} ID missing."), 400)


# -------------------------------------------------------------------
# Current user
# -------------------------------------------------------------------

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    database: databases.Database = Depends(get_database),
) -> dict:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    user_id = decode_access_token(token)
    if user_id is None:
        logger.warning("Rejected invalid or expired token")
        raise credentials_exception
    result = await crud.Users(database).get_user(user_id)
    if not result["success"]:
        raise credentials_exception
    user = result["data"]
    if not user["user_status"]:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Inactive user")
    return user


@router.get("/users/me")
async def read_current_user(current_user: dict = Depends(get_current_user)):
    """
    Return the account behind the bearer token.
    """
    return {"success": True, "message": "User found.", "data": current_user}


# -------------------------------------------------------------------
# Products
# -------------------------------------------------------------------

@router.get("/products/{product_id}")
async def get_product(product_id: int, database: databases.Database = Depends(get_database)):
    return respond(await crud.Products(database).get_product_by_id(product_id), 200, 404)


@router.get("/products")
async def list_products(
    product_id: Optional[int] = Query(None, alias="id"),
    database: databases.Database = Depends(get_database),
):
    """
    All products with their manufacturer name, or one product when ``id`` is given.
    """
    if product_id is not None:
        return await get_product(product_id, database)
    return respond(await crud.Products(database).get_products(), 200, 404)


@router.post("/products", status_code=status.HTTP_201_CREATED)
async def create_product(product: ProductCreate, database: databases.Database = Depends(get_database)):
    return respond(await crud.Products(database).create_product(product.model_dump()), 201, 400)


@router.put("/products/{product_id}")
async def update_product(
    product_id: int,
    product: ProductUpdate,
    database: databases.Database = Depends(get_database),
):
    return respond(await crud.Products(database).update_product(product_id, product.changes()))


@router.put("/products")
async def update_product_by_query(
    product: ProductUpdate,
    product_id: Optional[int] = Query(None, alias="id"),
    database: databases.Database = Depends(get_database),
):
    if product_id is None:
        return missing_id("Product")
    return await update_product(product_id, product, database)


@router.delete("/products/{product_id}")
async def delete_product(product_id: int, database: databases.Database = Depends(get_database)):
    return respond(await crud.Products(database).delete_product(product_id))


@router.delete("/products")
async def delete_product_by_query(
    product_id: Optional[int] = Query(None, alias="id"),
    database: databases.Database = Depends(get_database),
):
    if product_id is None:
        return missing_id("Product")
    return await delete_product(product_id, database)


@router.get("/products_count")
async def products_count(database: databases.Database = Depends(get_database)):
    return respond(await crud.Products(database).count(), 200, 500)


# -------------------------------------------------------------------
# Inventory
# -------------------------------------------------------------------

@router.get("/inventory/{inventory_id}")
async def get_inventory_item(inventory_id: int, database: databases.Database = Depends(get_database)):
    return respond(await crud.Inventory(database).get(inventory_id), 200, 404)


@router.get("/inventory")
async def list_inventory(
    inventory_id: Optional[int] = Query(None, alias="id"),
    database: databases.Database = Depends(get_database),
):
    """
    Inventory rows joined with their product name, soonest expiry first.
    """
    if inventory_id is not None:
        return await get_inventory_item(inventory_id, database)
    return respond(await crud.Inventory(database).list(), 200, 404)


@router.post("/inventory", status_code=status.HTTP_201_CREATED)
async def create_inventory_item(item: InventoryCreate, database: databases.Database = Depends(get_database)):
    return respond(await crud.Inventory(database).create_item(item.model_dump()), 201, 400)


@router.put("/inventory/{inventory_id}")
async def update_inventory_item(
    inventory_id: int,
    item: InventoryUpdate,
    database: databases.Database = Depends(get_database),
):
    return respond(await crud.Inventory(database).update_item(inventory_id, item.changes()))


@router.put("/inventory")
async def update_inventory_item_by_query(
    item: InventoryUpdate,
    inventory_id: Optional[int] = Query(None, alias="id"),
    database: databases.Database = Depends(get_database),
):
    if inventory_id is None:
        return missing_id("Inventory")
    return await update_inventory_item(inventory_id, item, database)


@router.delete("/inventory/{inventory_id}")
async def delete_inventory_item(inventory_id: int, database: databases.Database = Depends(get_database)):
    return respond(await crud.Inventory(database).delete(inventory_id))


@router.delete("/inventory")
async def delete_inventory_item_by_query(
    inventory_id: Optional[int] = Query(None, alias="id"),
    database: databases.Database = Depends(get_database),
):
    if inventory_id is None:
        return missing_id("Inventory")
    return await delete_inventory_item(inventory_id, database)


@router.get("/inventory_count")
async def inventory_count(database: databases.Database = Depends(get_database)):
    return respond(await crud.Inventory(database).count(), 200, 500)


# -------------------------------------------------------------------
# Sales
# -------------------------------------------------------------------

@router.get("/sales/{sale_id}")
async def get_sale(sale_id: int, database: databases.Database = Depends(get_database)):
    return respond(await crud.Sales(database).get(sale_id), 200, 404)


@router.get("/sales")
async def list_sales(
    sale_id: Optional[int] = Query(None, alias="id"),
    database: databases.Database = Depends(get_database),
):
    if sale_id is not None:
        return await get_sale(sale_id, database)
    return respond(await crud.Sales(database).list(), 200, 404)


@router.post("/sales", status_code=status.HTTP_201_CREATED)
async def create_sale(sale: SaleCreate, database: databases.Database = Depends(get_database)):
    """
    Record a sale header. Stock quantities are not adjusted.
    """
    return respond(await crud.Sales(database).create_sale(sale.model_dump()), 201, 400)


@router.delete("/sales/{sale_id}")
async def delete_sale(sale_id: int, database: databases.Database = Depends(get_database)):
    return respond(await crud.Sales(database).delete(sale_id))


@router.delete("/sales")
async def delete_sale_by_query(
    sale_id: Optional[int] = Query(None, alias="id"),
    database: databases.Database = Depends(get_database),
):
    if sale_id is None:
        return missing_id("Sale")
    return await delete_sale(sale_id, database)


@router.get("/sales_today_total")
async def sales_today_total(database: databases.Database = Depends(get_database)):
    return respond(await crud.Sales(database).today_total(), 200, 500)


# -------------------------------------------------------------------
# Manufacturers & customers (dropdown lookups)
# -------------------------------------------------------------------

@router.get("/manufacturers")
async def list_manufacturers(database: databases.Database = Depends(get_database)):
    return respond(await crud.Manufacturers(database).list(), 200, 404)


@router.post("/manufacturers", status_code=status.HTTP_201_CREATED)
async def create_manufacturer(
    manufacturer: ManufacturerCreate,
    database: databases.Database = Depends(get_database),
):
    return respond(await crud.Manufacturers(database).create(manufacturer.model_dump()), 201, 400)


@router.delete("/manufacturers/{manufacturer_id}")
async def delete_manufacturer(manufacturer_id: int, database: databases.Database = Depends(get_database)):
    return respond(await crud.Manufacturers(database).delete(manufacturer_id))


@router.get("/customers")
async def list_customers(database: databases.Database = Depends(get_database)):
    return respond(await crud.Customers(database).list(), 200, 404)


@router.post("/customers", status_code=status.HTTP_201_CREATED)
async def create_customer(customer: CustomerCreate, database: databases.Database = Depends(get_database)):
    return respond(await crud.Customers(database).create(customer.model_dump()), 201, 400)


@router.delete("/customers/{customer_id}")
async def delete_customer(customer_id: int, database: databases.Database = Depends(get_database)):
    return respond(await crud.Customers(database).delete(customer_id))
