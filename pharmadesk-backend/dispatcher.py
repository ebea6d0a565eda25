# dispatcher.py
# Unified /api endpoint: each action maps to a body schema, an id requirement,
# a data-access call and its success/failure status codes.
import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

import databases
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

import crud
from database import get_database
from responses import envelope, error_fields, respond, send_json_response
from schemas import ProductCreate, ProductUpdate, UserCreate, UserLogin

logger = logging.getLogger(__name__)

router = APIRouter()

Handler = Callable[[databases.Database, Any, Optional[int]], Awaitable[Dict[str, Any]]]


@dataclass(frozen=True)
class Action:
    handler: Handler
    invalid_message: str = ""
    schema: Optional[Type[BaseModel]] = None
    needs_id: bool = False
    success_status: int = 200
    failure_status: int = 400


async def _create_user(database, user: UserCreate, _id):
    return await crud.Users(database).create_user(
        user.user_id,
        user.user_pass,
        user.user_department,
        user.user_type,
        user.user_status,
    )


async def _login_user(database, login: UserLogin, _id):
    return await crud.Users(database).login_user(login.user_id, login.user_pass)


async def _create_product(database, product: ProductCreate, _id):
    return await crud.Products(database).create_product(product.model_dump())


async def _get_products(database, _payload, _id):
    return await crud.Products(database).get_products()


async def _get_product_by_id(database, _payload, product_id: int):
    return await crud.Products(database).get_product_by_id(product_id)


async def _update_product(database, product: ProductUpdate, product_id: int):
    return await crud.Products(database).update_product(product_id, product.changes())


async def _delete_product(database, _payload, product_id: int):
    return await crud.Products(database).delete_product(product_id)


ACTIONS: Dict[str, Dict[str, Action]] = {
    "POST": {
        "createUser": Action(
            _create_user,
            "Missing required fields for user creation.",
            schema=UserCreate,
            success_status=201,
        ),
        "loginUser": Action(
            _login_user,
            "Missing user ID or password for login.",
            schema=UserLogin,
            failure_status=401,
        ),
        "createProduct": Action(
            _create_product,
            "Missing required fields for product creation.",
            schema=ProductCreate,
            success_status=201,
        ),
    },
    "GET": {
        "getProducts": Action(_get_products, failure_status=404),
        "getProductById": Action(
            _get_product_by_id,
            "Product ID is missing or invalid.",
            needs_id=True,
            failure_status=404,
        ),
    },
    "PUT": {
        "updateProduct": Action(
            _update_product,
            "Product ID or data missing for update.",
            schema=ProductUpdate,
            needs_id=True,
        ),
    },
    "DELETE": {
        "deleteProduct": Action(
            _delete_product,
            "Product ID missing for delete.",
            needs_id=True,
        ),
    },
}

# Registered on the route so that unsupported verbs reach the handler and get an envelope
ROUTE_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH", "HEAD"]


def parse_id(raw: Optional[str]) -> Optional[int]:
    """Read a numeric ``id`` the way the dashboard sends it; fractions are truncated."""
    if raw is None:
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return int(value)


async def read_json_body(request: Request) -> Dict[str, Any]:
    """Decode the request body as a JSON object; anything else reads as empty."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed JSON body on %s %s", request.method, request.url.path)
        return {}
    return data if isinstance(data, dict) else {}


def _invalid(action: Action, fields: List[str]) -> JSONResponse:
    return send_json_response(envelope(False, action.invalid_message, fields=fields), 400)


@router.api_route("/api", methods=ROUTE_METHODS)
async def dispatch(
    request: Request,
    action: str = "",
    database: databases.Database = Depends(get_database),
):
    method = request.method

    if method == "OPTIONS":
        return send_json_response({"message": "Preflight OK"})

    if method not in ACTIONS:
        return send_json_response(envelope(False, "Method not allowed."), 405)

    if not action and method != "GET":
        return send_json_response(envelope(False, "Action not specified."), 400)

    selected = ACTIONS[method].get(action)
    if selected is None:
        logger.info("Rejected unknown %s action %r", method, action)
        return send_json_response(envelope(False, f"Invalid {method} action."), 400)

    record_id = None
    if selected.needs_id:
        record_id = parse_id(request.query_params.get("id"))
        if record_id is None:
            return _invalid(selected, ["id"])

    payload = None
    if selected.schema is not None:
        body = await read_json_body(request)
        try:
            payload = selected.schema.model_validate(body)
        except ValidationError as exc:
            return _invalid(selected, error_fields(exc.errors()))

    result = await selected.handler(database, payload, record_id)
    return respond(result, selected.success_status, selected.failure_status)
