from __future__ import annotations

import contextlib
import functools
import json
import logging
import typing as t
from collections.abc import AsyncIterator

from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from cart_db.core.errors import CartError, ValidationError, to_error_response
from cart_db.core.pricing import PriceBook
from cart_db.core.service import CartService
from cart_db.core.validation import (
    validate_add_item_request,
    validate_customer_request,
    validate_rehydration_request,
)
from cart_db.storage.base import CartStorage
from cart_db.storage.memory import InMemoryCartStore
from cart_db.storage.sweeper import Sweeper
from cart_db.tokens.codec import RecoveryTokenCodec
from cart_db.utils.clock import Clock, SystemClock
from cart_db.utils.config import AppConfig

from .serializers import cart_to_dict, response_to_dict

logger = logging.getLogger(__name__)

STATUS_BY_CODE = {
    "VALIDATION_ERROR": 400,
    "TOKEN_ERROR": 401,
    "NOT_FOUND": 404,
}

Endpoint = t.Callable[[Request], t.Awaitable[Response]]


def error_response(error: BaseException) -> JSONResponse:
    body = to_error_response(error)
    status = STATUS_BY_CODE.get(body["error"]["code"], 500)
    return JSONResponse(body, status_code=status)


def handles_cart_errors(endpoint: Endpoint) -> Endpoint:
    @functools.wraps(endpoint)
    async def wrapper(request: Request) -> Response:
        try:
            return await endpoint(request)
        except CartError as exc:
            return error_response(exc)
        except Exception as exc:  # noqa: BLE001 - last-resort envelope for the client
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            return error_response(exc)

    return wrapper


async def _json_body(request: Request) -> t.Any:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON") from None


def _service(request: Request) -> CartService:
    return request.app.state.service


async def health(request: Request) -> JSONResponse:
    store = _service(request).store
    healthy = await store.is_healthy()
    return JSONResponse(
        {"status": "ok" if healthy else "degraded", "carts": await store.size()},
        status_code=200 if healthy else 503,
    )


@handles_cart_errors
async def create_cart(request: Request) -> Response:
    result = await _service(request).create_cart()
    return JSONResponse(response_to_dict(result), status_code=201)


@handles_cart_errors
async def rehydrate_cart(request: Request) -> Response:
    token = validate_rehydration_request(await _json_body(request))
    result = await _service(request).rehydrate_cart(token)
    return JSONResponse(response_to_dict(result), status_code=201)


@handles_cart_errors
async def get_cart(request: Request) -> Response:
    cart = await _service(request).get_cart(request.path_params["cart_id"])
    return JSONResponse({"cart": cart_to_dict(cart)})


@handles_cart_errors
async def delete_cart(request: Request) -> Response:
    await _service(request).delete_cart(request.path_params["cart_id"])
    return Response(status_code=204)


@handles_cart_errors
async def add_item(request: Request) -> Response:
    sku, quantity = validate_add_item_request(await _json_body(request))
    result = await _service(request).add_item(request.path_params["cart_id"], sku, quantity)
    return JSONResponse(response_to_dict(result))


@handles_cart_errors
async def remove_item(request: Request) -> Response:
    result = await _service(request).remove_item(
        request.path_params["cart_id"],
        request.path_params["item_id"],
    )
    return JSONResponse(response_to_dict(result))


@handles_cart_errors
async def update_customer(request: Request) -> Response:
    customer = validate_customer_request(await _json_body(request))
    cart = await _service(request).update_customer(request.path_params["cart_id"], customer)
    return JSONResponse({"cart": cart_to_dict(cart)})


async def not_found(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse({"error": {"code": "NOT_FOUND", "message": "Route not found"}}, status_code=404)


def create_app(
    config: t.Optional[AppConfig] = None,
    *,
    clock: t.Optional[Clock] = None,
    store: t.Optional[CartStorage] = None,
    start_sweeper: bool = True,
) -> Starlette:
    """Wire store, codec, price book and service into a Starlette app.

    The sweeper only exists for an `InMemoryCartStore`; it is started by the
    lifespan and stopped on shutdown.
    """
    config = config or AppConfig()
    clock = clock or SystemClock()
    if store is None:
        store = InMemoryCartStore.from_config(config.store, clock=clock)

    codec = RecoveryTokenCodec(config.tokens.secret, config.tokens.max_age_ms, clock=clock)
    service = CartService(store, codec, PriceBook.from_config(config.pricing), config.store.ttl_ms, clock=clock)
    sweeper = Sweeper(store, config.store.sweep_interval_ms) if isinstance(store, InMemoryCartStore) else None

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        if sweeper is not None and start_sweeper:
            sweeper.start()
        logger.info("Cart service started (ttl=%dms)", config.store.ttl_ms)
        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.stop()
            logger.info("Cart service shutting down...")

    app = Starlette(
        routes=[
            Route("/health", health, methods=["GET"]),
            Route("/cart", create_cart, methods=["POST"]),
            Route("/cart/rehydrate", rehydrate_cart, methods=["POST"]),
            Route("/cart/{cart_id}", get_cart, methods=["GET"]),
            Route("/cart/{cart_id}", delete_cart, methods=["DELETE"]),
            Route("/cart/{cart_id}/items", add_item, methods=["POST"]),
            Route("/cart/{cart_id}/items/{item_id}", remove_item, methods=["DELETE"]),
            Route("/cart/{cart_id}/customer", update_customer, methods=["PATCH"]),
        ],
        exception_handlers={404: not_found},
        lifespan=lifespan,
    )
    app.state.service = service
    app.state.sweeper = sweeper
    return app
