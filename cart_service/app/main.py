# cart_service/app/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorCollection

from cart_service.app.db.database import Settings, configure_logging, create_client, get_collection, get_db
from cart_service.app.db.functions import (
    AddResult,
    CartNotFound,
    StorageFailure,
    add_products_to_cart,
    fetch_cart,
    remove_product_from_cart,
    update_product_quantity,
)
from cart_service.app.db.init_db import init_db
from cart_service.app.db.schemas import (
    AddToCartRequest,
    CartResponse,
    DeleteProductRequest,
    StatusResponse,
    UpdateQuantityRequest,
    UserCartInfo,
)

logger = logging.getLogger(__name__)

NO_NEW_PRODUCTS = "No new products added."
QUANTITY_UPDATED = "Quantity updated"
PRODUCT_REMOVED = "Product removed from cart"
CART_OR_PRODUCT_NOT_FOUND = "Cart or product not found"
CART_NOT_FOUND = "Cart not found"
PRODUCT_NOT_IN_CART = "Product not found in cart"
INTERNAL_ERROR = "Internal server error"


def not_found(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"success": False, "message": message},
    )


def create_app(settings: Optional[Settings] = None, client=None) -> FastAPI:
    """Build the cart service.

    ``client`` is any Motor-compatible client; when omitted one is created from
    ``settings`` on startup and closed on shutdown.
    """
    settings = settings or Settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned_client = client is None
        db_client = create_client(settings) if owned_client else client
        try:
            app.state.carts = get_collection(db_client, settings)
            await init_db(app.state.carts)
            logger.info("cart_service started, collection %s.%s", settings.db_name, settings.collection)
            yield
        finally:
            if owned_client:
                db_client.close()

    app = FastAPI(title="cart_service", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorageFailure)
    async def storage_failure_handler(request: Request, exc: StorageFailure):
        logger.error("Storage failure on %s", request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": INTERNAL_ERROR},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning("Validation error for request %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=422,
            content={"success": False, "detail": jsonable_encoder(exc.errors())},
        )

    # Добавление товаров в корзину
    @app.post("/carts", response_model=StatusResponse, response_model_exclude_none=True)
    async def add_to_cart(
        cart_request: AddToCartRequest,
        response: Response,
        db: AsyncIOMotorCollection = Depends(get_db),
    ):
        result = await add_products_to_cart(db, cart_request.email, cart_request.products)
        if result is AddResult.NOTHING_TO_ADD:
            return StatusResponse(success=True, message=NO_NEW_PRODUCTS)
        response.status_code = status.HTTP_201_CREATED
        return StatusResponse(success=True)

    # Обновление количества товара в корзине
    @app.post("/update-quantity", response_model=StatusResponse)
    async def update_quantity(update_request: UpdateQuantityRequest, db: AsyncIOMotorCollection = Depends(get_db)):
        try:
            await update_product_quantity(
                db, update_request.email, update_request.product_id, update_request.quantity
            )
        except CartNotFound:
            return not_found(CART_OR_PRODUCT_NOT_FOUND)
        return StatusResponse(success=True, message=QUANTITY_UPDATED)

    @app.post("/fetch-cart", response_model=CartResponse)
    async def fetch_cart_details(user_cart: UserCartInfo, db: AsyncIOMotorCollection = Depends(get_db)):
        try:
            cart = await fetch_cart(db, user_cart.email)
        except CartNotFound:
            return not_found(CART_NOT_FOUND)
        return {"success": True, "cart": cart}

    # Удаление товара из корзины
    @app.post("/delete-product", response_model=StatusResponse)
    async def delete_cart_product(delete_request: DeleteProductRequest, db: AsyncIOMotorCollection = Depends(get_db)):
        try:
            await remove_product_from_cart(db, delete_request.email, delete_request.product_id)
        except CartNotFound:
            return not_found(PRODUCT_NOT_IN_CART)
        return StatusResponse(success=True, message=PRODUCT_REMOVED)

    @app.get("/")
    async def health_check():
        """Health check endpoint."""
        return {"status": "cart_service running"}

    return app


app = create_app()


def run():
    settings = Settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
