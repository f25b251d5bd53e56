# cart_service/app/db/functions.py
import enum
import logging
from typing import Dict, Iterable, List, Optional

from pymongo.errors import DuplicateKeyError, PyMongoError

from cart_service.app.db.models import Cart, CartLine, cart_line, cart_to_dict, new_cart, product_ids

logger = logging.getLogger(__name__)

# Сколько раз перечитываем корзину, если вставка упёрлась в уникальный индекс
ADD_MAX_ATTEMPTS = 3


class CartServiceError(Exception):
    pass


class StorageFailure(CartServiceError):
    """A find/update/insert call against the cart collection failed."""


class CartConflictError(StorageFailure):
    pass


class CartNotFound(CartServiceError):
    """No cart for the email, or no matching line in it."""


class AddResult(enum.Enum):
    CREATED = "created"
    APPENDED = "appended"
    NOTHING_TO_ADD = "nothing_to_add"


def dedupe_lines(products: Iterable) -> List[CartLine]:
    """Collapse repeated product ids in one request, keeping the first occurrence."""
    lines: Dict[str, CartLine] = {}
    for product in products:
        if product.product_id not in lines:
            lines[product.product_id] = cart_line(product.product_id, product.quantity)
    return list(lines.values())


async def get_cart_by_email(collection, email: str) -> Optional[Cart]:
    try:
        return await collection.find_one({"email": email})
    except PyMongoError as e:
        logger.error("Cart lookup failed for %s: %s", email, e)
        raise StorageFailure("cart lookup failed") from e


# Добавление товаров в корзину
async def add_products_to_cart(collection, email: str, products: Iterable) -> AddResult:
    incoming = dedupe_lines(products)

    for attempt in range(1, ADD_MAX_ATTEMPTS + 1):
        cart = await get_cart_by_email(collection, email)
        existing = set(product_ids(cart))
        new_lines = [line for line in incoming if line["product_id"] not in existing]
        logger.debug(
            "add_products_to_cart %s: %d new, %d already in cart",
            email, len(new_lines), len(incoming) - len(new_lines),
        )

        if not new_lines:
            return AddResult.NOTHING_TO_ADD

        new_ids = [line["product_id"] for line in new_lines]
        try:
            # $nin: товар могли добавить между чтением и записью
            result = await collection.update_one(
                {"email": email, "products.product_id": {"$nin": new_ids}},
                {"$push": {"products": {"$each": new_lines}}},
            )
            if result.matched_count > 0:
                return AddResult.APPENDED

            await collection.insert_one(new_cart(email, new_lines))
            return AddResult.CREATED
        except DuplicateKeyError:
            logger.info("Cart for %s changed concurrently, retrying add (attempt %d)", email, attempt)
        except PyMongoError as e:
            logger.error("Adding products to cart %s failed: %s", email, e)
            raise StorageFailure("cart update failed") from e

    raise CartConflictError(f"cart for {email} kept changing during add")


# Обновление количества товара в корзине
async def update_product_quantity(collection, email: str, product_id: str, quantity: int):
    try:
        result = await collection.update_one(
            {"email": email, "products.product_id": product_id},
            {"$set": {"products.$.quantity": quantity}},
        )
    except PyMongoError as e:
        logger.error("Quantity update failed for %s/%s: %s", email, product_id, e)
        raise StorageFailure("quantity update failed") from e

    if result.matched_count == 0:
        logger.debug("update_product_quantity: no line %s in cart %s", product_id, email)
        raise CartNotFound(email)


async def fetch_cart(collection, email: str) -> Cart:
    cart = await get_cart_by_email(collection, email)
    if cart is None:
        raise CartNotFound(email)
    return cart_to_dict(cart)


# Удаление товара из корзины: убираются все строки с этим product_id
async def remove_product_from_cart(collection, email: str, product_id: str):
    try:
        result = await collection.update_one(
            {"email": email},
            {"$pull": {"products": {"product_id": product_id}}},
        )
    except PyMongoError as e:
        logger.error("Removing %s from cart %s failed: %s", product_id, email, e)
        raise StorageFailure("product removal failed") from e

    if result.modified_count == 0:
        logger.debug("remove_product_from_cart: %s not in cart %s", product_id, email)
        raise CartNotFound(email)
