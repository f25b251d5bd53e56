# cart_service/app/db/models.py
from typing import Any, Dict, Iterable, List

from bson import ObjectId

CartLine = Dict[str, Any]
Cart = Dict[str, Any]


def cart_line(product_id: str, quantity: int) -> CartLine:
    return {"product_id": product_id, "quantity": quantity}


def new_cart(email: str, lines: Iterable[CartLine]) -> Cart:
    return {"email": email, "products": list(lines)}


def product_ids(cart: Cart) -> List[str]:
    """Ids of the lines stored in a cart document; a missing cart has none."""
    if not cart:
        return []
    return [line.get("product_id") for line in cart.get("products", []) if isinstance(line, dict)]


def _json_safe(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_json_safe(item) for item in value]
    return value


def cart_to_dict(cart: Cart) -> Cart:
    """Stored cart as a JSON-safe dict: every ObjectId, nested ones included, becomes a string."""
    return _json_safe(cart)
