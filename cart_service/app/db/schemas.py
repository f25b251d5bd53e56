# cart_service/app/db/schemas.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class CartItem(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=0)


class AddToCartRequest(BaseModel):
    email: str = Field(min_length=1)
    products: List[CartItem]


class UpdateQuantityRequest(BaseModel):
    email: str = Field(min_length=1)
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=0)


class UserCartInfo(BaseModel):
    email: str = Field(min_length=1)


class DeleteProductRequest(BaseModel):
    email: str = Field(min_length=1)
    product_id: str = Field(min_length=1)


class StatusResponse(BaseModel):
    success: bool
    message: Optional[str] = None


# Документ корзины отдаётся как есть, без пересборки по схеме
class CartResponse(BaseModel):
    success: bool
    cart: Dict[str, Any]
