from pydantic import BaseModel, Field
from typing import List, Optional, Union

# Request schema for adding a product to the cart
class CartAddItem(BaseModel):
    productId: Union[int, str]

# One line of the stored cart
class CartLineOut(BaseModel):
    productId: Union[int, str]
    qty: int = Field(ge=0)
    name: Optional[str] = None
    price: Optional[float] = None

# Response schema for the entire cart summary
class CartOut(BaseModel):
    items: List[CartLineOut]
    count: int
    total: float

class CartCount(BaseModel):
    count: int
