import re
from decimal import Decimal
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

GemIdIn = Union[int, str]

# keeps every cart total well inside the 28-digit default decimal context
MAX_UNIT_PRICE = Decimal("1000000000000")
MAX_LINE_QUANTITY = 10000


class GemIn(BaseModel):
    """Gem record as returned by the catalogue API; extra fields are ignored."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    id: GemIdIn
    name: str = ""
    price: Decimal = Field(..., ge=0, le=MAX_UNIT_PRICE, decimal_places=2)
    discount: Optional[Decimal] = Field(None, le=MAX_UNIT_PRICE, decimal_places=2)
    discount_type: Optional[str] = Field(None, alias="discountType")
    image: Optional[str] = None
    images: Optional[List[str]] = None
    category: str = ""

    def display_image(self) -> Optional[str]:
        if self.image:
            return self.image
        if self.images:
            return self.images[0]
        return None


class AddItemIn(BaseModel):
    gem: GemIn
    quantity: int = Field(1, le=MAX_LINE_QUANTITY)


class UpdateQuantityIn(BaseModel):
    quantity: int


def json_number(v: Optional[Decimal]):
    # integral amounts as ints, the rest as floats, like the storefront's snapshot
    if v is None:
        return None
    return int(v) if v == v.to_integral_value() else float(v)


class StoredLineItem(BaseModel):
    """Persisted shape of one line item in the cart storage slot."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    id: GemIdIn
    unit_price: Decimal = Field(..., alias="unitPrice", ge=0, le=MAX_UNIT_PRICE, decimal_places=2)
    quantity: int = Field(..., ge=1, le=MAX_LINE_QUANTITY)
    name: str = ""
    category: str = ""
    discount: Optional[Decimal] = Field(None, le=MAX_UNIT_PRICE, decimal_places=2)
    discount_type: Optional[Literal["percentage", "fixed"]] = Field(None, alias="discountType")
    image: Optional[str] = None

    @field_serializer("unit_price", "discount", when_used="json")
    def _money_as_number(self, v: Optional[Decimal]):
        return json_number(v)


PINCODE_RE = re.compile(r"^\d{6}$")
EMAIL_RE = re.compile(r"\S+@\S+\.\S+")


class CheckoutDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    email: str
    phone: str
    address: str
    city: str
    state: str
    pincode: str
    payment_method: Literal["cod", "online"] = Field("cod", alias="paymentMethod")
    order_notes: str = Field("", alias="orderNotes")

    @field_validator("first_name", "last_name", "phone", "address", "city", "state")
    @classmethod
    def _required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("is required")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Email is required")
        if not EMAIL_RE.search(v):
            raise ValueError("Email is invalid")
        return v

    @field_validator("pincode")
    @classmethod
    def _pincode(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Pincode is required")
        if not PINCODE_RE.match(v):
            raise ValueError("Pincode must be 6 digits")
        return v
