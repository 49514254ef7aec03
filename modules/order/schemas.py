"""
Order Module - Schemas
=======================
In-memory order representation used by the lifecycle engine, the stats
aggregator and the JSON API, plus mapping to/from persisted rows.

Orders arrive from several producers; camelCase and snake_case field names
are both accepted.
"""

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from common.helpers import now_utc, parse_datetime, format_display_date, format_display_time, safe_float


class OrderItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    name: str = ""
    image: Optional[str] = None
    quantity: int = 1
    price: float = Field(0, validation_alias=AliasChoices("price", "unitPrice", "unit_price"))
    size: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v):
        return "" if v is None else str(v)


class Order(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    order_number: str = Field("", alias="orderNumber")
    status: str = "pending"

    # Customer identity (any subset may be present)
    user_id: Optional[str] = Field(None, alias="userId")
    customer: Optional[str] = None
    customer_name: Optional[str] = Field(None, alias="customerName")
    customer_phone: Optional[str] = Field(None, alias="customerPhone")

    items: List[OrderItem] = Field(default_factory=list)
    subtotal: float = 0
    delivery_fee: float = Field(0, alias="deliveryFee")
    tax: float = 0
    total: Optional[float] = None
    total_amount: Optional[float] = None

    created_at: Optional[str] = Field(None, alias="createdAt")
    updated_at: Optional[str] = Field(None, alias="updatedAt")
    date: Optional[str] = None
    time: Optional[str] = None

    order_type: Optional[str] = Field(None, alias="orderType")
    delivery_address: Optional[str] = Field(None, alias="deliveryAddress")
    payment_method: Optional[str] = Field(None, alias="paymentMethod")
    instructions: Optional[str] = None

    @field_validator("id", "user_id", "customer", "customer_phone", mode="before")
    @classmethod
    def _stringify(cls, v):
        return None if v is None else str(v)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _isoformat(cls, v):
        if v is None:
            return None
        return v.isoformat() if hasattr(v, "isoformat") else str(v)

    @property
    def amount(self) -> float:
        """Order total, falling back to `total_amount` when `total` is absent or zero."""
        total = safe_float(self.total)
        if total:
            return total
        return safe_float(self.total_amount)

    def to_dict(self) -> dict:
        return self.model_dump()


# ==========================================
# Row mapping (persistence service shape)
# ==========================================

def order_from_row(row: Dict[str, Any]) -> Order:
    """Map an `orders` row (HTTP service or SQL table) to an Order."""
    customer_details = row.get("customer_details") or {}
    delivery_addr = row.get("delivery_address") or {}
    is_pickup = delivery_addr.get("type") == "pickup" or not delivery_addr.get("address")

    total_amount = safe_float(row.get("total_amount"))
    delivery_fee = safe_float(row.get("delivery_fee"))
    tax_amount = safe_float(row.get("tax_amount"))

    created = parse_datetime(row.get("created_at"))

    return Order(
        id=row["id"],
        order_number=f"#{row.get('order_number') or ''}",
        user_id=row.get("user_id"),
        status=row.get("status") or "pending",
        items=row.get("items") or [],
        subtotal=total_amount - delivery_fee - tax_amount,
        delivery_fee=delivery_fee,
        tax=tax_amount,
        total=total_amount,
        total_amount=total_amount,
        customer_name=customer_details.get("name") or "",
        customer_phone=customer_details.get("phone") or "",
        delivery_address="Store Pickup" if is_pickup else (delivery_addr.get("address") or ""),
        order_type="pickup" if is_pickup else "delivery",
        payment_method=row.get("payment_method") or "cash",
        instructions=row.get("notes") or None,
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        date=format_display_date(created),
        time=format_display_time(created),
    )


def update_to_row(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Map a partial Order update (snake_case or camelCase) to row columns."""
    row: Dict[str, Any] = {"updated_at": now_utc().isoformat()}

    def pick(*names):
        for name in names:
            if name in fields and fields[name] is not None:
                return fields[name]
        return None

    status = pick("status")
    if status:
        row["status"] = status
    items = pick("items")
    if items is not None:
        row["items"] = [i.model_dump() if isinstance(i, OrderItem) else i for i in items]
    total = pick("total", "total_amount")
    if total is not None:
        row["total_amount"] = total
    delivery_fee = pick("delivery_fee", "deliveryFee")
    if delivery_fee is not None:
        row["delivery_fee"] = delivery_fee
    tax = pick("tax", "tax_amount")
    if tax is not None:
        row["tax_amount"] = tax
    name = pick("customer_name", "customerName")
    phone = pick("customer_phone", "customerPhone")
    if name is not None or phone is not None:
        row["customer_details"] = {"name": name, "phone": phone}
    if "instructions" in fields:
        row["notes"] = fields["instructions"]
    payment_method = pick("payment_method", "paymentMethod")
    if payment_method:
        row["payment_method"] = payment_method
    return row
