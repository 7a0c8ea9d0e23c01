"""
Payload shapes for every catalog event kind.

Each payload class is bound to exactly one ``EventKind`` through its ``kind``
class attribute, so a payload instance always knows which event it belongs
to. Kinds that share a shape share a base class.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

from shopcore.events.catalog import EventKind


@dataclass(frozen=True)
class EventPayload:
    """Base class for event payloads."""

    kind: ClassVar[EventKind]

    def to_dict(self) -> dict[str, Any]:
        """Shallow field mapping; values are not copied."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


# =============================================================================
# Users
# =============================================================================


@dataclass(frozen=True)
class UserChanged(EventPayload):
    user_id: str


@dataclass(frozen=True)
class UserCreated(UserChanged):
    kind: ClassVar[EventKind] = EventKind.USER_CREATED


@dataclass(frozen=True)
class UserUpdated(UserChanged):
    kind: ClassVar[EventKind] = EventKind.USER_UPDATED


@dataclass(frozen=True)
class UserDeleted(UserChanged):
    kind: ClassVar[EventKind] = EventKind.USER_DELETED


# =============================================================================
# Categories
# =============================================================================


@dataclass(frozen=True)
class CategoryChanged(EventPayload):
    category_id: str


@dataclass(frozen=True)
class CategoryCreated(CategoryChanged):
    kind: ClassVar[EventKind] = EventKind.CATEGORY_CREATED


@dataclass(frozen=True)
class CategoryUpdated(CategoryChanged):
    kind: ClassVar[EventKind] = EventKind.CATEGORY_UPDATED


@dataclass(frozen=True)
class CategoryDeleted(CategoryChanged):
    kind: ClassVar[EventKind] = EventKind.CATEGORY_DELETED


# =============================================================================
# Products
# =============================================================================


@dataclass(frozen=True)
class ProductChanged(EventPayload):
    product_id: str


@dataclass(frozen=True)
class ProductCreated(ProductChanged):
    kind: ClassVar[EventKind] = EventKind.PRODUCT_CREATED


@dataclass(frozen=True)
class ProductUpdated(ProductChanged):
    kind: ClassVar[EventKind] = EventKind.PRODUCT_UPDATED


@dataclass(frozen=True)
class ProductDeleted(ProductChanged):
    kind: ClassVar[EventKind] = EventKind.PRODUCT_DELETED


@dataclass(frozen=True)
class ProductOutOfStock(ProductChanged):
    kind: ClassVar[EventKind] = EventKind.PRODUCT_OUT_OF_STOCK


@dataclass(frozen=True)
class ProductLowStock(EventPayload):
    kind: ClassVar[EventKind] = EventKind.PRODUCT_LOW_STOCK

    product_id: str
    stock: int


# =============================================================================
# Customers
# =============================================================================


@dataclass(frozen=True)
class CustomerChanged(EventPayload):
    customer_id: str


@dataclass(frozen=True)
class CustomerCreated(CustomerChanged):
    kind: ClassVar[EventKind] = EventKind.CUSTOMER_CREATED


@dataclass(frozen=True)
class CustomerUpdated(CustomerChanged):
    kind: ClassVar[EventKind] = EventKind.CUSTOMER_UPDATED


@dataclass(frozen=True)
class CustomerDeleted(CustomerChanged):
    kind: ClassVar[EventKind] = EventKind.CUSTOMER_DELETED


# =============================================================================
# Orders
# =============================================================================


@dataclass(frozen=True)
class OrderCreated(EventPayload):
    """A new order was placed, or a pending order was confirmed."""

    kind: ClassVar[EventKind] = EventKind.ORDER_CREATED

    order_id: str
    customer_id: str | None = None
    total: float | None = None


@dataclass(frozen=True)
class OrderChanged(EventPayload):
    order_id: str


@dataclass(frozen=True)
class OrderUpdated(OrderChanged):
    kind: ClassVar[EventKind] = EventKind.ORDER_UPDATED


@dataclass(frozen=True)
class OrderCancelled(OrderChanged):
    kind: ClassVar[EventKind] = EventKind.ORDER_CANCELLED


@dataclass(frozen=True)
class OrderShipped(OrderChanged):
    kind: ClassVar[EventKind] = EventKind.ORDER_SHIPPED


@dataclass(frozen=True)
class OrderCompleted(EventPayload):
    """An order was delivered."""

    kind: ClassVar[EventKind] = EventKind.ORDER_COMPLETED

    order_id: str
    customer_id: str
    total: float


# =============================================================================
# Inventory
# =============================================================================


@dataclass(frozen=True)
class InventoryUpdated(EventPayload):
    """A stock movement was recorded against a product."""

    kind: ClassVar[EventKind] = EventKind.INVENTORY_UPDATED

    product_id: str
    adjustment_type: str
    quantity: int
    before_stock: int
    after_stock: int
    user_id: str | None = None


@dataclass(frozen=True)
class InventoryLow(EventPayload):
    kind: ClassVar[EventKind] = EventKind.INVENTORY_LOW

    product_id: str
    stock: int


# =============================================================================
# Media
# =============================================================================


@dataclass(frozen=True)
class MediaChanged(EventPayload):
    media_id: str


@dataclass(frozen=True)
class MediaUploaded(MediaChanged):
    kind: ClassVar[EventKind] = EventKind.MEDIA_UPLOADED


@dataclass(frozen=True)
class MediaUpdated(MediaChanged):
    kind: ClassVar[EventKind] = EventKind.MEDIA_UPDATED


@dataclass(frozen=True)
class MediaDeleted(MediaChanged):
    kind: ClassVar[EventKind] = EventKind.MEDIA_DELETED


# =============================================================================
# Discounts
# =============================================================================


@dataclass(frozen=True)
class DiscountCreated(EventPayload):
    kind: ClassVar[EventKind] = EventKind.DISCOUNT_CREATED

    discount_id: str
    code: str
    user_id: str | None = None


@dataclass(frozen=True)
class DiscountChanged(EventPayload):
    discount_id: str
    user_id: str | None = None


@dataclass(frozen=True)
class DiscountUpdated(DiscountChanged):
    kind: ClassVar[EventKind] = EventKind.DISCOUNT_UPDATED


@dataclass(frozen=True)
class DiscountDeleted(DiscountChanged):
    kind: ClassVar[EventKind] = EventKind.DISCOUNT_DELETED


@dataclass(frozen=True)
class DiscountApplied(EventPayload):
    kind: ClassVar[EventKind] = EventKind.DISCOUNT_APPLIED

    code: str


# =============================================================================
# Analytics
# =============================================================================


@dataclass(frozen=True)
class AnalyticsChanged(EventPayload):
    record_id: str


@dataclass(frozen=True)
class AnalyticsCreated(AnalyticsChanged):
    kind: ClassVar[EventKind] = EventKind.ANALYTICS_CREATED


@dataclass(frozen=True)
class AnalyticsUpdated(AnalyticsChanged):
    kind: ClassVar[EventKind] = EventKind.ANALYTICS_UPDATED


# =============================================================================
# Notifications
# =============================================================================


@dataclass(frozen=True)
class SendEmail(EventPayload):
    kind: ClassVar[EventKind] = EventKind.SEND_EMAIL

    to: str
    subject: str
    template: str | None = None
    context: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SendSms(EventPayload):
    kind: ClassVar[EventKind] = EventKind.SEND_SMS

    to: str
    message: str


@dataclass(frozen=True)
class SendPush(EventPayload):
    kind: ClassVar[EventKind] = EventKind.SEND_PUSH

    user_id: str
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Kind -> payload lookup
# =============================================================================

PAYLOAD_TYPES: dict[EventKind, type[EventPayload]] = {
    cls.kind: cls
    for cls in (
        UserCreated,
        UserUpdated,
        UserDeleted,
        CategoryCreated,
        CategoryUpdated,
        CategoryDeleted,
        ProductCreated,
        ProductUpdated,
        ProductDeleted,
        ProductOutOfStock,
        ProductLowStock,
        CustomerCreated,
        CustomerUpdated,
        CustomerDeleted,
        OrderCreated,
        OrderUpdated,
        OrderCancelled,
        OrderCompleted,
        OrderShipped,
        InventoryUpdated,
        InventoryLow,
        MediaUploaded,
        MediaUpdated,
        MediaDeleted,
        DiscountCreated,
        DiscountUpdated,
        DiscountDeleted,
        DiscountApplied,
        AnalyticsCreated,
        AnalyticsUpdated,
        SendEmail,
        SendSms,
        SendPush,
    )
}

_missing = set(EventKind) - set(PAYLOAD_TYPES)
if _missing:
    raise RuntimeError(f"Event kinds without a payload type: {sorted(k.value for k in _missing)}")


def payload_type(kind: EventKind | str) -> type[EventPayload]:
    """Get the payload class bound to a kind."""
    return PAYLOAD_TYPES[EventKind.parse(kind)]
