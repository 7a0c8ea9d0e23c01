"""
Closed catalog of domain event kinds.

Every event that crosses module boundaries is named here as ``domain.action``.
The catalog is a public contract between producers and consumers: adding a
kind is backward compatible, changing the payload of an existing kind is not.
"""

from __future__ import annotations

from enum import Enum


class UnknownEventKindError(ValueError):
    """Raised when a kind outside the catalog is used."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(
            f"Unknown event kind {value!r}; expected one of: "
            + ", ".join(kind.value for kind in EventKind)
        )


class EventKind(str, Enum):
    """Domain event identifiers."""

    # User events
    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"
    USER_DELETED = "user.deleted"

    # Category events
    CATEGORY_CREATED = "category.created"
    CATEGORY_UPDATED = "category.updated"
    CATEGORY_DELETED = "category.deleted"

    # Product events
    PRODUCT_CREATED = "product.created"
    PRODUCT_UPDATED = "product.updated"
    PRODUCT_DELETED = "product.deleted"
    PRODUCT_OUT_OF_STOCK = "product.out_of_stock"
    PRODUCT_LOW_STOCK = "product.low_stock"

    # Customer events
    CUSTOMER_CREATED = "customer.created"
    CUSTOMER_UPDATED = "customer.updated"
    CUSTOMER_DELETED = "customer.deleted"

    # Order events
    ORDER_CREATED = "order.created"
    ORDER_UPDATED = "order.updated"
    ORDER_CANCELLED = "order.cancelled"
    ORDER_COMPLETED = "order.completed"
    ORDER_SHIPPED = "order.shipped"

    # Inventory events
    INVENTORY_UPDATED = "inventory.updated"
    INVENTORY_LOW = "inventory.low"

    # Media events
    MEDIA_UPLOADED = "media.uploaded"
    MEDIA_UPDATED = "media.updated"
    MEDIA_DELETED = "media.deleted"

    # Discount events
    DISCOUNT_CREATED = "discount.created"
    DISCOUNT_UPDATED = "discount.updated"
    DISCOUNT_DELETED = "discount.deleted"
    DISCOUNT_APPLIED = "discount.applied"

    # Analytics events
    ANALYTICS_CREATED = "analytics.created"
    ANALYTICS_UPDATED = "analytics.updated"

    # Notification events
    SEND_EMAIL = "notification.send_email"
    SEND_SMS = "notification.send_sms"
    SEND_PUSH = "notification.send_push"

    def __str__(self) -> str:
        return self.value

    @property
    def domain(self) -> str:
        return self.value.split(".", 1)[0]

    @property
    def action(self) -> str:
        return self.value.split(".", 1)[1]

    @classmethod
    def parse(cls, value: EventKind | str) -> EventKind:
        """
        Resolve a kind from a member or its string value.

        Raises:
            UnknownEventKindError: If value is not in the catalog
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownEventKindError(value) from None


def kinds_for_domain(domain: str) -> list[EventKind]:
    """List catalog kinds belonging to one domain, in declaration order."""
    return [kind for kind in EventKind if kind.domain == domain]


def domains() -> list[str]:
    """List catalog domains, in declaration order."""
    seen: list[str] = []
    for kind in EventKind:
        if kind.domain not in seen:
            seen.append(kind.domain)
    return seen
