"""
In-memory order store

Holds every order received since process start, in arrival order, and hands
out sequential order ids. Nothing is persisted.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

CSV_HEADER = "Order ID,Customer Name,Email,Phone,Order Date,Total,Items,Status"

# Caller-supplied JSON values, stored exactly as received
Scalar = Union[str, int, float, bool, None]
Number = Union[int, float]


class OrderValidationError(ValueError):
    """Raised when an order submission is missing required information."""


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision, e.g. 2024-05-01T12:00:00.000Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class LineItem:
    item_name: Scalar
    price: Scalar
    quantity: Number
    item_total: Scalar

    def to_dict(self) -> Dict[str, Any]:
        return {
            "itemName": self.item_name,
            "price": self.price,
            "quantity": self.quantity,
            "itemTotal": self.item_total,
        }


@dataclass(frozen=True)
class Order:
    order_id: int
    customer_name: Scalar
    customer_email: Scalar
    customer_phone: Scalar
    special_requests: Scalar
    items: Tuple[LineItem, ...]
    order_total: Scalar
    item_count: Number
    order_date: str
    status: str = "pending"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orderId": self.order_id,
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "customerPhone": self.customer_phone,
            "specialRequests": self.special_requests,
            "items": [item.to_dict() for item in self.items],
            "orderTotal": self.order_total,
            "itemCount": self.item_count,
            "orderDate": self.order_date,
            "status": self.status,
        }


def _text(value: Scalar) -> str:
    return "" if value is None else str(value)


def _quote(value: Scalar) -> str:
    return '"' + _text(value).replace('"', '""') + '"'


def _format_number(value: Scalar) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return _text(value)


def order_to_csv_row(order: Order) -> str:
    items_list = "; ".join(
        f"{_format_number(item.quantity)}x {_text(item.item_name)}" for item in order.items
    )
    return ",".join([
        str(order.order_id),
        _quote(order.customer_name),
        _quote(order.customer_email),
        _quote(order.customer_phone),
        _quote(order.order_date),
        _format_number(order.order_total),
        _quote(items_list),
        order.status,
    ])


@dataclass
class OrderStore:
    """Ordered, append-only collection of orders plus the next-id counter.

    The counter only moves when an order is actually appended, so ids are
    gap-free even when submissions are rejected or fail halfway.
    """

    first_order_id: int = 1000
    _orders: List[Order] = field(default_factory=list, init=False, repr=False)
    _next_id: int = field(init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self._next_id = self.first_order_id

    @property
    def next_order_id(self) -> int:
        return self._next_id

    def submit_order(
        self,
        customer_info: Optional[Mapping[str, Any]],
        items: Optional[Sequence[Mapping[str, Any]]],
        total: Scalar,
    ) -> Order:
        """Validate a submission and append it as a new pending order.

        Raises OrderValidationError when customer info is absent, items are
        absent or empty, or total is absent. A total of 0 counts as absent.
        Any other exception leaves the store untouched.
        """
        if customer_info is None or not items or not total:
            raise OrderValidationError("Missing required order information")

        line_items = tuple(
            LineItem(
                item_name=item.get("name"),
                price=item.get("price"),
                quantity=item.get("qty"),
                item_total=item.get("itemTotal"),
            )
            for item in items
        )
        item_count = sum(item.get("qty") for item in items)

        with self._lock:
            order = Order(
                order_id=self._next_id,
                customer_name=customer_info.get("name"),
                customer_email=customer_info.get("email"),
                customer_phone=customer_info.get("phone"),
                special_requests=customer_info.get("specialRequests") or "",
                items=line_items,
                order_total=total,
                item_count=item_count,
                order_date=utc_timestamp(),
            )
            self._orders.append(order)
            self._next_id += 1
        return order

    def list_orders(self) -> List[Order]:
        with self._lock:
            return list(self._orders)

    def count(self) -> int:
        with self._lock:
            return len(self._orders)

    def __len__(self) -> int:
        return self.count()

    def export_csv(self) -> str:
        """Render all orders as CSV, header first, one line per order."""
        lines = [CSV_HEADER]
        lines.extend(order_to_csv_row(order) for order in self.list_orders())
        return "\n".join(lines) + "\n"
