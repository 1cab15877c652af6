"""Entity types handled by the repositories and rendered by the pages."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from core.constants import (
    EMPLOYEE_ROLES,
    ORDER_STATUS_FLOW,
    ORDER_STATUS_LABELS,
    PAYMENT_METHODS,
    PRODUCT_CATEGORIES,
    TRANSACTION_STATUSES,
    TRANSACTION_TYPES,
)


@dataclass(frozen=True)
class Client:
    id: int
    name: str
    phone: str
    address: str = ""
    last_visit: Optional[date] = None
    nps_score: Optional[int] = None


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    sku: str
    category: str
    brand: str
    sale_price: Decimal
    cost_price: Decimal
    stock: int
    min_stock: int

    @property
    def is_low_stock(self) -> bool:
        # Derived on every access, never stored
        return self.stock <= self.min_stock

    @property
    def category_label(self) -> str:
        return PRODUCT_CATEGORIES.get(self.category, self.category)

    @property
    def margin(self) -> Decimal:
        return self.sale_price - self.cost_price


@dataclass(frozen=True)
class ServiceOrder:
    id: int
    client_id: Optional[int]
    client_name: str
    items: Tuple[str, ...]
    total_value: Decimal
    status: str
    created_at: date
    delivery_date: Optional[date]
    prescription: Optional[Dict[str, Any]] = None

    @property
    def status_label(self) -> str:
        return ORDER_STATUS_LABELS.get(self.status, self.status)

    @property
    def is_delivered(self) -> bool:
        return self.status == ORDER_STATUS_FLOW[-1]


@dataclass(frozen=True)
class Transaction:
    id: int
    description: str
    amount: Decimal
    type: str
    category: str
    date: date
    payment_method: str
    status: str
    order_id: Optional[int] = None

    @property
    def is_income(self) -> bool:
        return self.type == "INCOME"

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.is_income else -self.amount

    @property
    def type_label(self) -> str:
        return TRANSACTION_TYPES.get(self.type, self.type)

    @property
    def status_label(self) -> str:
        return TRANSACTION_STATUSES.get(self.status, self.status)

    @property
    def payment_method_label(self) -> str:
        return PAYMENT_METHODS.get(self.payment_method, self.payment_method)


@dataclass(frozen=True)
class Employee:
    id: int
    username: str
    name: str
    role: str
    password_hash: str = field(default="", repr=False)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def role_label(self) -> str:
        return EMPLOYEE_ROLES.get(self.role, self.role)


@dataclass(frozen=True)
class CartItem:
    product: Product
    qty: int = 1

    @property
    def subtotal(self) -> Decimal:
        return self.product.sale_price * self.qty
