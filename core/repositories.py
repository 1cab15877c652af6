"""Entity repositories: list/get/create/update/delete over the shop database.

Pages never talk SQL. They receive a ``Repositories`` bundle built once in
``app.py`` and call these methods; every method either returns entities or
raises one of the errors in ``core.errors``.
"""
from __future__ import annotations

import json
import logging
import random
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Generic, List, Optional, TypeVar

from core.constants import (
    DEFAULT_TRANSACTION_CATEGORY,
    DELIVERY_DAYS_DEFAULT,
    EMPLOYEE_ROLES,
    MIN_STOCK_DEFAULT,
    ORDER_STATUS_FLOW,
    PAYMENT_METHODS,
    PRODUCT_CATEGORIES,
    TRANSACTION_STATUSES,
    TRANSACTION_TYPES,
    WALK_IN_CLIENT,
)
from core.errors import ConflictError, NotFoundError, ValidationError
from core.filters import Predicate, apply_filters
from core.models import Client, Employee, Product, ServiceOrder, Transaction
from core.services import (
    DBConnection,
    date_to_db,
    delete_row,
    fetch_rows,
    hash_password,
    insert_row,
    money_to_db,
    placeholder,
    to_date,
    to_int,
    to_money,
    today,
    transaction,
    update_row,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Repository(Generic[T]):
    """Generic CRUD over one table.

    Subclasses define the table, the list ordering, how a row becomes an
    entity (``from_row``) and how user fields become column values
    (``prepare``). ``prepare`` receives the complete field set: defaults on
    create, the current entity merged with the edits on update.
    """

    table: str = ""
    order_by: str = "id DESC"
    fields: tuple = ()
    not_found_message: str = "Registro não encontrado."

    def __init__(self, conn: DBConnection) -> None:
        self.conn = conn

    # -- hooks -------------------------------------------------------------
    def from_row(self, row: Dict[str, Any]) -> T:
        raise NotImplementedError

    def defaults(self) -> Dict[str, Any]:
        return {}

    def current_fields(self, entity: T) -> Dict[str, Any]:
        return {name: getattr(entity, name) for name in self.fields}

    def prepare(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    # -- reads -------------------------------------------------------------
    def get(self, entity_id: int) -> T:
        rows = fetch_rows(
            self.conn,
            f"SELECT * FROM {self.table} WHERE id={placeholder(self.conn)}",
            (int(entity_id),),
        )
        if not rows:
            raise NotFoundError(self.not_found_message)
        return self.from_row(rows[0])

    def list(self, *predicates: Predicate) -> List[T]:
        rows = fetch_rows(self.conn, f"SELECT * FROM {self.table} ORDER BY {self.order_by}")
        return apply_filters((self.from_row(row) for row in rows), predicates)

    # -- writes ------------------------------------------------------------
    def _check_fields(self, fields: Dict[str, Any]) -> None:
        unknown = set(fields) - set(self.fields)
        if unknown:
            raise ValidationError(f"Campo desconhecido: {', '.join(sorted(unknown))}")

    def insert_with(self, cur: Any, **fields: Any) -> int:
        """Validate and insert inside a caller-owned transaction."""
        self._check_fields(fields)
        data = self.prepare({**self.defaults(), **fields})
        data["created_at"] = date_to_db(today())
        return insert_row(cur, self.conn, self.table, data)

    def create(self, **fields: Any) -> T:
        with transaction(self.conn) as cur:
            new_id = self.insert_with(cur, **fields)
        logger.info("Created %s #%s", self.table, new_id)
        return self.get(new_id)

    def update_with(self, cur: Any, entity_id: int, **fields: Any) -> None:
        """Validate and update inside a caller-owned transaction."""
        self._check_fields(fields)
        current = self.get(entity_id)
        data = self.prepare({**self.current_fields(current), **fields})
        if update_row(cur, self.conn, self.table, int(entity_id), data) == 0:
            raise NotFoundError(self.not_found_message)

    def update(self, entity_id: int, **fields: Any) -> T:
        with transaction(self.conn) as cur:
            self.update_with(cur, entity_id, **fields)
        logger.info("Updated %s #%s", self.table, entity_id)
        return self.get(entity_id)

    def delete(self, entity_id: int) -> None:
        with transaction(self.conn) as cur:
            if delete_row(cur, self.conn, self.table, int(entity_id)) == 0:
                raise NotFoundError(self.not_found_message)
        logger.info("Deleted %s #%s", self.table, entity_id)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


# ============================================================================
# Clients
# ============================================================================

class ClientRepository(Repository[Client]):
    table = "clients"
    fields = ("name", "phone", "address", "last_visit", "nps_score")
    not_found_message = "Cliente não encontrado."

    def from_row(self, row):
        return Client(
            id=int(row["id"]),
            name=row["name"],
            phone=row["phone"],
            address=row.get("address") or "",
            last_visit=to_date(row.get("last_visit")),
            nps_score=row.get("nps_score"),
        )

    def defaults(self):
        return {"address": "", "last_visit": today(), "nps_score": None}

    def prepare(self, fields):
        name = _text(fields.get("name"))
        phone = _text(fields.get("phone"))
        if not name or not phone:
            raise ValidationError("Nome e Telefone são obrigatórios.")
        nps = fields.get("nps_score")
        if nps is not None and nps != "":
            nps = to_int(nps, "NPS")
            if not 0 <= nps <= 10:
                raise ValidationError("NPS deve estar entre 0 e 10.")
        else:
            nps = None
        return {
            "name": name,
            "phone": phone,
            "address": _text(fields.get("address")),
            "last_visit": date_to_db(to_date(fields.get("last_visit"))),
            "nps_score": nps,
        }


# ============================================================================
# Products
# ============================================================================

SKU_CONFLICT_MESSAGE = "SKU já existe. Use um SKU único."


def generate_sku() -> str:
    return f"SKU-{random.randint(10000, 99999)}"


class ProductRepository(Repository[Product]):
    table = "products"
    fields = (
        "name", "sku", "category", "brand", "sale_price",
        "cost_price", "stock", "min_stock",
    )
    not_found_message = "Produto não encontrado."

    def from_row(self, row):
        return Product(
            id=int(row["id"]),
            name=row["name"],
            sku=row["sku"],
            category=row["category"],
            brand=row.get("brand") or "",
            sale_price=to_money(row.get("sale_price")),
            cost_price=to_money(row.get("cost_price")),
            stock=int(row.get("stock") or 0),
            min_stock=int(row.get("min_stock") or 0),
        )

    def defaults(self):
        return {
            "sku": "",
            "category": "FRAME",
            "brand": "",
            "sale_price": 0,
            "cost_price": 0,
            "stock": 0,
            "min_stock": MIN_STOCK_DEFAULT,
        }

    def prepare(self, fields):
        name = _text(fields.get("name"))
        if not name:
            raise ValidationError("Nome do produto é obrigatório.")
        category = fields.get("category")
        if category not in PRODUCT_CATEGORIES:
            raise ValidationError(f"Tipo de produto inválido: {category}")
        sale_price = to_money(fields.get("sale_price"), "Preço de venda")
        cost_price = to_money(fields.get("cost_price"), "Preço de custo")
        stock = to_int(fields.get("stock"), "Estoque")
        min_stock = to_int(fields.get("min_stock"), "Estoque mínimo", MIN_STOCK_DEFAULT)
        if sale_price < 0 or cost_price < 0:
            raise ValidationError("Preços não podem ser negativos.")
        if stock < 0 or min_stock < 0:
            raise ValidationError("Estoque não pode ser negativo.")
        return {
            "name": name,
            # Uniqueness is left to the UNIQUE constraint
            "sku": _text(fields.get("sku")) or generate_sku(),
            "category": category,
            "brand": _text(fields.get("brand")),
            "sale_price": money_to_db(self.conn, sale_price),
            "cost_price": money_to_db(self.conn, cost_price),
            "stock": stock,
            "min_stock": min_stock,
        }

    def create(self, **fields):
        try:
            return super().create(**fields)
        except ConflictError as e:
            raise ConflictError(SKU_CONFLICT_MESSAGE) from e

    def update(self, entity_id, **fields):
        try:
            return super().update(entity_id, **fields)
        except ConflictError as e:
            raise ConflictError(SKU_CONFLICT_MESSAGE) from e

    def decrement_stock(self, cur: Any, product_id: int, qty: int) -> None:
        """Take ``qty`` units out of stock inside a caller-owned transaction."""
        ph = placeholder(self.conn)
        cur.execute(f"SELECT name, stock FROM products WHERE id={ph}", (int(product_id),))
        row = cur.fetchone()
        if row is None:
            raise NotFoundError(self.not_found_message)
        name, current = row[0], int(row[1] or 0)
        if int(qty) > current:
            raise ValidationError(
                f"Estoque insuficiente para {name}: solicitado {int(qty)}, disponível {current}"
            )
        cur.execute(
            f"UPDATE products SET stock={ph} WHERE id={ph}",
            (current - int(qty), int(product_id)),
        )


# ============================================================================
# Service orders
# ============================================================================

def parse_items(value: Any) -> List[str]:
    """Accept a list or a comma separated string of item descriptions."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(item).strip() for item in value if str(item).strip()]


class ServiceOrderRepository(Repository[ServiceOrder]):
    table = "service_orders"
    fields = (
        "client_id", "client_name", "items", "total_value",
        "delivery_date", "prescription", "status",
    )
    not_found_message = "Ordem de serviço não encontrada."

    def from_row(self, row):
        prescription = row.get("prescription")
        return ServiceOrder(
            id=int(row["id"]),
            client_id=row.get("client_id"),
            client_name=row["client_name"],
            items=tuple(json.loads(row.get("items") or "[]")),
            total_value=to_money(row.get("total_value")),
            status=row["status"],
            created_at=to_date(row.get("created_at")),
            delivery_date=to_date(row.get("delivery_date")),
            prescription=json.loads(prescription) if prescription else None,
        )

    def defaults(self):
        return {
            "client_id": None,
            "client_name": WALK_IN_CLIENT,
            "items": [],
            "total_value": 0,
            "delivery_date": today() + timedelta(days=DELIVERY_DAYS_DEFAULT),
            "prescription": None,
            "status": ORDER_STATUS_FLOW[0],
        }

    def prepare(self, fields):
        total = to_money(fields.get("total_value"), "Valor total")
        if total < 0:
            raise ValidationError("Valor total não pode ser negativo.")
        status = fields.get("status")
        if status not in ORDER_STATUS_FLOW:
            raise ValidationError(f"Status inválido: {status}")
        client_id = fields.get("client_id")
        prescription = fields.get("prescription")
        return {
            "client_id": int(client_id) if client_id else None,
            "client_name": _text(fields.get("client_name")) or WALK_IN_CLIENT,
            "items": json.dumps(parse_items(fields.get("items")), ensure_ascii=False),
            "total_value": money_to_db(self.conn, total),
            "status": status,
            "delivery_date": date_to_db(to_date(fields.get("delivery_date"))),
            "prescription": json.dumps(prescription) if prescription else None,
        }

    def insert_with(self, cur, **fields):
        if fields.get("status", ORDER_STATUS_FLOW[0]) != ORDER_STATUS_FLOW[0]:
            raise ValidationError("Novas ordens começam como Pendente.")
        return super().insert_with(cur, **fields)

    def update(self, entity_id, **fields):
        # Status moves only through core.orders.advance
        if "status" in fields and fields["status"] != self.get(entity_id).status:
            raise ValidationError("O status só pode ser alterado pelo botão Avançar.")
        return super().update(entity_id, **fields)

    def set_status(self, entity_id: int, status: str) -> ServiceOrder:
        ph = placeholder(self.conn)
        with transaction(self.conn) as cur:
            cur.execute(
                f"UPDATE service_orders SET status={ph} WHERE id={ph}",
                (status, int(entity_id)),
            )
            if cur.rowcount == 0:
                raise NotFoundError(self.not_found_message)
        return self.get(entity_id)


# ============================================================================
# Cash-flow transactions
# ============================================================================

class TransactionRepository(Repository[Transaction]):
    table = "transactions"
    order_by = "date DESC, id DESC"
    fields = (
        "description", "amount", "type", "category", "date",
        "payment_method", "status", "order_id",
    )
    not_found_message = "Lançamento não encontrado."

    def from_row(self, row):
        return Transaction(
            id=int(row["id"]),
            description=row["description"],
            amount=to_money(row["amount"]),
            type=row["type"],
            category=row.get("category") or DEFAULT_TRANSACTION_CATEGORY,
            date=to_date(row["date"]),
            payment_method=row.get("payment_method") or "CASH",
            status=row.get("status") or "PAID",
            order_id=row.get("order_id"),
        )

    def defaults(self):
        return {
            "type": "INCOME",
            "category": DEFAULT_TRANSACTION_CATEGORY,
            "date": today(),
            "payment_method": "CASH",
            "status": "PAID",
            "order_id": None,
        }

    def prepare(self, fields):
        description = _text(fields.get("description"))
        amount_raw = fields.get("amount")
        if not description or amount_raw is None or _text(amount_raw) == "":
            raise ValidationError("Preencha a descrição e o valor.")
        amount = to_money(amount_raw)
        if amount < 0:
            raise ValidationError("O valor não pode ser negativo.")
        if fields.get("type") not in TRANSACTION_TYPES:
            raise ValidationError(f"Tipo inválido: {fields.get('type')}")
        if fields.get("payment_method") not in PAYMENT_METHODS:
            raise ValidationError(f"Método de pagamento inválido: {fields.get('payment_method')}")
        if fields.get("status") not in TRANSACTION_STATUSES:
            raise ValidationError(f"Status inválido: {fields.get('status')}")
        entry_date = to_date(fields.get("date"))
        if entry_date is None:
            raise ValidationError("Informe a data do lançamento.")
        order_id = fields.get("order_id")
        return {
            "description": description,
            "amount": money_to_db(self.conn, amount),
            "type": fields["type"],
            "category": _text(fields.get("category")) or DEFAULT_TRANSACTION_CATEGORY,
            "date": date_to_db(entry_date),
            "payment_method": fields["payment_method"],
            "status": fields["status"],
            "order_id": int(order_id) if order_id else None,
        }

    def get_by_order(self, order_id: int) -> Optional[Transaction]:
        rows = fetch_rows(
            self.conn,
            f"SELECT * FROM transactions WHERE order_id={placeholder(self.conn)}",
            (int(order_id),),
        )
        return self.from_row(rows[0]) if rows else None

    def categories(self) -> List[str]:
        rows = fetch_rows(self.conn, "SELECT DISTINCT category FROM transactions")
        return sorted({row["category"] for row in rows if row["category"]}, key=str.casefold)


# ============================================================================
# Employees
# ============================================================================

class EmployeeRepository(Repository[Employee]):
    table = "employees"
    order_by = "name ASC"
    fields = ("username", "password", "name", "role")
    not_found_message = "Funcionário não encontrado."

    def from_row(self, row):
        return Employee(
            id=int(row["id"]),
            username=row["username"],
            name=row["name"],
            role=row["role"],
            password_hash=row["password_hash"],
        )

    def defaults(self):
        return {"role": "employee"}

    def current_fields(self, entity):
        # A blank password on edit keeps the stored hash
        return {
            "username": entity.username,
            "password": None,
            "password_hash": entity.password_hash,
            "name": entity.name,
            "role": entity.role,
        }

    def prepare(self, fields):
        username = _text(fields.get("username")).lower()
        name = _text(fields.get("name"))
        password = fields.get("password") or ""
        password_hash = hash_password(password) if password else fields.get("password_hash")
        if not username or not name or not password_hash:
            raise ValidationError("Por favor, preencha todos os campos.")
        if fields.get("role") not in EMPLOYEE_ROLES:
            raise ValidationError(f"Tipo de acesso inválido: {fields.get('role')}")
        return {
            "username": username,
            "password_hash": password_hash,
            "name": name,
            "role": fields["role"],
        }

    def create(self, **fields):
        try:
            return super().create(**fields)
        except ConflictError as e:
            raise ConflictError("Este nome de usuário já existe.") from e

    def update(self, entity_id, **fields):
        try:
            return super().update(entity_id, **fields)
        except ConflictError as e:
            raise ConflictError("Este nome de usuário já existe.") from e

    def find_by_username(self, username: str) -> Optional[Employee]:
        rows = fetch_rows(
            self.conn,
            f"SELECT * FROM employees WHERE LOWER(username) = LOWER({placeholder(self.conn)})",
            (_text(username),),
        )
        return self.from_row(rows[0]) if rows else None

    def count(self) -> int:
        rows = fetch_rows(self.conn, "SELECT COUNT(*) AS total FROM employees")
        return int(rows[0]["total"])


@dataclass(frozen=True)
class Repositories:
    """One repository per entity, built once per database connection."""

    conn: DBConnection
    clients: ClientRepository
    products: ProductRepository
    orders: ServiceOrderRepository
    transactions: TransactionRepository
    employees: EmployeeRepository


def build_repositories(conn: DBConnection) -> Repositories:
    return Repositories(
        conn=conn,
        clients=ClientRepository(conn),
        products=ProductRepository(conn),
        orders=ServiceOrderRepository(conn),
        transactions=TransactionRepository(conn),
        employees=EmployeeRepository(conn),
    )
