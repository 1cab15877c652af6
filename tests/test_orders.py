"""Service order lifecycle and sale finalization tests."""
from datetime import date
from decimal import Decimal

import pytest

from conftest import make_product
from core.constants import ORDER_STATUS_FLOW
from core.errors import ConflictError, NotFoundError, ValidationError
from core.models import CartItem
from core.orders import (
    advance,
    cart_total,
    export_orders_pdf,
    finalize_sale,
    next_status,
)


class TestStatusFlow:

    def test_next_status_walks_the_flow(self):
        assert [next_status(s) for s in ORDER_STATUS_FLOW] == ORDER_STATUS_FLOW[1:] + ["DELIVERED"]

    def test_next_status_unknown(self):
        with pytest.raises(ValidationError):
            next_status("CANCELLED")

    def test_advance_sequence_and_terminal_noop(self, repos):
        order = repos.orders.create(items=["Lente"], total_value="100")
        seen = [order.status]
        for _ in range(len(ORDER_STATUS_FLOW) + 2):
            seen.append(advance(repos, order.id).status)
        assert seen[:len(ORDER_STATUS_FLOW)] == ORDER_STATUS_FLOW
        assert set(seen[len(ORDER_STATUS_FLOW):]) == {"DELIVERED"}

    def test_advance_has_no_side_effects(self, repos):
        order = repos.orders.create(items=["Lente"], total_value="100")
        advance(repos, order.id)
        assert repos.transactions.list() == []

    def test_advance_missing_order(self, repos):
        with pytest.raises(NotFoundError):
            advance(repos, 123)


class TestFinalizeSale:

    def test_cart_total_exact(self, repos):
        p1 = make_product(repos, name="A", sale_price="0.10")
        p2 = make_product(repos, name="B", sale_price="0.20")
        assert cart_total([CartItem(p1, 3), CartItem(p2)]) == Decimal("0.50")
        assert cart_total([]) == Decimal("0.00")

    def test_creates_order_income_and_decrements_stock(self, repos):
        frame = make_product(repos, name="Armação", sale_price="450.00", stock=3)
        lens = make_product(repos, name="Lente", category="LENS", sale_price="200.00", stock=10)
        client = repos.clients.create(name="Ana Silva", phone="11999998888")

        order, income = finalize_sale(
            repos,
            [CartItem(frame), CartItem(lens, 2)],
            client_id=client.id,
            client_name=client.name,
            payment_method="PIX",
            delivery_date=date(2030, 1, 10),
        )

        assert order.status == "PENDING"
        assert order.total_value == Decimal("850.00")
        assert order.items == ("Armação", "2x Lente")
        assert order.delivery_date == date(2030, 1, 10)
        assert income.order_id == order.id
        assert income.amount == Decimal("850.00")
        assert income.type == "INCOME"
        assert income.category == "Vendas"
        assert income.payment_method == "PIX"
        assert income.description == f"Venda O.S. #{order.id} - Ana Silva"
        assert repos.products.get(frame.id).stock == 2
        assert repos.products.get(lens.id).stock == 8

    def test_walk_in_client_name(self, repos):
        product = make_product(repos)
        order, income = finalize_sale(repos, [CartItem(product)])
        assert order.client_name == "Cliente Balcão"
        assert income.description.endswith("Cliente Balcão")

    def test_insufficient_stock_writes_nothing(self, repos):
        ok = make_product(repos, name="OK", stock=5)
        short = make_product(repos, name="Curto", stock=1)
        with pytest.raises(ValidationError, match="Estoque insuficiente"):
            finalize_sale(repos, [CartItem(ok), CartItem(short, 2)])
        assert repos.orders.list() == []
        assert repos.transactions.list() == []
        assert repos.products.get(ok.id).stock == 5

    def test_empty_cart(self, repos):
        with pytest.raises(ValidationError):
            finalize_sale(repos, [])

    def test_income_cannot_be_booked_twice(self, repos):
        product = make_product(repos)
        order, income = finalize_sale(repos, [CartItem(product)])
        with pytest.raises(ConflictError):
            repos.transactions.create(
                description="Duplicada", amount="450.00", order_id=order.id
            )
        assert [t.id for t in repos.transactions.list()] == [income.id]

    def test_registers_new_client_with_the_sale(self, repos):
        product = make_product(repos)
        order, _income = finalize_sale(
            repos,
            [CartItem(product)],
            client_fields={"name": "Novo Cliente", "phone": "11988887777", "address": "Rua B"},
        )
        clients = repos.clients.list()
        assert [c.name for c in clients] == ["Novo Cliente"]
        assert order.client_id == clients[0].id
        assert order.client_name == "Novo Cliente"

    def test_updates_existing_client_with_the_sale(self, repos):
        product = make_product(repos)
        client = repos.clients.create(
            name="Ana Silva", phone="1", address="Rua A", last_visit=date(2020, 1, 1)
        )
        finalize_sale(
            repos,
            [CartItem(product)],
            client_id=client.id,
            client_name=client.name,
            client_fields={"address": "Rua Nova", "last_visit": date(2024, 5, 2)},
        )
        updated = repos.clients.get(client.id)
        assert updated.address == "Rua Nova"
        assert updated.last_visit == date(2024, 5, 2)

    def test_failed_sale_leaves_clients_unchanged(self, repos):
        short = make_product(repos, stock=1)
        client = repos.clients.create(
            name="Ana Silva", phone="1", address="Rua A", last_visit=date(2020, 1, 1)
        )
        with pytest.raises(ValidationError, match="Estoque insuficiente"):
            finalize_sale(
                repos,
                [CartItem(short, 2)],
                client_id=client.id,
                client_name=client.name,
                client_fields={"address": "Rua Nova", "last_visit": date(2024, 5, 2)},
            )
        with pytest.raises(ValidationError):
            finalize_sale(
                repos,
                [CartItem(short, 2)],
                client_fields={"name": "Novo Cliente", "phone": "2"},
            )
        assert repos.clients.list() == [client]
        assert repos.orders.list() == []
        assert repos.transactions.list() == []

    def test_invalid_new_client_cancels_the_sale(self, repos):
        product = make_product(repos, stock=3)
        with pytest.raises(ValidationError, match="Nome e Telefone"):
            finalize_sale(repos, [CartItem(product)], client_fields={"name": "Sem Telefone"})
        assert repos.orders.list() == []
        assert repos.products.get(product.id).stock == 3


def test_export_orders_pdf(repos):
    orders = [
        repos.orders.create(client_name="Ana", items=["Armação", "Lente"], total_value="650"),
        repos.orders.create(client_name="Bruno", items=["Conserto"], total_value="30"),
    ]
    pdf = export_orders_pdf(orders, "Léo Ótica")
    assert pdf.startswith(b"%PDF")
