"""
Testes do motor de consistencia do carrinho (CartService) direto
sobre a sessao SQLAlchemy.
"""
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.dialects import postgresql

from app.data.database import transaction
from app.data.models.cart import CartModel
from app.domain.errors import Internal, InvalidArgument, NotFound
from app.repos.cart_repo import select_cart_by_user, select_carts_with_product
from app.services.cart_service import CartService
from app.services.product_service import ProductService


def _line_sum(cart):
    return sum((i["price"] * i["quantity"] for i in cart["items"]), Decimal("0.00"))


class TestAddItem:

    def test_add_update_remove_sequence(self, db, make_product):
        product = make_product(preco="10.00")
        svc = CartService(db, "live")

        cart = svc.add_item(42, product.id, 3)
        assert cart["total"] == Decimal("30.00")
        assert cart["items"][0]["quantity"] == 3
        assert cart["items"][0]["name"] == "Bolinha"

        cart = svc.add_item(42, product.id, 2)
        assert len(cart["items"]) == 1
        assert cart["items"][0]["quantity"] == 5
        assert cart["total"] == Decimal("50.00")

        cart = svc.remove_item(42, product.id)
        assert cart["items"] == []
        assert cart["total"] == Decimal("0.00")

    def test_total_matches_items_after_every_add(self, db, make_product):
        racao = make_product(preco="189.90", nome="Ração", tipo="RACAO")
        remedio = make_product(preco="24.50", nome="Vermífugo", tipo="REMEDIO")
        bola = make_product(preco="12.00")
        svc = CartService(db)

        for product_id, qty in [(racao.id, 1), (remedio.id, 2), (racao.id, 3), (bola.id, 1)]:
            cart = svc.add_item(7, product_id, qty)
            assert cart["total"] == _line_sum(cart)

        assert cart["total"] == Decimal("820.60")

    def test_first_add_creates_single_cart(self, db, make_product):
        product = make_product()
        svc = CartService(db)

        first = svc.add_item(1, product.id, 1)
        second = svc.add_item(1, product.id, 1)

        assert first["cart_id"] == second["cart_id"]
        carts = db.execute(select(CartModel).where(CartModel.user_id == 1)).scalars().all()
        assert len(carts) == 1

    def test_unknown_product_is_not_found_and_creates_no_cart(self, db):
        svc = CartService(db)

        with pytest.raises(NotFound):
            svc.add_item(3, 999, 1)

        assert db.execute(select(CartModel)).first() is None

    @pytest.mark.parametrize("quantity", [0, -1, True, 1.5])
    def test_invalid_quantity(self, db, make_product, quantity):
        product = make_product()

        with pytest.raises(InvalidArgument):
            CartService(db).add_item(3, product.id, quantity)

    def test_invalid_user_id(self, db, make_product):
        product = make_product()

        with pytest.raises(InvalidArgument):
            CartService(db).add_item(0, product.id, 1)


class TestRemoveAndClear:

    def test_remove_product_not_in_cart_leaves_cart_untouched(self, db, make_product):
        in_cart = make_product(preco="10.00")
        other = make_product(preco="5.00", nome="Outro")
        svc = CartService(db)
        before = svc.add_item(9, in_cart.id, 2)

        with pytest.raises(NotFound):
            svc.remove_item(9, other.id)

        after = svc.read_cart(9)
        assert after["items"] == before["items"]
        assert after["total"] == Decimal("20.00")

    def test_remove_without_cart(self, db, make_product):
        product = make_product()

        with pytest.raises(NotFound):
            CartService(db).remove_item(9, product.id)

    def test_clear_keeps_cart_row(self, db, make_product):
        product = make_product(preco="10.00")
        svc = CartService(db)
        added = svc.add_item(11, product.id, 4)

        cleared = svc.clear_cart(11)
        assert cleared["items"] == []
        assert cleared["total"] == Decimal("0.00")

        read = svc.read_cart(11)
        assert read["cart_id"] == added["cart_id"]
        assert read["items"] == []
        assert read["total"] == Decimal("0.00")

    def test_clear_without_cart(self, db):
        with pytest.raises(NotFound):
            CartService(db).clear_cart(11)


class TestReadCart:

    def test_user_without_cart_gets_empty_cart(self, db):
        cart = CartService(db).read_cart(77)

        assert cart["cart_id"] is None
        assert cart["user_id"] == 77
        assert cart["items"] == []
        assert cart["total"] == Decimal("0.00")

    def test_get_or_create_returns_same_cart(self, db):
        svc = CartService(db)

        first = svc.get_or_create_cart(5)
        db.commit()
        second = svc.get_or_create_cart(5)
        db.commit()

        assert first.id == second.id
        assert first.total == Decimal("0.00")


class TestPricingPolicy:

    def test_live_price_change_reprices_carts(self, db, make_product):
        product = make_product(preco="10.00")
        CartService(db, "live").add_item(1, product.id, 3)

        ProductService(db, "live").update_product(
            product.id, {"nome": "Bolinha", "preco": "12.00", "tipo": "BRINQUEDO"}
        )

        cart = CartService(db, "live").read_cart(1)
        assert cart["items"][0]["price"] == Decimal("12.00")
        assert cart["total"] == Decimal("36.00")

    def test_snapshot_price_is_kept(self, db, make_product):
        product = make_product(preco="10.00")
        svc = CartService(db, "snapshot")
        svc.add_item(1, product.id, 2)

        ProductService(db, "snapshot").update_product(
            product.id, {"nome": "Bolinha", "preco": "15.00", "tipo": "BRINQUEDO"}
        )
        cart = svc.add_item(1, product.id, 1)

        assert cart["items"][0]["quantity"] == 3
        assert cart["items"][0]["price"] == Decimal("10.00")
        assert cart["total"] == Decimal("30.00")

    def test_unknown_policy_rejected(self, db):
        with pytest.raises(ValueError):
            CartService(db, "whatever")


class TestConcurrency:

    def test_cart_lookup_for_mutation_locks_row(self):
        sql = str(select_cart_by_user(42, lock=True).compile(dialect=postgresql.dialect()))
        assert "FOR UPDATE" in sql

    def test_read_lookup_does_not_lock(self):
        sql = str(select_cart_by_user(42).compile(dialect=postgresql.dialect()))
        assert "FOR UPDATE" not in sql

    def test_reprice_lookup_locks_only_cart_rows(self):
        sql = str(select_carts_with_product(7).compile(dialect=postgresql.dialect()))
        assert "FOR UPDATE OF carrinho" in sql

    def test_losing_first_add_race_is_retried(self, db, make_product, monkeypatch):
        """
        Dois "primeiros add" simultaneos: o segundo nao ve o carrinho
        criado pelo primeiro, bate na unique de user_id, faz rollback e
        repete a operacao inteira. Resultado: quantidade 2, nunca 1.
        """
        product = make_product(preco="10.00")
        svc = CartService(db)
        svc.add_item(5, product.id, 1)

        original = svc.repo.get_cart_by_user
        calls = {"n": 0}

        def stale_lookup(user_id, lock=False):
            calls["n"] += 1
            if calls["n"] == 1:
                return None
            return original(user_id, lock)

        monkeypatch.setattr(svc.repo, "get_cart_by_user", stale_lookup)

        cart = svc.add_item(5, product.id, 1)

        assert calls["n"] == 2
        assert len(cart["items"]) == 1
        assert cart["items"][0]["quantity"] == 2
        assert cart["total"] == Decimal("20.00")


class TestStoreFailure:

    def test_database_error_in_transaction_is_internal(self, db, make_product):
        product = make_product(preco="10.00")
        svc = CartService(db)
        svc.add_item(3, product.id, 1)
        error = OperationalError("DELETE FROM item_carrinho", {}, Exception("connection lost"))

        with patch.object(svc.repo, "delete_cart_items", side_effect=error):
            with pytest.raises(Internal) as excinfo:
                svc.clear_cart(3)

        assert isinstance(excinfo.value.__cause__, OperationalError)
        cart = svc.read_cart(3)
        assert len(cart["items"]) == 1
        assert cart["total"] == Decimal("10.00")

    def test_domain_errors_are_not_wrapped(self, db):
        with pytest.raises(NotFound):
            with transaction(db):
                raise NotFound("x")
