# app/services/cart_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from app.data.database import transaction
from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.domain.enums import PricingPolicy
from app.domain.errors import InvalidArgument, NotFound
from app.repos.cart_repo import CartRepo
from app.repos.product_repo import ProductRepo
from app.utils.logging import get_logger
from app.utils.retry import db_retry
from app.utils.settings import CART_PRICING_POLICY

logger = get_logger(__name__)

CENTS = Decimal("0.01")


def _require_id(value: Any, field: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgument(f"{field} deve ser um inteiro positivo.")


class CartService:
    """
    Motor de consistencia do carrinho.

    Invariantes:
    - carrinho.total == soma(quantidade * preco unitario) dos itens
    - um carrinho por usuario, criado no primeiro add (nunca vazio)

    Comandos (add, remove, clear) rodam numa unica transacao, com o
    cabecalho do carrinho bloqueado (SELECT ... FOR UPDATE) antes de
    ler os itens. Consulta (read) nao abre transacao.
    """

    def __init__(self, db: Session, pricing_policy: str = CART_PRICING_POLICY):
        self.db = db
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.pricing_policy = PricingPolicy(pricing_policy)

    @property
    def live_price(self) -> bool:
        return self.pricing_policy is PricingPolicy.LIVE

    # =====================================================
    # QUERY
    # =====================================================
    def read_cart(self, user_id: int) -> Dict[str, Any]:
        _require_id(user_id, "idCliente")

        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            return {
                "cart_id": None,
                "user_id": user_id,
                "items": [],
                "total": Decimal("0.00"),
                "created_at": None,
                "updated_at": None,
            }
        return self._snapshot(cart)

    # =====================================================
    # COMMANDS
    # =====================================================
    def get_or_create_cart(self, user_id: int) -> CartModel:
        """
        Busca o carrinho do usuario (com lock) ou cria um com total 0.
        Deve ser chamado dentro de uma transacao.
        """
        cart = self.repo.get_cart_by_user(user_id, lock=True)
        if cart:
            return cart

        now = datetime.now(timezone.utc)
        cart = self.repo.create_cart(
            CartModel(
                user_id=user_id,
                total=Decimal("0.00"),
                created_at=now,
                updated_at=now,
            )
        )
        logger.info(f"Criado carrinho {cart.id} para o usuario {user_id}")
        return cart

    @db_retry()
    def add_item(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        _require_id(user_id, "idCliente")
        _require_id(product_id, "idProduto")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidArgument("Quantidade deve ser um número positivo.")

        with transaction(self.db):
            product = self.products.get_product(product_id)
            if not product:
                raise NotFound("Produto não encontrado.")

            cart = self.get_or_create_cart(user_id)

            item = self.repo.get_cart_item(cart.id, product_id)
            if item:
                logger.info(
                    f"Produto {product_id} ja esta no carrinho {cart.id}, quantidade "
                    f"{item.quantity} -> {item.quantity + quantity}"
                )
                item.quantity += quantity
                if self.live_price:
                    item.unit_price = product.preco
            else:
                self.repo.add_cart_item(
                    CartItemModel(
                        cart_id=cart.id,
                        product_id=product_id,
                        quantity=quantity,
                        unit_price=product.preco,
                    )
                )

            self._recompute_total(cart)
            snapshot = self._snapshot(cart)

        logger.info(f"Produto {product_id} adicionado ao carrinho {cart.id}, total {snapshot['total']}")
        return snapshot

    @db_retry()
    def remove_item(self, user_id: int, product_id: int) -> Dict[str, Any]:
        _require_id(user_id, "idCliente")
        _require_id(product_id, "idProduto")

        with transaction(self.db):
            cart = self.repo.get_cart_by_user(user_id, lock=True)
            if not cart:
                raise NotFound("Carrinho não encontrado para este cliente.")

            if not self.repo.delete_cart_item(cart.id, product_id):
                raise NotFound("Produto não encontrado no carrinho.")

            self._recompute_total(cart)
            snapshot = self._snapshot(cart)

        logger.info(f"Produto {product_id} removido do carrinho {cart.id}")
        return snapshot

    @db_retry()
    def clear_cart(self, user_id: int) -> Dict[str, Any]:
        _require_id(user_id, "idCliente")

        with transaction(self.db):
            cart = self.repo.get_cart_by_user(user_id, lock=True)
            if not cart:
                raise NotFound("Carrinho não encontrado para este cliente.")

            removed = self.repo.delete_cart_items(cart.id)
            cart.total = Decimal("0.00")
            cart.updated_at = datetime.now(timezone.utc)
            self.db.flush()
            snapshot = self._snapshot(cart)

        logger.info(f"Carrinho {cart.id} esvaziado ({removed} itens removidos)")
        return snapshot

    def refresh_totals_for_product(self, product_id: int) -> int:
        """
        Recalcula o total dos carrinhos que contem o produto (preco do
        catalogo mudou). So tem efeito na politica "live". Roda dentro
        da transacao de quem chamou.
        """
        if not self.live_price:
            return 0

        carts = self.repo.get_carts_with_product(product_id)
        for cart in carts:
            self._recompute_total(cart)
        return len(carts)

    def drop_product_from_carts(self, product_id: int) -> int:
        """
        Tira o produto de todos os carrinhos (produto saindo do catalogo)
        e recalcula o total de cada um. Roda dentro da transacao de quem chamou.
        """
        carts = self.repo.get_carts_with_product(product_id)
        if not carts:
            return 0

        self.repo.delete_product_items(product_id)
        for cart in carts:
            self._recompute_total(cart)
        return len(carts)

    # =====================================================
    # helpers
    # =====================================================
    def _recompute_total(self, cart: CartModel) -> Decimal:
        self.db.flush()
        lines = self.repo.get_cart_lines(cart.id, self.live_price)
        total = sum((Decimal(line.price) * line.quantity for line in lines), Decimal("0.00"))

        cart.total = total.quantize(CENTS)
        cart.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return cart.total

    def _snapshot(self, cart: CartModel) -> Dict[str, Any]:
        lines = self.repo.get_cart_lines(cart.id, self.live_price)
        return {
            "cart_id": cart.id,
            "user_id": cart.user_id,
            "total": Decimal(cart.total).quantize(CENTS),
            "created_at": cart.created_at,
            "updated_at": cart.updated_at,
            "items": [
                {
                    "product_id": line.product_id,
                    "quantity": line.quantity,
                    "name": line.name,
                    "price": Decimal(line.price).quantize(CENTS),
                }
                for line in lines
            ],
        }
