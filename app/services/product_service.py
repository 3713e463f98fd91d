# app/services/product_service.py
from typing import Any, Mapping

from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.data.database import transaction
from app.data.models.product import ProductModel
from app.domain.enums import ProductType
from app.domain.errors import InvalidArgument, NotFound
from app.domain.schemas import ProductIn, ProductOut
from app.repos.product_repo import ProductRepo
from app.services.cart_service import CartService
from app.utils.logging import get_logger
from app.utils.retry import db_retry
from app.utils.settings import CART_PRICING_POLICY

logger = get_logger(__name__)


def _parse(payload: ProductIn | Mapping[str, Any]) -> ProductIn:
    if isinstance(payload, ProductIn):
        return payload
    try:
        return ProductIn.model_validate(payload)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first["loc"])
        raise InvalidArgument(f"Campo inválido '{field}': {first['msg']}") from e


class ProductService:
    """
    Catalogo de produtos: tabela base + uma tabela satelite por tipo.
    Toda mutacao mexe nas duas dentro da mesma transacao, entao
    produto.tipo e a tabela satelite nunca divergem apos um commit.
    """

    def __init__(self, db: Session, pricing_policy: str = CART_PRICING_POLICY):
        self.db = db
        self.repo = ProductRepo(db)
        self.carts = CartService(db, pricing_policy)

    def list_products(self) -> list[ProductOut]:
        return [ProductOut.model_validate(p) for p in self.repo.list_products()]

    def get_product(self, product_id: int) -> ProductOut:
        return ProductOut.model_validate(self._get_or_404(product_id))

    def create_product(self, payload: ProductIn | Mapping[str, Any]) -> ProductOut:
        data = _parse(payload)

        with transaction(self.db):
            product = self.repo.add_product(
                ProductModel(
                    nome=data.nome,
                    preco=data.preco,
                    tipo=data.tipo.value,
                    descricao=data.descricao,
                )
            )
            self.repo.add_satellite(product.id, data.tipo)
            created = ProductOut.model_validate(product)

        logger.info(f"Produto {created.id} criado ({created.tipo.value})")
        return created

    @db_retry()
    def update_product(self, product_id: int, payload: ProductIn | Mapping[str, Any]) -> ProductOut:
        data = _parse(payload)

        with transaction(self.db):
            product = self._get_or_404(product_id)
            old_type = ProductType(product.tipo)
            price_changed = product.preco != data.preco

            if old_type != data.tipo:
                logger.info(f"Produto {product_id} muda de tipo {old_type.value} -> {data.tipo.value}")
                self.repo.delete_satellite(product_id, old_type)
                self.repo.add_satellite(product_id, data.tipo)

            product.nome = data.nome
            product.preco = data.preco
            product.tipo = data.tipo.value
            product.descricao = data.descricao
            self.db.flush()

            if price_changed:
                refreshed = self.carts.refresh_totals_for_product(product_id)
                if refreshed:
                    logger.info(f"Total recalculado em {refreshed} carrinho(s) com o produto {product_id}")

            updated = ProductOut.model_validate(product)

        return updated

    @db_retry()
    def delete_product(self, product_id: int) -> ProductOut:
        with transaction(self.db):
            product = self._get_or_404(product_id)
            deleted = ProductOut.model_validate(product)

            dropped = self.carts.drop_product_from_carts(product_id)
            if dropped:
                logger.info(f"Produto {product_id} retirado de {dropped} carrinho(s)")

            # satelite antes da base (chave estrangeira)
            self.repo.delete_satellite(product_id, ProductType(product.tipo))
            self.repo.delete_product(product)

        logger.info(f"Produto {product_id} removido")
        return deleted

    def _get_or_404(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFound("Produto não encontrado.")
        return product
