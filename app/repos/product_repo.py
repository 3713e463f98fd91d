# app/repos/product_repo.py
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.data.models.product import ProductModel, SATELLITE_MODELS
from app.domain.enums import ProductType


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def list_products(self) -> list[ProductModel]:
        stmt = select(ProductModel).order_by(ProductModel.nome.asc())
        return list(self.db.execute(stmt).scalars().all())

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.flush()  # gera o id
        return product

    def delete_product(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.flush()

    def add_satellite(self, product_id: int, tipo: ProductType) -> None:
        model = SATELLITE_MODELS[ProductType(tipo)]
        self.db.add(model(id=product_id))
        self.db.flush()

    def delete_satellite(self, product_id: int, tipo: ProductType) -> int:
        model = SATELLITE_MODELS[ProductType(tipo)]
        result = self.db.execute(delete(model).where(model.id == product_id))
        return result.rowcount

    def satellite_type(self, product_id: int) -> ProductType | None:
        """Tipo cuja tabela satelite contem o produto (None se nenhuma)."""
        for tipo, model in SATELLITE_MODELS.items():
            if self.db.get(model, product_id) is not None:
                return tipo
        return None
