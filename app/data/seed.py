# app/data/seed.py
from app.data.database import SessionLocal, init_db
from app.data.models.product import ProductModel
from app.services.product_service import ProductService
from app.utils.logging import get_logger

logger = get_logger(__name__)

SAMPLE_PRODUCTS = [
    {"nome": "Antipulgas 10ml", "preco": "39.90", "tipo": "REMEDIO", "descricao": "Pipeta para cães de 10 a 20kg"},
    {"nome": "Vermífugo Plus", "preco": "24.50", "tipo": "REMEDIO", "descricao": None},
    {"nome": "Ração Premium Adulto 15kg", "preco": "189.90", "tipo": "RACAO", "descricao": "Sabor frango e arroz"},
    {"nome": "Ração Filhotes 3kg", "preco": "64.00", "tipo": "RACAO", "descricao": None},
    {"nome": "Bolinha de Borracha", "preco": "12.00", "tipo": "BRINQUEDO", "descricao": "Resistente a mordidas"},
    {"nome": "Arranhador para Gatos", "preco": "89.90", "tipo": "BRINQUEDO", "descricao": None},
]


def seed() -> int:
    """Popula o catalogo se estiver vazio. Devolve quantos produtos foram criados."""
    db = SessionLocal()
    try:
        # so popula se vazio
        if db.query(ProductModel).first():
            return 0
        service = ProductService(db)
        for data in SAMPLE_PRODUCTS:
            service.create_product(data)
        logger.info(f"Catalogo populado com {len(SAMPLE_PRODUCTS)} produtos")
        return len(SAMPLE_PRODUCTS)
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
    seed()
