from app.data.seed import SAMPLE_PRODUCTS, seed
from app.repos.product_repo import ProductRepo


def test_seed_populates_empty_catalog_once(db):
    assert seed() == len(SAMPLE_PRODUCTS)
    assert seed() == 0

    repo = ProductRepo(db)
    products = repo.list_products()
    assert len(products) == len(SAMPLE_PRODUCTS)
    for product in products:
        assert repo.satellite_type(product.id).value == product.tipo
