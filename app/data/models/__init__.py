#import de todos os modelos para o SQLAlchemy registrar no Base.metadata

from app.data.models.product import (
    ProductModel,
    RemedioModel,
    RacaoModel,
    BrinquedoModel,
    SATELLITE_MODELS,
)
from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel

__all__ = [
    "ProductModel",
    "RemedioModel",
    "RacaoModel",
    "BrinquedoModel",
    "SATELLITE_MODELS",
    "CartModel",
    "CartItemModel",
]
