# app/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, model_serializer

from app.domain.enums import ProductType

T = TypeVar("T")

# valores monetarios saem como numero no JSON
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Envelope(BaseModel, Generic[T]):
    """Envelope padrao das respostas: {success, message?, data?}."""

    success: bool = True
    message: str | None = None
    data: T | None = None

    @model_serializer(mode="wrap")
    def _omit_empty_message(self, handler) -> Dict[str, Any]:
        out = handler(self)
        if self.message is None:
            out.pop("message", None)
        return out


# =====================================================
# PRODUTOS
# =====================================================
class ProductIn(BaseModel):
    """Schema para criar/atualizar produto."""

    model_config = ConfigDict(str_strip_whitespace=True)

    nome: str = Field(..., min_length=1, max_length=255, description="Nome do produto")
    preco: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="Preco (>= 0)")
    tipo: ProductType
    descricao: str | None = None


class ProductOut(BaseModel):
    id: int
    nome: str
    preco: Money
    tipo: ProductType
    descricao: str | None = None

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# CARRINHO
# =====================================================
class AddItemIn(BaseModel):
    """Schema para adicionar produto ao carrinho."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., gt=0, alias="idCliente")
    product_id: int = Field(..., gt=0, alias="idProduto")
    quantity: int = Field(..., gt=0, alias="quantidade", description="Quantidade (> 0)")


class CustomerIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(..., gt=0, alias="idCliente")


class CartItemOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(..., alias="idProduto")
    quantity: int = Field(..., alias="quantidade")
    name: str = Field(..., alias="nome")
    price: Money = Field(..., alias="preco")


class CartOut(BaseModel):
    """Cabecalho do carrinho com os itens e nomes dos produtos."""

    model_config = ConfigDict(populate_by_name=True)

    cart_id: int | None = Field(None, alias="idCarrinho")
    user_id: int = Field(..., alias="idUsuario")
    total: Money
    created_at: datetime | None = Field(None, alias="dataCriacao")
    updated_at: datetime | None = Field(None, alias="dataUltimaModificacao")
    items: List[CartItemOut] = Field(default_factory=list, alias="itens")


class HealthOut(BaseModel):
    status: str
