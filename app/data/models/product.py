# app/data/models/product.py
from sqlalchemy import Column, Integer, ForeignKey, Numeric, String, Text

from app.data.database import Base
from app.domain.enums import ProductType


class ProductModel(Base):
    __tablename__ = "produto_base"

    id = Column(Integer, primary_key=True)
    nome = Column(String(255), nullable=False)
    preco = Column(Numeric(10, 2), nullable=False)
    tipo = Column(String(20), nullable=False)
    descricao = Column(Text, nullable=True)


# tabelas satelite: uma linha por produto, na tabela do seu tipo
class RemedioModel(Base):
    __tablename__ = "remedio"

    id = Column(Integer, ForeignKey("produto_base.id"), primary_key=True)


class RacaoModel(Base):
    __tablename__ = "racao"

    id = Column(Integer, ForeignKey("produto_base.id"), primary_key=True)


class BrinquedoModel(Base):
    __tablename__ = "brinquedo"

    id = Column(Integer, ForeignKey("produto_base.id"), primary_key=True)


SATELLITE_MODELS = {
    ProductType.REMEDIO: RemedioModel,
    ProductType.RACAO: RacaoModel,
    ProductType.BRINQUEDO: BrinquedoModel,
}
