from sqlalchemy import Column, Integer, ForeignKey, Numeric
from sqlalchemy.orm import relationship

from app.data.database import Base


class CartItemModel(Base):
    __tablename__ = "item_carrinho"

    cart_id = Column(Integer, ForeignKey("carrinho.id", ondelete="CASCADE"), primary_key=True)
    product_id = Column(Integer, ForeignKey("produto_base.id"), primary_key=True)

    quantity = Column(Integer, nullable=False)
    # preco no momento da adicao (usado pela politica "snapshot")
    unit_price = Column(Numeric(10, 2), nullable=False)

    cart = relationship("CartModel", back_populates="items")
    product = relationship("ProductModel")
