#app/data/models/cart.py
from sqlalchemy import Column, Integer, Numeric, DateTime
from sqlalchemy.orm import relationship

from app.data.database import Base


class CartModel(Base):
    __tablename__ = "carrinho"

    id = Column(Integer, primary_key=True)
    # um carrinho por usuario
    user_id = Column(Integer, nullable=False, unique=True, index=True)

    total = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    items = relationship("CartItemModel", back_populates="cart")
