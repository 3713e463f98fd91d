# app/repos/cart_repo.py
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.data.models.product import ProductModel


def select_cart_by_user(user_id: int, lock: bool = False):
    stmt = select(CartModel).where(CartModel.user_id == user_id)
    if lock:
        # serializa mutacoes concorrentes do mesmo carrinho
        stmt = stmt.with_for_update()
    return stmt


def select_carts_with_product(product_id: int):
    # trava so o cabecalho do carrinho, nunca as linhas de item_carrinho
    return (
        select(CartModel)
        .join(CartItemModel, CartItemModel.cart_id == CartModel.id)
        .where(CartItemModel.product_id == product_id)
        .order_by(CartModel.id)
        .with_for_update(of=CartModel)
    )


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_user(self, user_id: int, lock: bool = False) -> CartModel | None:
        stmt = select_cart_by_user(user_id, lock)
        if lock:
            stmt = stmt.execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def get_cart_item(self, cart_id: int, product_id: int) -> CartItemModel | None:
        stmt = select(CartItemModel).where(
            CartItemModel.cart_id == cart_id,
            CartItemModel.product_id == product_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, cart_id: int, product_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        )
        return result.rowcount

    def delete_cart_items(self, cart_id: int) -> int:
        result = self.db.execute(delete(CartItemModel).where(CartItemModel.cart_id == cart_id))
        return result.rowcount

    def get_cart_lines(self, cart_id: int, live_price: bool) -> list:
        """
        Itens do carrinho com o nome do produto.
        live_price=True usa o preco atual do catalogo, senao o preco gravado no item.
        """
        price_col = ProductModel.preco if live_price else CartItemModel.unit_price
        stmt = (
            select(
                CartItemModel.product_id,
                CartItemModel.quantity,
                price_col.label("price"),
                ProductModel.nome.label("name"),
            )
            .join(ProductModel, CartItemModel.product_id == ProductModel.id)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.product_id)
        )
        return list(self.db.execute(stmt).all())

    def get_carts_with_product(self, product_id: int) -> list[CartModel]:
        stmt = select_carts_with_product(product_id).execution_options(populate_existing=True)
        return list(self.db.execute(stmt).scalars().all())

    def delete_product_items(self, product_id: int) -> int:
        result = self.db.execute(delete(CartItemModel).where(CartItemModel.product_id == product_id))
        return result.rowcount
