#app/api/routers/carts.py
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.schemas import AddItemIn, CartOut, CustomerIn, Envelope
from app.services.cart_service import CartService

router = APIRouter(prefix="/carrinho", tags=["carrinho"])


def get_service(db: Session):
    return CartService(db)


@router.get("/{user_id}", response_model=Envelope[CartOut])
def read_cart(user_id: int = Path(..., gt=0), db: Session = Depends(get_db)):
    svc = get_service(db)
    cart = svc.read_cart(user_id)
    if cart["cart_id"] is None:
        return {
            "success": True,
            "message": "Carrinho vazio ou não encontrado para este cliente.",
            "data": cart,
        }
    return {"success": True, "data": cart}


@router.post("/adicionar", response_model=Envelope[CartOut])
def add_item(payload: AddItemIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    cart = svc.add_item(
        user_id=payload.user_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
    )
    return {"success": True, "message": "Produto adicionado/atualizado no carrinho!", "data": cart}


@router.delete("/remover/{product_id}", response_model=Envelope[CartOut])
def remove_item(payload: CustomerIn, product_id: int = Path(..., gt=0), db: Session = Depends(get_db)):
    svc = get_service(db)
    cart = svc.remove_item(payload.user_id, product_id)
    return {"success": True, "message": "Produto removido do carrinho.", "data": cart}


@router.delete("/esvaziar", response_model=Envelope[CartOut])
def clear_cart(payload: CustomerIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    cart = svc.clear_cart(payload.user_id)
    return {"success": True, "message": "Carrinho esvaziado com sucesso.", "data": cart}
