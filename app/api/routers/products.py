# app/api/routers/products.py
from typing import List

from fastapi import APIRouter, Depends, Path, Request
from sqlalchemy.orm import Session

from app.data.database import get_db
from app.domain.schemas import Envelope, ProductIn, ProductOut
from app.services.product_service import ProductService
from app.utils.logging import get_logger

logger = get_logger(__name__)


def log_request(request: Request):
    logger.info(f"[Produto Route] {request.method} {request.url.path}")


router = APIRouter(prefix="/produtos", tags=["produtos"], dependencies=[Depends(log_request)])


def get_service(db: Session):
    return ProductService(db)


@router.get("", response_model=Envelope[List[ProductOut]])
def list_products(db: Session = Depends(get_db)):
    svc = get_service(db)
    return {"success": True, "data": svc.list_products()}


@router.get("/{product_id}", response_model=Envelope[ProductOut])
def get_product(product_id: int = Path(..., gt=0), db: Session = Depends(get_db)):
    svc = get_service(db)
    return {"success": True, "data": svc.get_product(product_id)}


@router.post("", response_model=Envelope[ProductOut], status_code=201)
def create_product(payload: ProductIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    return {"success": True, "message": "Produto criado com sucesso.", "data": svc.create_product(payload)}


@router.put("/{product_id}", response_model=Envelope[ProductOut])
def update_product(payload: ProductIn, product_id: int = Path(..., gt=0), db: Session = Depends(get_db)):
    svc = get_service(db)
    return {
        "success": True,
        "message": "Produto atualizado com sucesso.",
        "data": svc.update_product(product_id, payload),
    }


@router.delete("/{product_id}", response_model=Envelope[ProductOut])
def delete_product(product_id: int = Path(..., gt=0), db: Session = Depends(get_db)):
    svc = get_service(db)
    return {"success": True, "message": "Produto removido com sucesso.", "data": svc.delete_product(product_id)}
