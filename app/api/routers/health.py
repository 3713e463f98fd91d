# app/api/routers/health.py
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from app.domain.schemas import HealthOut

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
def index():
    return "API Vendas está operacional!"


@router.get("/health", response_model=HealthOut)
def health():
    return {"status": "UP"}
