# app/domain/enums.py
from enum import Enum


class ProductType(str, Enum):
    REMEDIO = "REMEDIO"
    RACAO = "RACAO"
    BRINQUEDO = "BRINQUEDO"


class PricingPolicy(str, Enum):
    LIVE = "live"
    SNAPSHOT = "snapshot"
