import uuid
from decimal import Decimal

from django.conf import settings

ESTADO_EN_STOCK = "En Stock"
ESTADO_POCO_STOCK = "Poco Stock"
ESTADO_AGOTADO = "Agotado"


def estado_stock(total) -> str:
    """
    Etiqueta de stock a partir del total sumado de los lotes:
    - total <= 0        -> 'Agotado'
    - 0 < total <= 10   -> 'Poco Stock'
    - total > 10        -> 'En Stock'
    El umbral se puede ajustar con PORTAL_UMBRAL_POCO_STOCK.
    """
    total = Decimal(total or 0)
    umbral = getattr(settings, "PORTAL_UMBRAL_POCO_STOCK", Decimal("10"))
    if total <= 0:
        return ESTADO_AGOTADO
    if total <= umbral:
        return ESTADO_POCO_STOCK
    return ESTADO_EN_STOCK


def generar_codigo(prefijo: str, largo: int = 8) -> str:
    """Ej: generar_codigo('ORD') -> 'ORD-1A2B3C4D'."""
    return f"{prefijo}-{uuid.uuid4().hex[:largo].upper()}"
