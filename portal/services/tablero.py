import logging

from django.db import DatabaseError

from portal.models import EstadoPedido, Pedido, Producto
from portal.services.combustible import obtener_niveles
from portal.services.inventario import obtener_lotes_por_vencer
from portal.utils_roles import VER_TABLERO_GLOBAL, autorizar

logger = logging.getLogger(__name__)


def _tablero_vacio() -> dict:
    return {
        "pedidos_recientes": [],
        "lotes_por_vencer": [],
        "total_productos": 0,
        "pedidos_pendientes": 0,
        "niveles_combustible": [],
        "error": True,
    }


def obtener_datos_tablero(usuario) -> dict:
    """
    Datos del panel principal.

    - Últimos 5 pedidos (de su área, salvo quien ve el tablero global).
    - Lotes con stock que vencen en los próximos días.
    - Total de productos y pedidos pendientes.
    - Niveles de combustible.
    Si la base de datos falla se registra y se devuelve un tablero vacío.
    """
    try:
        pedidos = Pedido.objects.all()
        if not autorizar(usuario, VER_TABLERO_GLOBAL):
            pedidos = pedidos.filter(area_solicitante=usuario.area)

        return {
            "pedidos_recientes": list(pedidos.order_by("-fecha", "-id")[:5]),
            "lotes_por_vencer": list(obtener_lotes_por_vencer()),
            "total_productos": Producto.objects.count(),
            "pedidos_pendientes": Pedido.objects.filter(estado=EstadoPedido.PENDIENTE).count(),
            "niveles_combustible": obtener_niveles(),
            "error": False,
        }
    except DatabaseError:
        logger.exception("No se pudieron cargar los datos del tablero")
        return _tablero_vacio()
