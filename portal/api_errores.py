import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from portal.services.chat import ChatError
from portal.services.combustible import CombustibleError
from portal.services.contenido import ContenidoError
from portal.services.inventario import InventarioError
from portal.services.pedidos import PedidoError
from portal.services.seguridad import SeguridadError
from portal.services.usuarios import UsuarioError

logger = logging.getLogger(__name__)

ERRORES_DE_DOMINIO = (
    ChatError,
    CombustibleError,
    ContenidoError,
    InventarioError,
    PedidoError,
    SeguridadError,
    UsuarioError,
)

MENSAJE_ERROR_BD = "No se pudo completar la operación. Intenta nuevamente en unos minutos."


def manejar_excepcion(exc, context):
    """
    Manejador de excepciones de la API.

    - Errores de dominio -> 400 con el mensaje en `detail`.
    - PedidoError -> 409 (el pedido no está en el estado esperado o no hay stock).
    - DatabaseError -> 503 con un mensaje genérico; el detalle queda en el log.
    El resto (permisos, validación, 404) lo resuelve DRF.
    """
    if isinstance(exc, PedidoError):
        return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

    if isinstance(exc, ERRORES_DE_DOMINIO):
        return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, DatabaseError):
        vista = context.get("view")
        logger.exception("Error de base de datos en %s", type(vista).__name__ if vista else "API")
        return Response({"detail": MENSAJE_ERROR_BD}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    return exception_handler(exc, context)
