import logging

from django.contrib import messages
from django.db import DatabaseError

from portal.api_errores import ERRORES_DE_DOMINIO, MENSAJE_ERROR_BD

logger = logging.getLogger(__name__)


def ejecutar_servicio(request, funcion, *, exito: str | None = None, **kwargs):
    """
    Ejecuta un servicio del portal desde una vista.

    Devuelve (True, resultado) si todo salió bien. Los errores de dominio
    se muestran con messages.error; los de base de datos se registran y
    se muestra un mensaje genérico. PermissionDenied se deja pasar (403).
    """
    try:
        resultado = funcion(**kwargs)
    except ERRORES_DE_DOMINIO as exc:
        messages.error(request, str(exc))
        return False, None
    except DatabaseError:
        logger.exception("Error de base de datos en %s", funcion.__name__)
        messages.error(request, MENSAJE_ERROR_BD)
        return False, None

    if exito:
        messages.success(request, exito)
    return True, resultado
