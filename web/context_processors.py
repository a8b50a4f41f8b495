import logging

from django.db import DatabaseError

from portal.services.configuracion import obtener_configuracion
from portal.services.notificaciones import contar_no_leidas
from portal.utils_roles import (
    GESTIONAR_CONFIGURACION,
    GESTIONAR_USUARIOS,
    VER_HISTORIAL_INVENTARIO,
    autorizar,
)

logger = logging.getLogger(__name__)


def portal(request):
    """
    Datos comunes a todas las plantillas: configuración de la empresa,
    contador de notificaciones y qué entradas del menú mostrar.
    """
    user = getattr(request, "user", None)
    try:
        contexto = {"empresa": obtener_configuracion()}
        if user is not None and user.is_authenticated:
            contexto.update(
                {
                    "notificaciones_no_leidas": contar_no_leidas(user),
                    "menu_usuarios": autorizar(user, GESTIONAR_USUARIOS),
                    "menu_configuracion": autorizar(user, GESTIONAR_CONFIGURACION),
                    "menu_historial_inventario": autorizar(user, VER_HISTORIAL_INVENTARIO),
                }
            )
    except DatabaseError:
        logger.exception("No se pudo cargar el contexto común del portal")
        contexto = {"empresa": None}
    return contexto
