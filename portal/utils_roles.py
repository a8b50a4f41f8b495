import logging

from django.core.exceptions import PermissionDenied

from .models import Area, Rol

logger = logging.getLogger(__name__)


# Acciones del portal
APROBAR_PEDIDO = "aprobar_pedido"
RECHAZAR_PEDIDO = "rechazar_pedido"
DESPACHAR_PEDIDO = "despachar_pedido"
CREAR_PEDIDO = "crear_pedido"
VER_HISTORIAL_PEDIDOS = "ver_historial_pedidos"
GESTIONAR_PRODUCTOS = "gestionar_productos"
VER_HISTORIAL_INVENTARIO = "ver_historial_inventario"
GESTIONAR_COMBUSTIBLE = "gestionar_combustible"
VER_HISTORIAL_COMBUSTIBLE = "ver_historial_combustible"
GESTIONAR_REPORTES = "gestionar_reportes"
APROBAR_SOLICITUD_SEGURIDAD = "aprobar_solicitud_seguridad"
PUBLICAR_GALERIA = "publicar_galeria"
APROBAR_PUBLICACION = "aprobar_publicacion"
PUBLICAR_COMUNICADO = "publicar_comunicado"
GESTIONAR_USUARIOS = "gestionar_usuarios"
GESTIONAR_CONFIGURACION = "gestionar_configuracion"
USAR_CHAT = "usar_chat"
VER_NOTIFICACION = "ver_notificacion"
VER_TABLERO_GLOBAL = "ver_tablero_global"

# Marca para acciones abiertas a cualquier usuario activo
CUALQUIER_AREA = "*"

# acción -> áreas permitidas. El rol Administrador puede todo.
POLITICA: dict[str, frozenset[str]] = {
    APROBAR_PEDIDO: frozenset({Area.GERENCIA}),
    RECHAZAR_PEDIDO: frozenset({Area.GERENCIA}),
    DESPACHAR_PEDIDO: frozenset({Area.ALMACEN}),
    CREAR_PEDIDO: frozenset({CUALQUIER_AREA}),
    VER_HISTORIAL_PEDIDOS: frozenset({Area.GERENCIA, Area.ALMACEN, Area.LOGISTICA}),
    GESTIONAR_PRODUCTOS: frozenset({Area.LOGISTICA, Area.ALMACEN}),
    VER_HISTORIAL_INVENTARIO: frozenset({Area.GERENCIA, Area.LOGISTICA, Area.ALMACEN}),
    GESTIONAR_COMBUSTIBLE: frozenset({Area.LOGISTICA, Area.ALMACEN}),
    VER_HISTORIAL_COMBUSTIBLE: frozenset({Area.GERENCIA, Area.LOGISTICA, Area.ALMACEN}),
    GESTIONAR_REPORTES: frozenset({Area.SEGURIDAD_PATRIMONIAL}),
    APROBAR_SOLICITUD_SEGURIDAD: frozenset({Area.GERENCIA}),
    PUBLICAR_GALERIA: frozenset({CUALQUIER_AREA}),
    APROBAR_PUBLICACION: frozenset({Area.GERENCIA}),
    PUBLICAR_COMUNICADO: frozenset({Area.GERENCIA, Area.RRHH}),
    GESTIONAR_USUARIOS: frozenset(),
    GESTIONAR_CONFIGURACION: frozenset(),
    USAR_CHAT: frozenset({CUALQUIER_AREA}),
    VER_NOTIFICACION: frozenset({CUALQUIER_AREA}),
    VER_TABLERO_GLOBAL: frozenset({Area.GERENCIA}),
}


def usuario_es_administrador(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if user.is_superuser:
        return True
    return user.rol == Rol.ADMINISTRADOR or user.area == Area.ADMINISTRADOR


def autorizar(user, accion: str, recurso=None) -> bool:
    """
    Política única de autorización del portal.

    - Usuarios anónimos, inactivos o pendientes nunca pasan.
    - Administradores pueden ejecutar cualquier acción conocida.
    - El resto según las áreas de POLITICA para la acción.
    - `recurso` permite reglas por objeto: una notificación solo la ve su
      área destinataria (o todas si es para 'Todos').
    """
    if accion not in POLITICA:
        raise ValueError(f"Acción desconocida: {accion}")

    if not user or not user.is_authenticated:
        return False

    if not user.is_superuser and not user.esta_activo:
        return False

    if usuario_es_administrador(user):
        return True

    if accion == VER_NOTIFICACION and recurso is not None:
        from .services.notificaciones import destinos_para

        return recurso.destino in destinos_para(user)

    areas = POLITICA[accion]
    return CUALQUIER_AREA in areas or user.area in areas


def exigir_permiso(user, accion: str, recurso=None) -> None:
    """Igual que autorizar(), pero levanta PermissionDenied si no corresponde."""
    if not autorizar(user, accion, recurso):
        logger.warning(
            "Acceso denegado: usuario=%s accion=%s",
            getattr(user, "username", None),
            accion,
        )
        raise PermissionDenied("No tienes permisos para realizar esta acción.")
