# portal/services/notificaciones.py
import logging

from portal.models import Area, DESTINO_TODOS, Notificacion

logger = logging.getLogger(__name__)


def crear_notificacion(
    *,
    destino: str,
    titulo: str,
    descripcion: str,
    enlace: str = "",
) -> Notificacion:
    """
    Inserta una notificación para un área (o para todas con DESTINO_TODOS).
    Los clientes la reciben consultando notificaciones_para() con un cursor.
    """
    notificacion = Notificacion.objects.create(
        destino=destino,
        titulo=titulo,
        descripcion=descripcion,
        enlace=enlace,
    )
    logger.info("Notificación %s creada para %s: %s", notificacion.pk, destino, titulo)
    return notificacion


def destinos_para(user) -> list[str]:
    """
    Destinos que un usuario puede leer: su área, el broadcast y, si es
    administrador, las notificaciones dirigidas a Administrador.
    """
    from portal.utils_roles import usuario_es_administrador

    destinos = [user.area, DESTINO_TODOS]
    if usuario_es_administrador(user) and Area.ADMINISTRADOR not in destinos:
        destinos.append(Area.ADMINISTRADOR)
    return destinos


def notificaciones_para(user, *, desde: int | None = None, limite: int = 50):
    """
    Notificaciones visibles para el usuario, más recientes primero.
    Con `desde` solo devuelve las posteriores a ese id, en orden ascendente
    de id (consulta incremental).
    """
    qs = Notificacion.objects.filter(destino__in=destinos_para(user))
    if desde is not None:
        return qs.filter(pk__gt=desde).order_by("id")[:limite]
    return qs.order_by("-creada_en", "-id")[:limite]


def contar_no_leidas(user) -> int:
    return Notificacion.objects.filter(
        destino__in=destinos_para(user),
        leida=False,
    ).count()


def marcar_como_leida(notificacion: Notificacion) -> Notificacion:
    if not notificacion.leida:
        notificacion.leida = True
        notificacion.save(update_fields=["leida"])
    return notificacion


def marcar_todas_como_leidas(user) -> int:
    return Notificacion.objects.filter(
        destino__in=destinos_para(user),
        leida=False,
    ).update(leida=True)
