import logging

from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from portal.models import (
    Area,
    Comunicado,
    DESTINO_TODOS,
    EstadoPublicacion,
    PublicacionGaleria,
)
from portal.services.archivos import subir_archivos
from portal.services.notificaciones import crear_notificacion
from portal.utils import generar_codigo
from portal.utils_roles import (
    APROBAR_PUBLICACION,
    PUBLICAR_COMUNICADO,
    PUBLICAR_GALERIA,
    autorizar,
    exigir_permiso,
)

logger = logging.getLogger(__name__)


class ContenidoError(Exception):
    """Errores de dominio en galería y comunicados."""
    pass


def _nombre(usuario) -> str:
    return usuario.nombre_completo or usuario.username


def publicaciones_visibles(usuario):
    """
    Aprobadas para todos; quien puede aprobar ve también las pendientes y
    cada autor ve las suyas.
    """
    qs = PublicacionGaleria.objects.select_related("autor")
    if autorizar(usuario, APROBAR_PUBLICACION):
        return qs
    return qs.filter(Q(estado=EstadoPublicacion.APROBADO) | Q(autor=usuario))


@transaction.atomic
def crear_publicacion(*, usuario, titulo: str, descripcion: str, imagenes=None) -> PublicacionGaleria:
    exigir_permiso(usuario, PUBLICAR_GALERIA)

    if not (titulo or "").strip():
        raise ContenidoError("La publicación necesita un título.")

    publicacion = PublicacionGaleria.objects.create(
        titulo=titulo.strip(),
        descripcion=descripcion,
        imagenes=subir_archivos(imagenes, carpeta="galeria", prefijo=generar_codigo("POST")),
        autor=usuario,
        nombre_autor=_nombre(usuario),
        area_autor=usuario.area,
        estado=EstadoPublicacion.PENDIENTE,
        fecha=timezone.now(),
    )

    crear_notificacion(
        destino=Area.GERENCIA,
        titulo="Nueva Publicación en Galería",
        descripcion=f"{publicacion.nombre_autor} ({publicacion.area_autor}) publicó '{publicacion.titulo}'.",
        enlace="/galeria/",
    )
    logger.info("Publicación %s creada por %s", publicacion.pk, usuario)
    return publicacion


def _revisar(publicacion: PublicacionGaleria, *, usuario, nuevo: str) -> PublicacionGaleria:
    exigir_permiso(usuario, APROBAR_PUBLICACION, publicacion)
    actualizados = PublicacionGaleria.objects.filter(
        pk=publicacion.pk,
        estado=EstadoPublicacion.PENDIENTE,
    ).update(estado=nuevo, updated_at=timezone.now())
    if actualizados == 0:
        raise ContenidoError("La publicación ya fue revisada.")
    publicacion.refresh_from_db()
    logger.info("Publicación %s -> %s por %s", publicacion.pk, nuevo, usuario)
    return publicacion


@transaction.atomic
def aprobar_publicacion(*, publicacion: PublicacionGaleria, usuario) -> PublicacionGaleria:
    return _revisar(publicacion, usuario=usuario, nuevo=EstadoPublicacion.APROBADO)


@transaction.atomic
def rechazar_publicacion(*, publicacion: PublicacionGaleria, usuario) -> PublicacionGaleria:
    return _revisar(publicacion, usuario=usuario, nuevo=EstadoPublicacion.RECHAZADO)


@transaction.atomic
def crear_comunicado(*, usuario, titulo: str, descripcion: str, imagenes=None) -> Comunicado:
    """
    Publica un comunicado y avisa a todas las áreas.
    """
    exigir_permiso(usuario, PUBLICAR_COMUNICADO)

    if not (titulo or "").strip():
        raise ContenidoError("El comunicado necesita un título.")

    comunicado = Comunicado.objects.create(
        titulo=titulo.strip(),
        descripcion=descripcion,
        imagenes=subir_archivos(imagenes, carpeta="comunicados", prefijo=generar_codigo("COM")),
        autor=usuario,
        nombre_autor=_nombre(usuario),
        fecha=timezone.now(),
    )

    crear_notificacion(
        destino=DESTINO_TODOS,
        titulo=f"Nuevo Comunicado: {comunicado.titulo}",
        descripcion=comunicado.descripcion[:200],
        enlace="/comunicados/",
    )
    logger.info("Comunicado %s publicado por %s", comunicado.pk, usuario)
    return comunicado
