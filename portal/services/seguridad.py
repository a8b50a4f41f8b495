import logging

from django.db import transaction
from django.utils import timezone

from portal.models import (
    Area,
    EstadoReporte,
    ReporteSeguridad,
    TipoReporte,
    VehiculoRegistrado,
)
from portal.services.archivos import subir_archivo, subir_archivos
from portal.services.notificaciones import crear_notificacion
from portal.utils import generar_codigo
from portal.utils_roles import (
    APROBAR_SOLICITUD_SEGURIDAD,
    GESTIONAR_REPORTES,
    exigir_permiso,
)

logger = logging.getLogger(__name__)

# Áreas a las que se puede dirigir una solicitud de permiso
AREAS_DESTINO_SOLICITUD = (Area.GERENCIA, Area.ALMACEN)


class SeguridadError(Exception):
    """Errores de dominio en la bitácora de seguridad."""
    pass


def _nombre(usuario) -> str:
    return usuario.nombre_completo or usuario.username


@transaction.atomic
def crear_reporte(
    *,
    usuario,
    tipo: str,
    titulo: str,
    descripcion: str,
    fotos=None,
    area_destino: str = "",
    detalles: str = "",
) -> ReporteSeguridad:
    """
    Registra un reporte de seguridad.

    Las solicitudes de permiso nacen en 'Aprobación Pendiente' y avisan al
    área destino; el resto de tipos nacen 'Abierto'.
    """
    exigir_permiso(usuario, GESTIONAR_REPORTES)

    if tipo not in TipoReporte.values:
        raise SeguridadError(f"Tipo de reporte desconocido: {tipo}")
    if not (titulo or "").strip():
        raise SeguridadError("El reporte necesita un título.")

    es_solicitud = tipo == TipoReporte.SOLICITUD_PERMISO
    if es_solicitud and area_destino not in AREAS_DESTINO_SOLICITUD:
        raise SeguridadError("La solicitud debe dirigirse a Gerencia o Almacén.")

    codigo = generar_codigo("REP")
    reporte = ReporteSeguridad.objects.create(
        codigo=codigo,
        fecha=timezone.now(),
        tipo=tipo,
        titulo=titulo.strip(),
        descripcion=descripcion,
        autor=usuario,
        nombre_autor=_nombre(usuario),
        fotos=subir_archivos(fotos, carpeta="seguridad", prefijo=codigo),
        estado=EstadoReporte.PENDIENTE if es_solicitud else EstadoReporte.ABIERTO,
        area_destino=area_destino if es_solicitud else "",
        detalles=detalles,
    )

    if es_solicitud:
        crear_notificacion(
            destino=area_destino,
            titulo="Nueva Solicitud de Permiso",
            descripcion=f"Seguridad Patrimonial solicita aprobación: {reporte.titulo}.",
            enlace=f"/seguridad/{reporte.pk}/",
        )

    logger.info("Reporte %s (%s) creado por %s", reporte.codigo, tipo, usuario)
    return reporte


def _transicion(reporte: ReporteSeguridad, *, esperado: str, nuevo: str) -> ReporteSeguridad:
    actualizados = ReporteSeguridad.objects.filter(pk=reporte.pk, estado=esperado).update(
        estado=nuevo,
        updated_at=timezone.now(),
    )
    if actualizados == 0:
        raise SeguridadError(
            f"El reporte {reporte.codigo} no está en estado '{esperado}'."
        )
    reporte.refresh_from_db()
    return reporte


@transaction.atomic
def aprobar_solicitud(*, reporte: ReporteSeguridad, usuario) -> ReporteSeguridad:
    exigir_permiso(usuario, APROBAR_SOLICITUD_SEGURIDAD, reporte)
    if not reporte.es_solicitud:
        raise SeguridadError("Solo las solicitudes de permiso se aprueban.")
    reporte = _transicion(reporte, esperado=EstadoReporte.PENDIENTE, nuevo=EstadoReporte.APROBADO)
    crear_notificacion(
        destino=Area.SEGURIDAD_PATRIMONIAL,
        titulo="Solicitud Aprobada",
        descripcion=f"La solicitud {reporte.codigo} fue aprobada por {_nombre(usuario)}.",
        enlace=f"/seguridad/{reporte.pk}/",
    )
    logger.info("Solicitud %s aprobada por %s", reporte.codigo, usuario)
    return reporte


@transaction.atomic
def rechazar_solicitud(*, reporte: ReporteSeguridad, usuario) -> ReporteSeguridad:
    exigir_permiso(usuario, APROBAR_SOLICITUD_SEGURIDAD, reporte)
    if not reporte.es_solicitud:
        raise SeguridadError("Solo las solicitudes de permiso se rechazan.")
    reporte = _transicion(reporte, esperado=EstadoReporte.PENDIENTE, nuevo=EstadoReporte.RECHAZADO)
    crear_notificacion(
        destino=Area.SEGURIDAD_PATRIMONIAL,
        titulo="Solicitud Rechazada",
        descripcion=f"La solicitud {reporte.codigo} fue rechazada por {_nombre(usuario)}.",
        enlace=f"/seguridad/{reporte.pk}/",
    )
    logger.info("Solicitud %s rechazada por %s", reporte.codigo, usuario)
    return reporte


@transaction.atomic
def cerrar_reporte(*, reporte: ReporteSeguridad, usuario) -> ReporteSeguridad:
    exigir_permiso(usuario, GESTIONAR_REPORTES, reporte)
    reporte = _transicion(reporte, esperado=EstadoReporte.ABIERTO, nuevo=EstadoReporte.CERRADO)
    logger.info("Reporte %s cerrado por %s", reporte.codigo, usuario)
    return reporte


@transaction.atomic
def registrar_ingreso_vehiculo(*, usuario, datos: dict, foto=None) -> ReporteSeguridad:
    """
    Registra el ingreso de un vehículo de trabajador.

    - Crea o actualiza el vehículo registrado del empleado.
    - Deja un reporte 'Ingreso Vehículo Trabajador' ya cerrado.
    """
    exigir_permiso(usuario, GESTIONAR_REPORTES)

    nombre_empleado = (datos.get("nombre_empleado") or "").strip()
    if not nombre_empleado:
        raise SeguridadError("Indica el nombre del empleado.")

    valores = {
        "area_empleado": datos["area_empleado"],
        "tipo_vehiculo": datos["tipo_vehiculo"],
        "modelo_vehiculo": datos["modelo_vehiculo"],
        "placa": datos["placa"].strip().upper(),
    }

    vehiculo = (
        VehiculoRegistrado.objects.select_for_update()
        .filter(nombre_empleado__iexact=nombre_empleado)
        .first()
    )
    if vehiculo is None:
        vehiculo = VehiculoRegistrado.objects.create(nombre_empleado=nombre_empleado, **valores)
    else:
        for campo, valor in valores.items():
            setattr(vehiculo, campo, valor)
        vehiculo.save()

    codigo = generar_codigo("VEH")
    foto_url = subir_archivo(foto, carpeta="seguridad", prefijo=codigo)

    reporte = ReporteSeguridad.objects.create(
        codigo=codigo,
        fecha=timezone.now(),
        tipo=TipoReporte.INGRESO_VEHICULO,
        titulo=f"Ingreso Vehicular: {vehiculo.nombre_empleado}",
        descripcion=(
            f"Ingreso del vehículo con placa {vehiculo.placa}, modelo {vehiculo.modelo_vehiculo}, "
            f"conducido por {vehiculo.nombre_empleado} del área {vehiculo.area_empleado}."
        ),
        autor=usuario,
        nombre_autor=_nombre(usuario),
        fotos=[foto_url] if foto_url else [],
        estado=EstadoReporte.CERRADO,
    )

    logger.info("Ingreso vehicular %s registrado (%s)", reporte.codigo, vehiculo.placa)
    return reporte


def buscar_vehiculo_por_empleado(nombre: str) -> VehiculoRegistrado | None:
    nombre = (nombre or "").strip()
    if not nombre:
        return None
    return VehiculoRegistrado.objects.filter(nombre_empleado__iexact=nombre).first()
