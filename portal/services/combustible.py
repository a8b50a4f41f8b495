import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Case, DecimalField, F, Sum, When
from django.utils import timezone

from portal.models import MovimientoCombustible, NivelCombustible, TipoCombustible
from portal.utils_roles import GESTIONAR_COMBUSTIBLE, exigir_permiso

logger = logging.getLogger(__name__)


class CombustibleError(Exception):
    """Errores de dominio del tanque de combustible."""
    pass


def _capacidad_por_defecto(tipo_combustible: str) -> Decimal:
    capacidades = getattr(settings, "PORTAL_CAPACIDAD_COMBUSTIBLE", {})
    return Decimal(str(capacidades.get(tipo_combustible, 0)))


def _nivel_bloqueado(tipo_combustible: str) -> NivelCombustible:
    """
    Obtiene (o crea en cero) la fila de nivel del tipo y la bloquea hasta
    el fin de la transacción.
    """
    if tipo_combustible not in TipoCombustible.values:
        raise CombustibleError(f"Tipo de combustible desconocido: {tipo_combustible}")

    nivel, _ = NivelCombustible.objects.select_for_update().get_or_create(
        tipo_combustible=tipo_combustible,
        defaults={
            "nivel": Decimal("0"),
            "capacidad": _capacidad_por_defecto(tipo_combustible),
        },
    )
    return nivel


@transaction.atomic
def registrar_abastecimiento(
    *,
    usuario,
    tipo_combustible: str,
    cantidad: Decimal,
) -> MovimientoCombustible:
    """
    Ingreso de combustible al tanque. La capacidad no limita el ingreso,
    solo se usa para mostrar el porcentaje.
    """
    exigir_permiso(usuario, GESTIONAR_COMBUSTIBLE)

    if cantidad is None or cantidad <= 0:
        raise CombustibleError("La cantidad debe ser mayor a cero.")

    nivel = _nivel_bloqueado(tipo_combustible)

    movimiento = MovimientoCombustible.objects.create(
        tipo=MovimientoCombustible.TIPO_ABASTECIMIENTO,
        tipo_combustible=tipo_combustible,
        cantidad=cantidad,
        conductor=usuario.nombre_completo or usuario.username,
        area=usuario.area,
        registrado_por=usuario,
        fecha=timezone.now(),
    )

    nivel.nivel = nivel.nivel + cantidad
    nivel.save(update_fields=["nivel", "updated_at"])

    logger.info("Abastecimiento de %s %s (nivel %s)", cantidad, tipo_combustible, nivel.nivel)
    return movimiento


@transaction.atomic
def despachar_combustible(
    *,
    usuario,
    tipo_combustible: str,
    cantidad: Decimal,
    area: str,
    conductor: str,
    tipo_vehiculo: str = "",
    turno: str = "",
    horometro: Decimal | None = None,
    kilometraje: Decimal | None = None,
) -> MovimientoCombustible:
    """
    Salida de combustible a un vehículo. Se rechaza si la cantidad supera
    el nivel actual; en ese caso el nivel no cambia.
    """
    exigir_permiso(usuario, GESTIONAR_COMBUSTIBLE)

    if cantidad is None or cantidad <= 0:
        raise CombustibleError("La cantidad debe ser mayor a cero.")

    nivel = _nivel_bloqueado(tipo_combustible)

    if cantidad > nivel.nivel:
        raise CombustibleError(
            f"No hay suficiente {tipo_combustible}. Nivel actual: {nivel.nivel} L."
        )

    movimiento = MovimientoCombustible.objects.create(
        tipo=MovimientoCombustible.TIPO_CONSUMO,
        tipo_combustible=tipo_combustible,
        cantidad=cantidad,
        area=area,
        conductor=conductor,
        tipo_vehiculo=tipo_vehiculo,
        turno=turno,
        horometro=horometro,
        kilometraje=kilometraje,
        registrado_por=usuario,
        fecha=timezone.now(),
    )

    nivel.nivel = nivel.nivel - cantidad
    nivel.save(update_fields=["nivel", "updated_at"])

    logger.info(
        "Despacho de %s %s a %s (%s), nivel %s",
        cantidad,
        tipo_combustible,
        conductor,
        area,
        nivel.nivel,
    )
    return movimiento


def obtener_niveles() -> list[NivelCombustible]:
    """
    Un nivel por tipo de combustible; los que no tienen fila aparecen en cero.
    """
    existentes = {n.tipo_combustible: n for n in NivelCombustible.objects.all()}
    niveles = []
    for tipo in TipoCombustible.values:
        nivel = existentes.get(tipo)
        if nivel is None:
            nivel = NivelCombustible(
                tipo_combustible=tipo,
                nivel=Decimal("0"),
                capacidad=_capacidad_por_defecto(tipo),
            )
        niveles.append(nivel)
    return niveles


def calcular_nivel_desde_historial(tipo_combustible: str) -> Decimal:
    """Suma con signo del historial: abastecimientos menos consumos."""
    total = MovimientoCombustible.objects.filter(
        tipo_combustible=tipo_combustible,
    ).aggregate(
        total=Sum(
            Case(
                When(tipo=MovimientoCombustible.TIPO_CONSUMO, then=-F("cantidad")),
                default=F("cantidad"),
                output_field=DecimalField(max_digits=14, decimal_places=2),
            )
        )
    )["total"]
    return total or Decimal("0")


def verificar_consistencia() -> dict[str, dict]:
    """
    Compara, por tipo, el nivel guardado con el calculado desde el historial.
    """
    resultado = {}
    for nivel in obtener_niveles():
        calculado = calcular_nivel_desde_historial(nivel.tipo_combustible)
        consistente = calculado == nivel.nivel
        if not consistente:
            logger.warning(
                "Nivel de %s inconsistente: guardado %s, historial %s",
                nivel.tipo_combustible,
                nivel.nivel,
                calculado,
            )
        resultado[nivel.tipo_combustible] = {
            "nivel": nivel.nivel,
            "historial": calculado,
            "consistente": consistente,
        }
    return resultado


def historial_combustible(*, tipo_combustible: str | None = None, tipo: str | None = None):
    qs = MovimientoCombustible.objects.select_related("registrado_por")
    if tipo_combustible:
        qs = qs.filter(tipo_combustible=tipo_combustible)
    if tipo:
        qs = qs.filter(tipo=tipo)
    return qs
