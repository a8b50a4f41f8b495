import logging
from datetime import date, timedelta
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import DecimalField, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from portal.models import (
    Area,
    LoteProducto,
    MovimientoInventario,
    Producto,
)
from portal.services.archivos import subir_archivo, subir_archivos
from portal.utils_roles import GESTIONAR_PRODUCTOS, exigir_permiso

logger = logging.getLogger(__name__)


class InventarioError(Exception):
    """Errores de dominio al modificar el inventario."""
    pass


def productos_con_stock():
    """
    Queryset de productos anotado con `total_stock` (suma de sus lotes).
    Producto.stock_total y Producto.estado_stock usan la anotación.
    """
    return Producto.objects.annotate(
        total_stock=Coalesce(
            Sum("lotes__cantidad"),
            Value(Decimal("0")),
            output_field=DecimalField(max_digits=14, decimal_places=2),
        )
    )


def _registrar_movimiento(
    *,
    producto: Producto,
    tipo: str,
    cantidad: Decimal,
    codigo_lote: str,
    usuario=None,
    area_solicitante: str = Area.ALMACEN,
    pedido=None,
) -> MovimientoInventario:
    return MovimientoInventario.objects.create(
        producto=producto,
        sku=producto.sku,
        nombre_producto=producto.nombre,
        codigo_lote=codigo_lote,
        tipo=tipo,
        cantidad=cantidad,
        unidad=producto.unidad,
        area_solicitante=area_solicitante,
        usuario=usuario,
        pedido=pedido,
        fecha_movimiento=timezone.now(),
    )


@transaction.atomic
def crear_producto(
    *,
    usuario,
    datos: dict,
    codigo_lote: str,
    cantidad_inicial: Decimal,
    fecha_vencimiento: date | None = None,
    imagenes=None,
    ficha_tecnica=None,
) -> Producto:
    """
    Crea un producto con su lote inicial.

    - El SKU no puede existir previamente.
    - Sube imágenes y ficha técnica (si vienen) y guarda sus URLs.
    - Registra una Entrada en el historial por el stock inicial.
    """
    exigir_permiso(usuario, GESTIONAR_PRODUCTOS)

    sku = (datos.get("sku") or "").strip()
    if not sku:
        raise InventarioError("El SKU es obligatorio.")

    if Producto.objects.filter(sku__iexact=sku).exists():
        raise InventarioError("Ya existe un producto con este SKU.")

    if cantidad_inicial is None or cantidad_inicial < 0:
        raise InventarioError("El stock inicial no puede ser negativo.")

    if not codigo_lote or not codigo_lote.strip():
        raise InventarioError("El lote inicial necesita un código.")

    campos = {k: v for k, v in datos.items() if k != "sku"}
    producto = Producto(sku=sku, **campos)
    producto.imagenes = subir_archivos(imagenes, carpeta="productos", prefijo=sku)
    producto.ficha_tecnica_url = (
        subir_archivo(ficha_tecnica, carpeta="productos", prefijo=f"{sku}-ficha") or ""
    )
    producto.save()

    lote = LoteProducto.objects.create(
        producto=producto,
        codigo=codigo_lote.strip(),
        cantidad=cantidad_inicial,
        fecha_vencimiento=fecha_vencimiento,
    )

    _registrar_movimiento(
        producto=producto,
        tipo=MovimientoInventario.TIPO_ENTRADA,
        cantidad=cantidad_inicial,
        codigo_lote=lote.codigo,
        usuario=usuario,
    )

    logger.info("Producto %s creado por %s con lote %s", sku, usuario, lote.codigo)
    return producto


@transaction.atomic
def agregar_stock(
    *,
    usuario,
    producto: Producto,
    codigo_lote: str,
    cantidad: Decimal,
    fecha_vencimiento: date | None = None,
) -> LoteProducto:
    """
    Agrega un lote nuevo al producto. El código de lote no puede repetirse
    dentro del producto (sin distinguir mayúsculas).
    """
    exigir_permiso(usuario, GESTIONAR_PRODUCTOS)

    if cantidad is None or cantidad <= 0:
        raise InventarioError("La cantidad a ingresar debe ser > 0.")

    codigo_lote = (codigo_lote or "").strip()
    if not codigo_lote:
        raise InventarioError("El código de lote es obligatorio.")

    # Bloqueamos el producto para serializar altas de lotes concurrentes
    producto = Producto.objects.select_for_update().get(pk=producto.pk)

    if producto.lotes.filter(codigo__iexact=codigo_lote).exists():
        raise InventarioError(f'El lote ID "{codigo_lote}" ya existe para este producto.')

    lote = LoteProducto.objects.create(
        producto=producto,
        codigo=codigo_lote,
        cantidad=cantidad,
        fecha_vencimiento=fecha_vencimiento,
    )

    _registrar_movimiento(
        producto=producto,
        tipo=MovimientoInventario.TIPO_ENTRADA,
        cantidad=cantidad,
        codigo_lote=lote.codigo,
        usuario=usuario,
    )

    logger.info("Lote %s (+%s) agregado a %s", lote.codigo, cantidad, producto.sku)
    return lote


@transaction.atomic
def incrementar_lote(*, usuario, lote: LoteProducto, cantidad: Decimal) -> LoteProducto:
    """
    Suma stock a un lote existente.
    """
    exigir_permiso(usuario, GESTIONAR_PRODUCTOS)

    if cantidad is None or cantidad <= 0:
        raise InventarioError("La cantidad a ingresar debe ser > 0.")

    lote = LoteProducto.objects.select_for_update().select_related("producto").get(pk=lote.pk)
    lote.cantidad = (lote.cantidad or Decimal("0")) + cantidad
    lote.save(update_fields=["cantidad", "updated_at"])

    _registrar_movimiento(
        producto=lote.producto,
        tipo=MovimientoInventario.TIPO_ENTRADA,
        cantidad=cantidad,
        codigo_lote=lote.codigo,
        usuario=usuario,
    )
    return lote


@transaction.atomic
def eliminar_producto(*, usuario, producto: Producto) -> None:
    """
    Elimina el producto y todos sus lotes. El historial conserva el
    nombre y SKU copiados.
    """
    exigir_permiso(usuario, GESTIONAR_PRODUCTOS)
    sku = producto.sku
    producto.delete()
    logger.info("Producto %s eliminado por %s", sku, usuario)


def ordenar_lotes_para_salida(lotes) -> list[LoteProducto]:
    """
    Primero los lotes que vencen antes; los lotes sin vencimiento al final.
    """
    return sorted(
        lotes,
        key=lambda l: (l.fecha_vencimiento is None, l.fecha_vencimiento or date.max, l.pk),
    )


def descontar_stock(
    *,
    producto: Producto,
    cantidad: Decimal,
    usuario=None,
    area_solicitante: str,
    pedido=None,
) -> list[MovimientoInventario]:
    """
    Descuenta `cantidad` de los lotes del producto, el que vence primero
    antes. Debe llamarse dentro de una transacción: los lotes se bloquean
    con select_for_update. Crea una Salida por cada lote tocado.
    """
    lotes = list(
        LoteProducto.objects.select_for_update().filter(producto=producto, cantidad__gt=0).order_by("pk")
    )
    disponible = sum((l.cantidad for l in lotes), Decimal("0"))
    if disponible < cantidad:
        raise InventarioError(
            f'Stock insuficiente para "{producto.nombre}". Stock actual: {disponible}.'
        )

    movimientos: list[MovimientoInventario] = []
    pendiente = cantidad
    for lote in ordenar_lotes_para_salida(lotes):
        if pendiente <= 0:
            break
        tomar = min(pendiente, lote.cantidad)
        if tomar <= 0:
            continue
        lote.cantidad = lote.cantidad - tomar
        lote.save(update_fields=["cantidad", "updated_at"])
        pendiente -= tomar

        movimientos.append(
            _registrar_movimiento(
                producto=producto,
                tipo=MovimientoInventario.TIPO_SALIDA,
                cantidad=tomar,
                codigo_lote=lote.codigo,
                usuario=usuario,
                area_solicitante=area_solicitante,
                pedido=pedido,
            )
        )
    return movimientos


def obtener_lotes_por_vencer(*, dias: int | None = None):
    """
    Lotes con stock cuya fecha de vencimiento esté entre hoy y hoy+días.
    """
    if dias is None:
        dias = settings.PORTAL_DIAS_POR_VENCER
    hoy = timezone.localdate()
    limite = hoy + timedelta(days=dias)
    return (
        LoteProducto.objects.select_related("producto")
        .filter(
            cantidad__gt=0,
            fecha_vencimiento__isnull=False,
            fecha_vencimiento__gte=hoy,
            fecha_vencimiento__lte=limite,
        )
        .order_by("fecha_vencimiento")
    )


def obtener_lotes_vencidos():
    """
    Lotes ya vencidos que todavía tienen stock.
    """
    hoy = timezone.localdate()
    return (
        LoteProducto.objects.select_related("producto")
        .filter(
            cantidad__gt=0,
            fecha_vencimiento__isnull=False,
            fecha_vencimiento__lt=hoy,
        )
        .order_by("fecha_vencimiento")
    )


def historial_inventario(*, producto: Producto | None = None, tipo: str | None = None):
    qs = MovimientoInventario.objects.select_related("usuario", "pedido")
    if producto is not None:
        qs = qs.filter(producto=producto)
    if tipo:
        qs = qs.filter(tipo=tipo)
    return qs


def historial_producto(producto: Producto):
    """Movimientos de un producto, más recientes primero."""
    return historial_inventario(producto=producto)
