import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from portal.models import Area, EstadoPedido, Pedido, PedidoItem, Producto
from portal.services.inventario import InventarioError, descontar_stock, productos_con_stock
from portal.services.notificaciones import crear_notificacion
from portal.utils import generar_codigo
from portal.utils_roles import (
    APROBAR_PEDIDO,
    CREAR_PEDIDO,
    DESPACHAR_PEDIDO,
    RECHAZAR_PEDIDO,
    exigir_permiso,
)

logger = logging.getLogger(__name__)


class PedidoError(Exception):
    """Errores de dominio en el flujo de pedidos."""
    pass


def _enlace_pedido(pedido: Pedido) -> str:
    return f"/pedidos/{pedido.pk}/"


def _cambiar_estado(
    pedido: Pedido,
    *,
    esperado: str,
    nuevo: str,
    **campos,
) -> Pedido:
    """
    Transición condicional: solo actualiza si el pedido sigue en `esperado`.
    Si otra petición ya lo movió, no se toca nada y se levanta PedidoError.
    """
    actualizados = Pedido.objects.filter(pk=pedido.pk, estado=esperado).update(
        estado=nuevo,
        updated_at=timezone.now(),
        **campos,
    )
    if actualizados == 0:
        actual = Pedido.objects.filter(pk=pedido.pk).values_list("estado", flat=True).first()
        raise PedidoError(
            f"El pedido {pedido.codigo} ya no está {esperado.lower()} "
            f"(estado actual: {actual or 'desconocido'})."
        )
    pedido.refresh_from_db()
    return pedido


@transaction.atomic
def crear_pedido(
    *,
    usuario,
    items: list[dict],
    area_solicitante: str | None = None,
    centro_costo: str = "",
    cultivo: str = "",
    observaciones: str = "",
) -> Pedido:
    """
    Crea un pedido Pendiente y avisa a Gerencia.

    `items` es una lista de dicts con: producto, cantidad y opcionalmente
    area_destino y descripcion_uso. La cantidad se valida contra el stock
    actual, sin reservarlo.
    """
    exigir_permiso(usuario, CREAR_PEDIDO)

    if not items:
        raise PedidoError("El pedido debe tener al menos un producto.")

    area_solicitante = area_solicitante or usuario.area

    ids = [item["producto"].pk for item in items]
    stock_por_id = {p.pk: p for p in productos_con_stock().filter(pk__in=ids)}

    solicitado: dict[int, Decimal] = {}
    for item in items:
        cantidad = item.get("cantidad")
        producto = stock_por_id.get(item["producto"].pk)
        if producto is None:
            raise PedidoError("Uno de los productos ya no existe.")
        if cantidad is None or cantidad <= 0:
            raise PedidoError(f'La cantidad de "{producto.nombre}" debe ser mayor a cero.')
        solicitado[producto.pk] = solicitado.get(producto.pk, Decimal("0")) + cantidad

    for producto_id, cantidad in solicitado.items():
        producto = stock_por_id[producto_id]
        if cantidad > producto.stock_total:
            raise PedidoError(
                f'Stock insuficiente para "{producto.nombre}". '
                f"Stock actual: {producto.stock_total}."
            )

    pedido = Pedido.objects.create(
        codigo=generar_codigo("ORD"),
        estado=EstadoPedido.PENDIENTE,
        area_solicitante=area_solicitante,
        usuario_solicitante=usuario,
        nombre_solicitante=usuario.nombre_completo or usuario.username,
        firma_solicitante_url=usuario.firma_url,
        centro_costo=centro_costo,
        cultivo=cultivo,
        observaciones=observaciones,
    )

    for item in items:
        producto = stock_por_id[item["producto"].pk]
        PedidoItem.objects.create(
            pedido=pedido,
            producto=producto,
            sku=producto.sku,
            nombre=producto.nombre,
            unidad=producto.unidad,
            cantidad=item["cantidad"],
            area_destino=item.get("area_destino") or "",
            descripcion_uso=item.get("descripcion_uso") or "",
        )

    crear_notificacion(
        destino=Area.GERENCIA,
        titulo="Nueva Solicitud de Pedido",
        descripcion=f"El área de {area_solicitante} ha solicitado el pedido {pedido.codigo}.",
        enlace=_enlace_pedido(pedido),
    )

    logger.info("Pedido %s creado por %s", pedido.codigo, usuario)
    return pedido


@transaction.atomic
def aprobar_pedido(*, pedido: Pedido, usuario) -> Pedido:
    """
    Pendiente -> Aprobado. Avisa a Almacén para el despacho y al área
    solicitante.
    """
    exigir_permiso(usuario, APROBAR_PEDIDO, pedido)

    pedido = _cambiar_estado(
        pedido,
        esperado=EstadoPedido.PENDIENTE,
        nuevo=EstadoPedido.APROBADO,
        aprobado_por=usuario,
        revisado_en=timezone.now(),
    )

    crear_notificacion(
        destino=Area.ALMACEN,
        titulo="Pedido Aprobado para Despacho",
        descripcion=f"El pedido {pedido.codigo} de {pedido.area_solicitante} está listo para despachar.",
        enlace=_enlace_pedido(pedido),
    )
    crear_notificacion(
        destino=pedido.area_solicitante,
        titulo=f"Tu Pedido {pedido.codigo} Fue Aprobado",
        descripcion="Gerencia aprobó tu pedido. Almacén lo despachará pronto.",
        enlace=_enlace_pedido(pedido),
    )

    logger.info("Pedido %s aprobado por %s", pedido.codigo, usuario)
    return pedido


@transaction.atomic
def rechazar_pedido(*, pedido: Pedido, usuario) -> Pedido:
    exigir_permiso(usuario, RECHAZAR_PEDIDO, pedido)

    pedido = _cambiar_estado(
        pedido,
        esperado=EstadoPedido.PENDIENTE,
        nuevo=EstadoPedido.RECHAZADO,
        aprobado_por=usuario,
        revisado_en=timezone.now(),
    )

    crear_notificacion(
        destino=pedido.area_solicitante,
        titulo=f"Tu Pedido {pedido.codigo} Fue Rechazado",
        descripcion="Ponte en contacto con Gerencia para más detalles.",
        enlace=_enlace_pedido(pedido),
    )

    logger.info("Pedido %s rechazado por %s", pedido.codigo, usuario)
    return pedido


@transaction.atomic
def despachar_pedido(*, pedido: Pedido, usuario) -> Pedido:
    """
    Aprobado -> Despachado.

    - Bloquea el pedido y los lotes de cada producto.
    - Descuenta los lotes por fecha de vencimiento (los sin fecha al final).
    - Registra una Salida por cada lote tocado.
    Si algún producto no alcanza, no se descuenta nada.
    """
    exigir_permiso(usuario, DESPACHAR_PEDIDO, pedido)

    pedido = Pedido.objects.select_for_update().get(pk=pedido.pk)
    if not pedido.puede_despacharse:
        raise PedidoError(
            f"Solo se pueden despachar pedidos aprobados (estado actual: {pedido.estado})."
        )

    # Un mismo producto puede venir en varias líneas
    requerido: dict[int, Decimal] = {}
    for item in pedido.items.all():
        if item.producto_id is None:
            raise PedidoError(f'El producto "{item.nombre}" ya no existe en el inventario.')
        requerido[item.producto_id] = requerido.get(item.producto_id, Decimal("0")) + item.cantidad

    productos = Producto.objects.in_bulk(list(requerido))
    for producto_id, cantidad in sorted(requerido.items()):
        try:
            descontar_stock(
                producto=productos[producto_id],
                cantidad=cantidad,
                usuario=usuario,
                area_solicitante=pedido.area_solicitante,
                pedido=pedido,
            )
        except InventarioError as exc:
            raise PedidoError(str(exc)) from exc

    pedido = _cambiar_estado(
        pedido,
        esperado=EstadoPedido.APROBADO,
        nuevo=EstadoPedido.DESPACHADO,
        despachado_por=usuario,
        despachado_en=timezone.now(),
    )

    crear_notificacion(
        destino=pedido.area_solicitante,
        titulo=f"Tu Pedido {pedido.codigo} ha sido Despachado",
        descripcion="Almacén despachó los productos de tu pedido.",
        enlace=_enlace_pedido(pedido),
    )

    logger.info("Pedido %s despachado por %s", pedido.codigo, usuario)
    return pedido
