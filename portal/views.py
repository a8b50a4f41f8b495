from django.db.models import Prefetch, Q
from django.shortcuts import get_object_or_404
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.response import Response

from .models import LoteProducto, Notificacion, Pedido, TipoCombustible
from .serializers import (
    AbastecimientoSerializer,
    AgregarStockSerializer,
    DespachoCombustibleSerializer,
    EnviarMensajeSerializer,
    IncrementarLoteSerializer,
    LoteProductoSerializer,
    MensajeChatSerializer,
    MovimientoCombustibleSerializer,
    MovimientoInventarioSerializer,
    NivelCombustibleSerializer,
    NotificacionSerializer,
    PedidoCrearSerializer,
    PedidoSerializer,
    ProductoCrearSerializer,
    ProductoSerializer,
)
from .services import chat as chat_srv
from .services import combustible as combustible_srv
from .services import inventario as inventario_srv
from .services import notificaciones as notificaciones_srv
from .services import pedidos as pedidos_srv
from .utils_roles import (
    USAR_CHAT,
    VER_HISTORIAL_COMBUSTIBLE,
    VER_HISTORIAL_INVENTARIO,
    VER_HISTORIAL_PEDIDOS,
    VER_NOTIFICACION,
    autorizar,
    exigir_permiso,
)


def _cursor(request, nombre="desde"):
    """Lee un id entero opcional de los query params (cursor de consulta)."""
    valor = request.query_params.get(nombre)
    if valor in (None, ""):
        return None
    try:
        return int(valor)
    except (TypeError, ValueError):
        raise ValidationError({nombre: "Debe ser un número entero."})


class ProductoViewSet(
    mixins.CreateModelMixin,
    mixins.DestroyModelMixin,
    viewsets.ReadOnlyModelViewSet,
):
    """
    Productos con sus lotes. Las altas y bajas pasan por los servicios de
    inventario (validan SKU, suben archivos y registran historial).
    """

    serializer_class = ProductoSerializer

    def get_queryset(self):
        qs = inventario_srv.productos_con_stock().prefetch_related(
            Prefetch("lotes", queryset=LoteProducto.objects.order_by("fecha_vencimiento", "codigo"))
        )
        categoria = self.request.query_params.get("categoria")
        if categoria:
            qs = qs.filter(categoria=categoria)
        area = self.request.query_params.get("area")
        if area:
            qs = qs.filter(area=area)
        q = self.request.query_params.get("q")
        if q:
            qs = qs.filter(Q(nombre__icontains=q) | Q(sku__icontains=q))
        return qs.order_by("nombre")

    def get_serializer_class(self):
        if self.action == "create":
            return ProductoCrearSerializer
        return ProductoSerializer

    def create(self, request, *args, **kwargs):
        serializer = ProductoCrearSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        datos = dict(serializer.validated_data)
        codigo_lote = datos.pop("codigo_lote")
        cantidad_inicial = datos.pop("cantidad_inicial")
        fecha_vencimiento = datos.pop("fecha_vencimiento", None)

        producto = inventario_srv.crear_producto(
            usuario=request.user,
            datos=datos,
            codigo_lote=codigo_lote,
            cantidad_inicial=cantidad_inicial,
            fecha_vencimiento=fecha_vencimiento,
            imagenes=request.FILES.getlist("imagenes"),
            ficha_tecnica=request.FILES.get("ficha_tecnica"),
        )
        producto = self.get_queryset().get(pk=producto.pk)
        return Response(ProductoSerializer(producto).data, status=status.HTTP_201_CREATED)

    def perform_destroy(self, instance):
        inventario_srv.eliminar_producto(usuario=self.request.user, producto=instance)

    @action(detail=True, methods=["post"], url_path="agregar-stock")
    def agregar_stock(self, request, pk=None):
        """
        Agrega un lote nuevo al producto.
        POST /api/productos/<id>/agregar-stock/
        """
        producto = self.get_object()
        serializer = AgregarStockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lote = inventario_srv.agregar_stock(
            usuario=request.user,
            producto=producto,
            **serializer.validated_data,
        )
        return Response(LoteProductoSerializer(lote).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="incrementar-lote")
    def incrementar_lote(self, request, pk=None):
        """
        Suma cantidad a un lote existente del producto.
        POST /api/productos/<id>/incrementar-lote/  {"lote": <id>, "cantidad": ...}
        """
        producto = self.get_object()
        serializer = IncrementarLoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        lote = get_object_or_404(LoteProducto, pk=serializer.validated_data["lote"], producto=producto)
        lote = inventario_srv.incrementar_lote(
            usuario=request.user,
            lote=lote,
            cantidad=serializer.validated_data["cantidad"],
        )
        return Response(LoteProductoSerializer(lote).data)

    @action(detail=True, methods=["get"], url_path="historial")
    def historial(self, request, pk=None):
        exigir_permiso(request.user, VER_HISTORIAL_INVENTARIO)
        producto = self.get_object()
        movimientos = inventario_srv.historial_producto(producto)
        return Response(MovimientoInventarioSerializer(movimientos, many=True).data)

    @action(detail=False, methods=["get"], url_path="por-vencer")
    def por_vencer(self, request):
        dias = _cursor(request, "dias")
        lotes = inventario_srv.obtener_lotes_por_vencer(dias=dias)
        data = [
            {
                **LoteProductoSerializer(lote).data,
                "producto": lote.producto_id,
                "producto_nombre": lote.producto.nombre,
            }
            for lote in lotes
        ]
        return Response(data)

    @action(detail=False, methods=["get"], url_path="vencidos")
    def vencidos(self, request):
        lotes = inventario_srv.obtener_lotes_vencidos()
        data = [
            {
                **LoteProductoSerializer(lote).data,
                "producto": lote.producto_id,
                "producto_nombre": lote.producto.nombre,
            }
            for lote in lotes
        ]
        return Response(data)


class PedidoViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    """
    Pedidos al almacén. Cada usuario ve los de su área; Gerencia, Almacén y
    Logística (y administradores) ven todos.
    """

    serializer_class = PedidoSerializer

    def get_queryset(self):
        qs = Pedido.objects.prefetch_related("items")
        if not autorizar(self.request.user, VER_HISTORIAL_PEDIDOS):
            qs = qs.filter(area_solicitante=self.request.user.area)
        estado = self.request.query_params.get("estado")
        if estado:
            qs = qs.filter(estado=estado)
        return qs

    def create(self, request, *args, **kwargs):
        serializer = PedidoCrearSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        datos = serializer.validated_data
        pedido = pedidos_srv.crear_pedido(
            usuario=request.user,
            items=[dict(item) for item in datos["items"]],
            centro_costo=datos["centro_costo"],
            cultivo=datos["cultivo"],
            observaciones=datos["observaciones"],
        )
        return Response(PedidoSerializer(pedido).data, status=status.HTTP_201_CREATED)

    def _pedido_para_revision(self, pk):
        # Quien revisa o despacha puede no pertenecer al área solicitante
        return get_object_or_404(Pedido, pk=pk)

    @action(detail=True, methods=["post"])
    def aprobar(self, request, pk=None):
        pedido = pedidos_srv.aprobar_pedido(pedido=self._pedido_para_revision(pk), usuario=request.user)
        return Response(PedidoSerializer(pedido).data)

    @action(detail=True, methods=["post"])
    def rechazar(self, request, pk=None):
        pedido = pedidos_srv.rechazar_pedido(pedido=self._pedido_para_revision(pk), usuario=request.user)
        return Response(PedidoSerializer(pedido).data)

    @action(detail=True, methods=["post"])
    def despachar(self, request, pk=None):
        pedido = pedidos_srv.despachar_pedido(pedido=self._pedido_para_revision(pk), usuario=request.user)
        return Response(PedidoSerializer(pedido).data)


class CombustibleViewSet(viewsets.ViewSet):
    """
    Tanques de combustible.
    GET  /api/combustible/             niveles actuales
    GET  /api/combustible/historial/   movimientos (roles de historial)
    POST /api/combustible/abastecer/
    POST /api/combustible/despachar/
    """

    def list(self, request):
        niveles = combustible_srv.obtener_niveles()
        return Response(NivelCombustibleSerializer(niveles, many=True).data)

    @action(detail=False, methods=["get"])
    def historial(self, request):
        exigir_permiso(request.user, VER_HISTORIAL_COMBUSTIBLE)
        tipo_combustible = request.query_params.get("tipo_combustible")
        if tipo_combustible and tipo_combustible not in TipoCombustible.values:
            raise ValidationError({"tipo_combustible": "Tipo de combustible desconocido."})
        movimientos = combustible_srv.historial_combustible(
            tipo_combustible=tipo_combustible,
            tipo=request.query_params.get("tipo"),
        )
        return Response(MovimientoCombustibleSerializer(movimientos, many=True).data)

    @action(detail=False, methods=["post"])
    def abastecer(self, request):
        serializer = AbastecimientoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        movimiento = combustible_srv.registrar_abastecimiento(
            usuario=request.user,
            **serializer.validated_data,
        )
        return Response(MovimientoCombustibleSerializer(movimiento).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"])
    def despachar(self, request):
        serializer = DespachoCombustibleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        movimiento = combustible_srv.despachar_combustible(
            usuario=request.user,
            **serializer.validated_data,
        )
        return Response(MovimientoCombustibleSerializer(movimiento).data, status=status.HTTP_201_CREATED)


class NotificacionViewSet(viewsets.GenericViewSet):
    """
    Consulta incremental de notificaciones: el cliente envía `desde` con el
    último id recibido y obtiene solo las nuevas.
    """

    serializer_class = NotificacionSerializer

    def get_queryset(self):
        return Notificacion.objects.filter(
            destino__in=notificaciones_srv.destinos_para(self.request.user)
        )

    def list(self, request):
        desde = _cursor(request)
        notificaciones = notificaciones_srv.notificaciones_para(request.user, desde=desde)
        return Response(
            {
                "resultados": NotificacionSerializer(notificaciones, many=True).data,
                "no_leidas": notificaciones_srv.contar_no_leidas(request.user),
            }
        )

    @action(detail=True, methods=["post"], url_path="leer")
    def leer(self, request, pk=None):
        notificacion = get_object_or_404(Notificacion, pk=pk)
        if not autorizar(request.user, VER_NOTIFICACION, notificacion):
            raise PermissionDenied("No tienes permisos para realizar esta acción.")
        notificaciones_srv.marcar_como_leida(notificacion)
        return Response(NotificacionSerializer(notificacion).data)

    @action(detail=False, methods=["post"], url_path="leer-todas")
    def leer_todas(self, request):
        actualizadas = notificaciones_srv.marcar_todas_como_leidas(request.user)
        return Response({"actualizadas": actualizadas})


class ChatViewSet(viewsets.ViewSet):
    """
    GET  /api/chat/<canal>/?desde=<id>   mensajes nuevos + usuarios en línea
    POST /api/chat/                      envía un mensaje
    """

    lookup_field = "canal"
    lookup_value_regex = "[^/]+"

    def retrieve(self, request, canal=None):
        exigir_permiso(request.user, USAR_CHAT)
        desde = _cursor(request)
        mensajes = chat_srv.mensajes_del_canal(canal, desde=desde)
        chat_srv.registrar_presencia(usuario=request.user, canal=canal)
        return Response(
            {
                "mensajes": MensajeChatSerializer(mensajes, many=True).data,
                "en_linea": chat_srv.usuarios_en_linea(canal),
            }
        )

    def create(self, request):
        serializer = EnviarMensajeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        mensaje = chat_srv.enviar_mensaje(usuario=request.user, **serializer.validated_data)
        return Response(MensajeChatSerializer(mensaje).data, status=status.HTTP_201_CREATED)
