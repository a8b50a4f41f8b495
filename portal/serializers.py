from rest_framework import serializers

from .models import (
    Area,
    Cultivo,
    LoteProducto,
    MensajeChat,
    MovimientoCombustible,
    MovimientoInventario,
    NivelCombustible,
    Notificacion,
    Pedido,
    PedidoItem,
    Producto,
    TipoCombustible,
    TipoVehiculo,
    Turno,
)


class LoteProductoSerializer(serializers.ModelSerializer):
    esta_vencido = serializers.BooleanField(read_only=True)

    class Meta:
        model = LoteProducto
        fields = [
            "id",
            "codigo",
            "cantidad",
            "fecha_vencimiento",
            "esta_vencido",
        ]
        read_only_fields = fields


class ProductoSerializer(serializers.ModelSerializer):
    """
    Lectura de productos con sus lotes. `stock_total` y `estado_stock` se
    calculan al leer.
    """

    lotes = LoteProductoSerializer(many=True, read_only=True)
    stock_total = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    estado_stock = serializers.CharField(read_only=True)

    class Meta:
        model = Producto
        fields = [
            "id",
            "sku",
            "nombre",
            "descripcion",
            "categoria",
            "area",
            "cultivo",
            "ubicacion",
            "unidad",
            "imagenes",
            "ficha_tecnica_url",
            "stock_total",
            "estado_stock",
            "lotes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "imagenes", "ficha_tecnica_url", "created_at", "updated_at"]


class ProductoCrearSerializer(serializers.ModelSerializer):
    """
    Alta de producto con su lote inicial.
    """

    codigo_lote = serializers.CharField(max_length=100)
    cantidad_inicial = serializers.DecimalField(max_digits=14, decimal_places=2)
    fecha_vencimiento = serializers.DateField(required=False, allow_null=True)

    class Meta:
        model = Producto
        fields = [
            "sku",
            "nombre",
            "descripcion",
            "categoria",
            "area",
            "cultivo",
            "ubicacion",
            "unidad",
            "codigo_lote",
            "cantidad_inicial",
            "fecha_vencimiento",
        ]
        # La unicidad del SKU la valida el servicio (sin distinguir mayúsculas)
        extra_kwargs = {"sku": {"validators": []}}

    def validate_cantidad_inicial(self, value):
        if value < 0:
            raise serializers.ValidationError("El stock inicial no puede ser negativo.")
        return value


class AgregarStockSerializer(serializers.Serializer):
    codigo_lote = serializers.CharField(max_length=100)
    cantidad = serializers.DecimalField(max_digits=14, decimal_places=2)
    fecha_vencimiento = serializers.DateField(required=False, allow_null=True)

    def validate_cantidad(self, value):
        if value <= 0:
            raise serializers.ValidationError("La cantidad debe ser mayor a cero.")
        return value


class IncrementarLoteSerializer(serializers.Serializer):
    lote = serializers.IntegerField()
    cantidad = serializers.DecimalField(max_digits=14, decimal_places=2)

    def validate_cantidad(self, value):
        if value <= 0:
            raise serializers.ValidationError("La cantidad debe ser mayor a cero.")
        return value


class MovimientoInventarioSerializer(serializers.ModelSerializer):
    usuario_nombre = serializers.SerializerMethodField()
    pedido_codigo = serializers.CharField(source="pedido.codigo", read_only=True, default=None)

    class Meta:
        model = MovimientoInventario
        fields = [
            "id",
            "producto",
            "sku",
            "nombre_producto",
            "codigo_lote",
            "tipo",
            "cantidad",
            "unidad",
            "area_solicitante",
            "usuario",
            "usuario_nombre",
            "pedido",
            "pedido_codigo",
            "fecha_movimiento",
        ]
        read_only_fields = fields

    def get_usuario_nombre(self, obj):
        if obj.usuario is None:
            return None
        return obj.usuario.nombre_completo or obj.usuario.username


class PedidoItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = PedidoItem
        fields = [
            "id",
            "producto",
            "sku",
            "nombre",
            "unidad",
            "cantidad",
            "area_destino",
            "descripcion_uso",
        ]
        read_only_fields = fields


class PedidoSerializer(serializers.ModelSerializer):
    items = PedidoItemSerializer(many=True, read_only=True)

    class Meta:
        model = Pedido
        fields = [
            "id",
            "codigo",
            "fecha",
            "estado",
            "area_solicitante",
            "usuario_solicitante",
            "nombre_solicitante",
            "centro_costo",
            "cultivo",
            "observaciones",
            "aprobado_por",
            "revisado_en",
            "despachado_por",
            "despachado_en",
            "items",
        ]
        read_only_fields = fields


class PedidoItemCrearSerializer(serializers.Serializer):
    producto = serializers.PrimaryKeyRelatedField(queryset=Producto.objects.all())
    cantidad = serializers.DecimalField(max_digits=14, decimal_places=2)
    area_destino = serializers.ChoiceField(choices=Area.choices, required=False, allow_blank=True)
    descripcion_uso = serializers.CharField(required=False, allow_blank=True)

    def validate_cantidad(self, value):
        if value <= 0:
            raise serializers.ValidationError("La cantidad debe ser mayor a cero.")
        return value


class PedidoCrearSerializer(serializers.Serializer):
    items = PedidoItemCrearSerializer(many=True)
    centro_costo = serializers.CharField(max_length=50, required=False, allow_blank=True, default="")
    cultivo = serializers.ChoiceField(choices=Cultivo.choices, required=False, allow_blank=True, default="")
    observaciones = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("El pedido debe tener al menos un producto.")
        return value


class NivelCombustibleSerializer(serializers.ModelSerializer):
    porcentaje = serializers.DecimalField(max_digits=5, decimal_places=1, read_only=True)

    class Meta:
        model = NivelCombustible
        fields = ["tipo_combustible", "nivel", "capacidad", "porcentaje"]
        read_only_fields = fields


class MovimientoCombustibleSerializer(serializers.ModelSerializer):
    class Meta:
        model = MovimientoCombustible
        fields = [
            "id",
            "tipo",
            "tipo_combustible",
            "cantidad",
            "area",
            "conductor",
            "tipo_vehiculo",
            "turno",
            "horometro",
            "kilometraje",
            "registrado_por",
            "fecha",
        ]
        read_only_fields = fields


class AbastecimientoSerializer(serializers.Serializer):
    tipo_combustible = serializers.ChoiceField(choices=TipoCombustible.choices)
    cantidad = serializers.DecimalField(max_digits=12, decimal_places=2)

    def validate_cantidad(self, value):
        if value <= 0:
            raise serializers.ValidationError("La cantidad debe ser mayor a cero.")
        return value


class DespachoCombustibleSerializer(AbastecimientoSerializer):
    area = serializers.ChoiceField(choices=Area.choices)
    conductor = serializers.CharField(max_length=255)
    tipo_vehiculo = serializers.ChoiceField(choices=TipoVehiculo.choices, required=False, allow_blank=True, default="")
    turno = serializers.ChoiceField(choices=Turno.choices, required=False, allow_blank=True, default="")
    horometro = serializers.DecimalField(max_digits=12, decimal_places=1, required=False, allow_null=True)
    kilometraje = serializers.DecimalField(max_digits=12, decimal_places=1, required=False, allow_null=True)


class NotificacionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notificacion
        fields = ["id", "destino", "titulo", "descripcion", "enlace", "leida", "creada_en"]
        read_only_fields = fields


class MensajeChatSerializer(serializers.ModelSerializer):
    class Meta:
        model = MensajeChat
        fields = ["id", "canal", "remitente", "nombre_remitente", "contenido", "enviado_en"]
        read_only_fields = fields


class EnviarMensajeSerializer(serializers.Serializer):
    canal = serializers.CharField(max_length=30)
    contenido = serializers.CharField(allow_blank=True, trim_whitespace=False)
