from decimal import Decimal

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Sum
from django.utils import timezone

from portal.utils import estado_stock


class TimeStampedModel(models.Model):
    """
    Modelo base abstracto con timestamps estándar.
    """
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Area(models.TextChoices):
    GERENCIA = "Gerencia", "Gerencia"
    LOGISTICA = "Logística", "Logística"
    RRHH = "RR.HH", "RR.HH"
    SEGURIDAD_PATRIMONIAL = "Seguridad Patrimonial", "Seguridad Patrimonial"
    ALMACEN = "Almacén", "Almacén"
    TALLER = "Taller", "Taller"
    PRODUCCION = "Producción", "Producción"
    SANIDAD = "Sanidad", "Sanidad"
    SSGG = "SS.GG", "SS.GG"
    ADMINISTRADOR = "Administrador", "Administrador"


# Destinatario de notificaciones dirigidas a todas las áreas
DESTINO_TODOS = "Todos"

CANAL_GENERAL = "general"


def canales_chat() -> list[str]:
    """Canal general + un canal por área."""
    return [CANAL_GENERAL] + [area.value for area in Area]


class Rol(models.TextChoices):
    ADMINISTRADOR = "Administrador", "Administrador"
    USUARIO = "Usuario", "Usuario"


class EstadoUsuario(models.TextChoices):
    PENDIENTE = "pendiente", "Pendiente de aprobación"
    ACTIVO = "activo", "Activo"


class Usuario(AbstractUser):
    """
    Cuenta del portal. El rol y el área determinan qué acciones puede
    ejecutar (ver portal.utils_roles).
    """
    email = models.EmailField(unique=True)
    rol = models.CharField(
        max_length=20,
        choices=Rol.choices,
        default=Rol.USUARIO,
    )
    area = models.CharField(
        max_length=30,
        choices=Area.choices,
        default=Area.PRODUCCION,
    )
    estado = models.CharField(
        max_length=20,
        choices=EstadoUsuario.choices,
        default=EstadoUsuario.PENDIENTE,
        help_text="Las cuentas pendientes no pueden iniciar sesión.",
    )
    telefono_whatsapp = models.CharField(max_length=30, blank=True)
    avatar_url = models.CharField(max_length=500, blank=True)
    firma_url = models.CharField(max_length=500, blank=True)

    REQUIRED_FIELDS = ["email"]

    class Meta:
        verbose_name = "Usuario"
        verbose_name_plural = "Usuarios"
        ordering = ["first_name", "last_name", "username"]

    def __str__(self):
        return self.nombre_completo or self.username

    @property
    def nombre_completo(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def es_administrador(self) -> bool:
        return self.is_superuser or self.rol == Rol.ADMINISTRADOR

    @property
    def esta_activo(self) -> bool:
        return self.is_active and self.estado == EstadoUsuario.ACTIVO


class CategoriaProducto(models.TextChoices):
    HERRAMIENTAS = "Herramientas", "Herramientas"
    REPUESTOS = "Repuestos", "Repuestos"
    FERTILIZANTES = "Fertilizantes", "Fertilizantes"
    AGROQUIMICOS = "Agroquímicos", "Agroquímicos"
    VARIOS = "Varios", "Varios"
    IMPLEMENTOS_RIEGO = "Implementos de Riego", "Implementos de Riego"
    IMPLEMENTOS_SST = "Implementos de SST", "Implementos de SST"


class UnidadProducto(models.TextChoices):
    UNIDAD = "Unidad", "Unidad"
    KG = "Kg", "Kg"
    LITROS = "Litros", "Litros"
    METROS = "Metros", "Metros"


class Cultivo(models.TextChoices):
    UVA = "Uva", "Uva"
    PALTO = "Palto", "Palto"


class Producto(TimeStampedModel):
    """
    Producto del almacén identificado por su SKU. El stock vive en sus
    lotes (LoteProducto); el estado de stock se calcula al leer.
    """
    sku = models.CharField(max_length=64, unique=True)
    nombre = models.CharField(max_length=255)
    descripcion = models.TextField(blank=True)
    categoria = models.CharField(max_length=50, choices=CategoriaProducto.choices)
    area = models.CharField(
        max_length=30,
        choices=Area.choices,
        help_text="Área responsable del producto.",
    )
    cultivo = models.CharField(max_length=20, choices=Cultivo.choices, blank=True)
    ubicacion = models.CharField(max_length=255, blank=True)
    unidad = models.CharField(max_length=20, choices=UnidadProducto.choices)
    imagenes = models.JSONField(default=list, blank=True)
    ficha_tecnica_url = models.CharField(max_length=500, blank=True)

    class Meta:
        verbose_name = "Producto"
        verbose_name_plural = "Productos"
        ordering = ["nombre"]

    def __str__(self):
        return f"{self.sku} - {self.nombre}"

    @property
    def stock_total(self) -> Decimal:
        """
        Suma del stock de todos los lotes. Si la consulta ya viene anotada
        con `total_stock` se usa ese valor.
        """
        anotado = getattr(self, "total_stock", None)
        if anotado is not None:
            return anotado
        total = self.lotes.aggregate(total=Sum("cantidad"))["total"]
        return total or Decimal("0")

    @property
    def estado_stock(self) -> str:
        return estado_stock(self.stock_total)


class LoteProducto(TimeStampedModel):
    """
    Lote de un producto: una entrada de stock con su propia cantidad y
    fecha de vencimiento opcional.
    """
    producto = models.ForeignKey(
        Producto,
        on_delete=models.CASCADE,
        related_name="lotes",
    )
    codigo = models.CharField(
        max_length=100,
        help_text="Identificador del lote, único dentro del producto.",
    )
    cantidad = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=0,
    )
    fecha_vencimiento = models.DateField(null=True, blank=True)

    class Meta:
        verbose_name = "Lote de producto"
        verbose_name_plural = "Lotes de productos"
        ordering = ["fecha_vencimiento", "codigo"]
        unique_together = ("producto", "codigo")

    def __str__(self):
        base = f"{self.producto.sku} [Lote {self.codigo}]"
        if self.fecha_vencimiento:
            base += f" vence {self.fecha_vencimiento}"
        return base

    @property
    def esta_vencido(self) -> bool:
        if not self.fecha_vencimiento:
            return False
        return self.fecha_vencimiento < timezone.localdate()

    def por_vencer_en(self, dias: int = 30) -> bool:
        """
        True si el lote vence dentro de los próximos `dias` días (incluyendo hoy).
        """
        if not self.fecha_vencimiento:
            return False
        hoy = timezone.localdate()
        limite = hoy.fromordinal(hoy.toordinal() + dias)
        return hoy <= self.fecha_vencimiento <= limite


class MovimientoInventario(TimeStampedModel):
    """
    Historial de entradas y salidas de inventario. Guarda una copia del
    nombre y SKU del producto para sobrevivir a su eliminación.
    """

    TIPO_ENTRADA = "Entrada"
    TIPO_SALIDA = "Salida"

    TIPO_CHOICES = [
        (TIPO_ENTRADA, "Entrada"),
        (TIPO_SALIDA, "Salida"),
    ]

    producto = models.ForeignKey(
        Producto,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="movimientos",
    )
    sku = models.CharField(max_length=64)
    nombre_producto = models.CharField(max_length=255)
    codigo_lote = models.CharField(max_length=100, blank=True)
    tipo = models.CharField(max_length=10, choices=TIPO_CHOICES)
    cantidad = models.DecimalField(max_digits=14, decimal_places=2)
    unidad = models.CharField(max_length=20, choices=UnidadProducto.choices)
    area_solicitante = models.CharField(max_length=30, choices=Area.choices)
    usuario = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="movimientos_inventario",
    )
    pedido = models.ForeignKey(
        "Pedido",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="movimientos",
    )
    fecha_movimiento = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = "Movimiento de inventario"
        verbose_name_plural = "Movimientos de inventario"
        ordering = ["-fecha_movimiento", "-id"]

    def __str__(self):
        return f"{self.tipo} - {self.nombre_producto} ({self.cantidad})"


class EstadoPedido(models.TextChoices):
    PENDIENTE = "Pendiente", "Pendiente"
    APROBADO = "Aprobado", "Aprobado"
    RECHAZADO = "Rechazado", "Rechazado"
    DESPACHADO = "Despachado", "Despachado"


class Pedido(TimeStampedModel):
    """
    Solicitud de productos al almacén. Flujo:
    Pendiente -> Aprobado -> Despachado, o Pendiente -> Rechazado.
    """
    codigo = models.CharField(max_length=20, unique=True)
    fecha = models.DateTimeField(default=timezone.now)
    estado = models.CharField(
        max_length=20,
        choices=EstadoPedido.choices,
        default=EstadoPedido.PENDIENTE,
    )
    area_solicitante = models.CharField(max_length=30, choices=Area.choices)
    usuario_solicitante = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="pedidos",
    )
    nombre_solicitante = models.CharField(max_length=255)
    firma_solicitante_url = models.CharField(max_length=500, blank=True)
    centro_costo = models.CharField(max_length=50, blank=True)
    cultivo = models.CharField(max_length=20, choices=Cultivo.choices, blank=True)
    observaciones = models.TextField(blank=True)

    aprobado_por = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="pedidos_revisados",
    )
    revisado_en = models.DateTimeField(null=True, blank=True)
    despachado_por = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="pedidos_despachados",
    )
    despachado_en = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = "Pedido"
        verbose_name_plural = "Pedidos"
        ordering = ["-fecha", "-id"]

    def __str__(self):
        return f"{self.codigo} - {self.area_solicitante} ({self.estado})"

    @property
    def puede_revisarse(self) -> bool:
        return self.estado == EstadoPedido.PENDIENTE

    @property
    def puede_despacharse(self) -> bool:
        return self.estado == EstadoPedido.APROBADO


class PedidoItem(models.Model):
    pedido = models.ForeignKey(
        Pedido,
        on_delete=models.CASCADE,
        related_name="items",
    )
    producto = models.ForeignKey(
        Producto,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="items_pedido",
    )
    sku = models.CharField(max_length=64)
    nombre = models.CharField(max_length=255)
    unidad = models.CharField(max_length=20, choices=UnidadProducto.choices)
    cantidad = models.DecimalField(max_digits=14, decimal_places=2)
    area_destino = models.CharField(max_length=30, choices=Area.choices, blank=True)
    descripcion_uso = models.TextField(blank=True)

    class Meta:
        verbose_name = "Ítem de pedido"
        verbose_name_plural = "Ítems de pedido"
        ordering = ["id"]

    def __str__(self):
        return f"{self.cantidad} {self.unidad} de {self.nombre}"


class TipoCombustible(models.TextChoices):
    GASOLINA = "Gasolina", "Gasolina"
    PETROLEO = "Petróleo", "Petróleo"


class TipoVehiculo(models.TextChoices):
    TRACTOR = "Tractor", "Tractor"
    CAMION = "Camión", "Camión"
    CAMIONETA = "Camioneta", "Camioneta"
    MOTO_LINEAL = "Moto Lineal", "Moto Lineal"


class Turno(models.TextChoices):
    DIA = "Día", "Día"
    NOCHE = "Noche", "Noche"


class NivelCombustible(TimeStampedModel):
    """
    Nivel actual del tanque por tipo de combustible. Debe coincidir con la
    suma con signo de MovimientoCombustible para ese tipo.
    """
    tipo_combustible = models.CharField(
        max_length=20,
        choices=TipoCombustible.choices,
        unique=True,
    )
    nivel = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    capacidad = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        help_text="Capacidad nominal del tanque, solo para mostrar el porcentaje.",
    )

    class Meta:
        verbose_name = "Nivel de combustible"
        verbose_name_plural = "Niveles de combustible"
        ordering = ["tipo_combustible"]

    def __str__(self):
        return f"{self.tipo_combustible}: {self.nivel}"

    @property
    def porcentaje(self) -> Decimal | None:
        if not self.capacidad or self.capacidad <= 0:
            return None
        valor = (self.nivel / self.capacidad) * Decimal("100")
        return min(valor, Decimal("100")).quantize(Decimal("0.1"))


class MovimientoCombustible(TimeStampedModel):
    """
    Registro append-only del tanque de combustible.
    """

    TIPO_ABASTECIMIENTO = "Abastecimiento"
    TIPO_CONSUMO = "Consumo"

    TIPO_CHOICES = [
        (TIPO_ABASTECIMIENTO, "Abastecimiento"),
        (TIPO_CONSUMO, "Consumo"),
    ]

    tipo = models.CharField(max_length=20, choices=TIPO_CHOICES)
    tipo_combustible = models.CharField(max_length=20, choices=TipoCombustible.choices)
    cantidad = models.DecimalField(max_digits=12, decimal_places=2)
    area = models.CharField(max_length=30, choices=Area.choices, blank=True)
    conductor = models.CharField(max_length=255, blank=True)
    tipo_vehiculo = models.CharField(max_length=20, choices=TipoVehiculo.choices, blank=True)
    turno = models.CharField(max_length=10, choices=Turno.choices, blank=True)
    horometro = models.DecimalField(max_digits=12, decimal_places=1, null=True, blank=True)
    kilometraje = models.DecimalField(max_digits=12, decimal_places=1, null=True, blank=True)
    registrado_por = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="movimientos_combustible",
    )
    fecha = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = "Movimiento de combustible"
        verbose_name_plural = "Movimientos de combustible"
        ordering = ["-fecha", "-id"]

    def __str__(self):
        return f"{self.tipo} {self.tipo_combustible} ({self.cantidad})"

    @property
    def cantidad_con_signo(self) -> Decimal:
        if self.tipo == self.TIPO_CONSUMO:
            return -self.cantidad
        return self.cantidad


class Notificacion(models.Model):
    """
    Aviso dirigido a un área (o a todas con DESTINO_TODOS). Solo se
    modifica el indicador de lectura.
    """
    destino = models.CharField(max_length=30, db_index=True)
    titulo = models.CharField(max_length=255)
    descripcion = models.TextField()
    enlace = models.CharField(max_length=255, blank=True)
    leida = models.BooleanField(default=False)
    creada_en = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Notificación"
        verbose_name_plural = "Notificaciones"
        ordering = ["-creada_en", "-id"]

    def __str__(self):
        return f"[{self.destino}] {self.titulo}"


class TipoReporte(models.TextChoices):
    INCIDENTE = "Incidente", "Incidente"
    NOVEDAD = "Novedad", "Novedad"
    SOLICITUD_PERMISO = "Solicitud de Permiso", "Solicitud de Permiso"
    INGRESO_PROVEEDOR = "Ingreso de Proveedor", "Ingreso de Proveedor"
    INGRESO_VEHICULO = "Ingreso Vehículo Trabajador", "Ingreso Vehículo Trabajador"


class EstadoReporte(models.TextChoices):
    ABIERTO = "Abierto", "Abierto"
    CERRADO = "Cerrado", "Cerrado"
    PENDIENTE = "Aprobación Pendiente", "Aprobación Pendiente"
    APROBADO = "Aprobado", "Aprobado"
    RECHAZADO = "Rechazado", "Rechazado"


class ReporteSeguridad(TimeStampedModel):
    """
    Bitácora de seguridad patrimonial. Las solicitudes de permiso pasan por
    aprobación; el resto son registros abiertos/cerrados.
    """
    codigo = models.CharField(max_length=20, unique=True)
    fecha = models.DateTimeField(default=timezone.now)
    tipo = models.CharField(max_length=40, choices=TipoReporte.choices)
    titulo = models.CharField(max_length=255)
    descripcion = models.TextField()
    autor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reportes_seguridad",
    )
    nombre_autor = models.CharField(max_length=255)
    fotos = models.JSONField(default=list, blank=True)
    estado = models.CharField(max_length=30, choices=EstadoReporte.choices)
    area_destino = models.CharField(max_length=30, choices=Area.choices, blank=True)
    detalles = models.TextField(blank=True)

    class Meta:
        verbose_name = "Reporte de seguridad"
        verbose_name_plural = "Reportes de seguridad"
        ordering = ["-fecha", "-id"]

    def __str__(self):
        return f"{self.codigo} - {self.titulo} ({self.estado})"

    @property
    def es_solicitud(self) -> bool:
        return self.tipo == TipoReporte.SOLICITUD_PERMISO


class VehiculoRegistrado(TimeStampedModel):
    nombre_empleado = models.CharField(max_length=255, unique=True)
    area_empleado = models.CharField(max_length=30, choices=Area.choices)
    tipo_vehiculo = models.CharField(max_length=50)
    modelo_vehiculo = models.CharField(max_length=100)
    placa = models.CharField(max_length=20)

    class Meta:
        verbose_name = "Vehículo registrado"
        verbose_name_plural = "Vehículos registrados"
        ordering = ["nombre_empleado"]

    def __str__(self):
        return f"{self.placa} - {self.nombre_empleado}"


class EstadoPublicacion(models.TextChoices):
    PENDIENTE = "Pendiente", "Pendiente"
    APROBADO = "Aprobado", "Aprobado"
    RECHAZADO = "Rechazado", "Rechazado"


class PublicacionGaleria(TimeStampedModel):
    """Logro publicado por un área; visible para todos una vez aprobado."""
    titulo = models.CharField(max_length=255)
    descripcion = models.TextField()
    imagenes = models.JSONField(default=list, blank=True)
    autor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="publicaciones",
    )
    nombre_autor = models.CharField(max_length=255)
    area_autor = models.CharField(max_length=30, choices=Area.choices)
    estado = models.CharField(
        max_length=20,
        choices=EstadoPublicacion.choices,
        default=EstadoPublicacion.PENDIENTE,
    )
    fecha = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = "Publicación de galería"
        verbose_name_plural = "Publicaciones de galería"
        ordering = ["-fecha", "-id"]

    def __str__(self):
        return self.titulo


class Comunicado(TimeStampedModel):
    titulo = models.CharField(max_length=255)
    descripcion = models.TextField()
    imagenes = models.JSONField(default=list, blank=True)
    autor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="comunicados",
    )
    nombre_autor = models.CharField(max_length=255)
    fecha = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = "Comunicado"
        verbose_name_plural = "Comunicados"
        ordering = ["-fecha", "-id"]

    def __str__(self):
        return self.titulo


class MensajeChat(models.Model):
    canal = models.CharField(max_length=30, db_index=True)
    remitente = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="mensajes_chat",
    )
    nombre_remitente = models.CharField(max_length=255)
    contenido = models.TextField()
    enviado_en = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Mensaje de chat"
        verbose_name_plural = "Mensajes de chat"
        ordering = ["enviado_en", "id"]

    def __str__(self):
        return f"#{self.canal} {self.nombre_remitente}: {self.contenido[:40]}"


class ConfiguracionEmpresa(models.Model):
    """
    Configuración visual de la empresa. Existe una única fila (pk=1).
    """
    logo_url = models.CharField(max_length=500, blank=True)
    fondo_login_url = models.CharField(max_length=500, blank=True)
    whatsapp_soporte = models.CharField(max_length=30, blank=True)
    actualizado_en = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Configuración de empresa"
        verbose_name_plural = "Configuración de empresa"

    def __str__(self):
        return "Configuración de Agro Norte Corp"

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def cargar(cls) -> "ConfiguracionEmpresa":
        obj, _created = cls.objects.get_or_create(pk=1)
        return obj
