from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin
from django.core.exceptions import PermissionDenied

from .admin_mixin import SoloAreaUsuarioMixin
from .models import (
    Comunicado,
    ConfiguracionEmpresa,
    EstadoPedido,
    EstadoUsuario,
    LoteProducto,
    MensajeChat,
    MovimientoCombustible,
    MovimientoInventario,
    NivelCombustible,
    Notificacion,
    Pedido,
    PedidoItem,
    Producto,
    PublicacionGaleria,
    ReporteSeguridad,
    Usuario,
    VehiculoRegistrado,
)
from .services.pedidos import PedidoError, aprobar_pedido, rechazar_pedido
from .services.usuarios import UsuarioError, aprobar_usuario


admin.site.site_header = "Administración Agro Norte Corp"
admin.site.site_title = "Agro Norte"


@admin.action(description="Aprobar cuentas pendientes")
def aprobar_cuentas(modeladmin, request, queryset):
    exitosos = 0
    for usuario in queryset.filter(estado=EstadoUsuario.PENDIENTE):
        try:
            aprobar_usuario(admin=request.user, usuario=usuario)
        except (UsuarioError, PermissionDenied) as exc:
            messages.error(request, f"{usuario.username}: {exc}")
            continue
        exitosos += 1
    if exitosos:
        messages.success(request, f"{exitosos} cuentas aprobadas.")


@admin.register(Usuario)
class UsuarioAdmin(UserAdmin):
    list_display = ("username", "email", "first_name", "last_name", "area", "rol", "estado")
    list_filter = ("estado", "rol", "area", "is_staff")
    search_fields = ("username", "email", "first_name", "last_name")
    actions = [aprobar_cuentas]
    fieldsets = UserAdmin.fieldsets + (
        ("Portal", {
            "fields": (
                "rol",
                "area",
                "estado",
                "telefono_whatsapp",
                "avatar_url",
                "firma_url",
            )
        }),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ("Portal", {"fields": ("email", "rol", "area", "estado")}),
    )


class LoteProductoInline(admin.TabularInline):
    model = LoteProducto
    extra = 0
    fields = ("codigo", "cantidad", "fecha_vencimiento")


@admin.register(Producto)
class ProductoAdmin(SoloAreaUsuarioMixin):
    list_display = ("sku", "nombre", "categoria", "area", "unidad", "stock_total", "estado_stock")
    list_filter = ("categoria", "area", "cultivo", "unidad")
    search_fields = ("sku", "nombre", "descripcion")
    readonly_fields = ("created_at", "updated_at")
    inlines = [LoteProductoInline]

    def stock_total(self, obj):
        return obj.stock_total

    def estado_stock(self, obj):
        return obj.estado_stock


@admin.register(LoteProducto)
class LoteProductoAdmin(admin.ModelAdmin):
    list_display = ("producto", "codigo", "cantidad", "fecha_vencimiento")
    list_filter = ("fecha_vencimiento",)
    search_fields = ("producto__sku", "producto__nombre", "codigo")
    autocomplete_fields = ("producto",)


@admin.register(MovimientoInventario)
class MovimientoInventarioAdmin(admin.ModelAdmin):
    list_display = (
        "tipo",
        "sku",
        "nombre_producto",
        "codigo_lote",
        "cantidad",
        "unidad",
        "area_solicitante",
        "fecha_movimiento",
        "usuario",
    )
    list_filter = ("tipo", "area_solicitante", "fecha_movimiento")
    search_fields = ("sku", "nombre_producto", "codigo_lote", "pedido__codigo")
    readonly_fields = ("created_at", "updated_at")

    def has_change_permission(self, request, obj=None):
        return False


class PedidoItemInline(admin.TabularInline):
    model = PedidoItem
    extra = 0
    readonly_fields = ("producto", "sku", "nombre", "unidad", "cantidad", "area_destino", "descripcion_uso")
    can_delete = False


@admin.action(description="Aprobar pedidos pendientes")
def aprobar_pedidos(modeladmin, request, queryset):
    _revisar_pedidos(request, queryset, aprobar_pedido, "aprobados")


@admin.action(description="Rechazar pedidos pendientes")
def rechazar_pedidos(modeladmin, request, queryset):
    _revisar_pedidos(request, queryset, rechazar_pedido, "rechazados")


def _revisar_pedidos(request, queryset, funcion, verbo):
    exitosos = 0
    saltados = 0
    for pedido in queryset:
        if pedido.estado != EstadoPedido.PENDIENTE:
            saltados += 1
            continue
        try:
            funcion(pedido=pedido, usuario=request.user)
        except PermissionDenied:
            messages.error(request, "No tiene permiso para revisar pedidos.")
            return
        except PedidoError as exc:
            messages.error(request, str(exc))
            continue
        exitosos += 1

    if exitosos:
        messages.success(request, f"{exitosos} pedidos {verbo} correctamente.")
    if saltados:
        messages.warning(request, f"{saltados} pedidos omitidos (no estaban pendientes).")


@admin.register(Pedido)
class PedidoAdmin(SoloAreaUsuarioMixin):
    campo_area = "area_solicitante"
    list_display = ("codigo", "fecha", "estado", "area_solicitante", "nombre_solicitante", "centro_costo")
    list_filter = ("estado", "area_solicitante", "cultivo")
    search_fields = ("codigo", "nombre_solicitante", "observaciones")
    readonly_fields = (
        "codigo",
        "estado",
        "aprobado_por",
        "revisado_en",
        "despachado_por",
        "despachado_en",
        "created_at",
        "updated_at",
    )
    inlines = [PedidoItemInline]
    actions = [aprobar_pedidos, rechazar_pedidos]


@admin.register(NivelCombustible)
class NivelCombustibleAdmin(admin.ModelAdmin):
    list_display = ("tipo_combustible", "nivel", "capacidad", "porcentaje")
    readonly_fields = ("nivel",)

    def porcentaje(self, obj):
        return obj.porcentaje


@admin.register(MovimientoCombustible)
class MovimientoCombustibleAdmin(admin.ModelAdmin):
    list_display = ("fecha", "tipo", "tipo_combustible", "cantidad", "area", "conductor", "tipo_vehiculo", "turno")
    list_filter = ("tipo", "tipo_combustible", "area", "turno")
    search_fields = ("conductor",)

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Notificacion)
class NotificacionAdmin(admin.ModelAdmin):
    list_display = ("destino", "titulo", "leida", "creada_en")
    list_filter = ("destino", "leida")
    search_fields = ("titulo", "descripcion")


@admin.register(ReporteSeguridad)
class ReporteSeguridadAdmin(admin.ModelAdmin):
    list_display = ("codigo", "fecha", "tipo", "titulo", "estado", "nombre_autor")
    list_filter = ("tipo", "estado")
    search_fields = ("codigo", "titulo", "descripcion")
    readonly_fields = ("codigo", "created_at", "updated_at")


@admin.register(VehiculoRegistrado)
class VehiculoRegistradoAdmin(admin.ModelAdmin):
    list_display = ("nombre_empleado", "area_empleado", "tipo_vehiculo", "modelo_vehiculo", "placa")
    search_fields = ("nombre_empleado", "placa")


@admin.register(PublicacionGaleria)
class PublicacionGaleriaAdmin(SoloAreaUsuarioMixin):
    campo_area = "area_autor"
    list_display = ("titulo", "nombre_autor", "area_autor", "estado", "fecha")
    list_filter = ("estado", "area_autor")
    search_fields = ("titulo", "descripcion")


@admin.register(Comunicado)
class ComunicadoAdmin(admin.ModelAdmin):
    list_display = ("titulo", "nombre_autor", "fecha")
    search_fields = ("titulo", "descripcion")


@admin.register(MensajeChat)
class MensajeChatAdmin(admin.ModelAdmin):
    list_display = ("canal", "nombre_remitente", "enviado_en")
    list_filter = ("canal",)
    search_fields = ("contenido", "nombre_remitente")


@admin.register(ConfiguracionEmpresa)
class ConfiguracionEmpresaAdmin(admin.ModelAdmin):
    list_display = ("__str__", "whatsapp_soporte", "actualizado_en")

    def has_add_permission(self, request):
        return not ConfiguracionEmpresa.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
