from django.contrib.auth import views as auth_views
from django.urls import path

from web.views import (
    HistorialInventarioView,
    PortalLoginView,
    ProductoListView,
    api_buscar_vehiculo,
    api_chat_enviar,
    api_chat_mensajes,
    api_notificaciones,
    chat,
    combustible_abastecer,
    combustible_comprobante,
    combustible_despachar,
    combustible_panel,
    comunicados,
    configuracion,
    galeria,
    ingreso_vehiculo,
    lote_incrementar,
    notificacion_leer,
    notificaciones_leer_todas,
    notificaciones_list,
    pedido_aprobar,
    pedido_comprobante,
    pedido_create,
    pedido_despachar,
    pedido_detail,
    pedido_rechazar,
    pedidos_list,
    perfil,
    producto_agregar_stock,
    producto_create,
    producto_detail,
    producto_eliminar,
    publicacion_aprobar,
    publicacion_rechazar,
    registro,
    reporte_aprobar,
    reporte_cerrar,
    reporte_create,
    reporte_detail,
    reporte_rechazar,
    reportes_list,
    reseteo_password,
    tablero,
    usuario_aprobar,
    usuario_create,
    usuario_eliminar,
    usuario_update,
    usuarios_list,
)

app_name = "web"

urlpatterns = [
    path("", tablero, name="tablero"),

    # Cuentas
    path("login/", PortalLoginView.as_view(), name="login"),
    path("logout/", auth_views.LogoutView.as_view(), name="logout"),
    path("registro/", registro, name="registro"),
    path("reseteo/", reseteo_password, name="reseteo_password"),
    path("perfil/", perfil, name="perfil"),

    # Inventario
    path("productos/", ProductoListView.as_view(), name="productos_list"),
    path("productos/nuevo/", producto_create, name="productos_create"),
    path("productos/<int:pk>/", producto_detail, name="productos_detail"),
    path("productos/<int:pk>/stock/", producto_agregar_stock, name="productos_agregar_stock"),
    path("productos/<int:pk>/eliminar/", producto_eliminar, name="productos_eliminar"),
    path("lotes/<int:pk>/incrementar/", lote_incrementar, name="lotes_incrementar"),
    path("inventario/historial/", HistorialInventarioView.as_view(), name="inventario_historial"),

    # Pedidos
    path("pedidos/", pedidos_list, name="pedidos_list"),
    path("pedidos/nuevo/", pedido_create, name="pedidos_create"),
    path("pedidos/<int:pk>/", pedido_detail, name="pedidos_detail"),
    path("pedidos/<int:pk>/aprobar/", pedido_aprobar, name="pedidos_aprobar"),
    path("pedidos/<int:pk>/rechazar/", pedido_rechazar, name="pedidos_rechazar"),
    path("pedidos/<int:pk>/despachar/", pedido_despachar, name="pedidos_despachar"),
    path("pedidos/<int:pk>/comprobante/", pedido_comprobante, name="pedidos_comprobante"),

    # Combustible
    path("combustible/", combustible_panel, name="combustible"),
    path("combustible/abastecer/", combustible_abastecer, name="combustible_abastecer"),
    path("combustible/despachar/", combustible_despachar, name="combustible_despachar"),
    path("combustible/<int:pk>/comprobante/", combustible_comprobante, name="combustible_comprobante"),

    # Seguridad patrimonial
    path("seguridad/", reportes_list, name="seguridad_list"),
    path("seguridad/nuevo/", reporte_create, name="seguridad_create"),
    path("seguridad/vehiculos/", ingreso_vehiculo, name="seguridad_vehiculo"),
    path("seguridad/<int:pk>/", reporte_detail, name="seguridad_detail"),
    path("seguridad/<int:pk>/aprobar/", reporte_aprobar, name="seguridad_aprobar"),
    path("seguridad/<int:pk>/rechazar/", reporte_rechazar, name="seguridad_rechazar"),
    path("seguridad/<int:pk>/cerrar/", reporte_cerrar, name="seguridad_cerrar"),
    path("ajax/vehiculos/buscar/", api_buscar_vehiculo, name="api_buscar_vehiculo"),

    # Galería y comunicados
    path("galeria/", galeria, name="galeria"),
    path("galeria/<int:pk>/aprobar/", publicacion_aprobar, name="galeria_aprobar"),
    path("galeria/<int:pk>/rechazar/", publicacion_rechazar, name="galeria_rechazar"),
    path("comunicados/", comunicados, name="comunicados"),

    # Chat
    path("chat/", chat, name="chat"),
    path("chat/<str:canal>/", chat, name="chat_canal"),
    path("ajax/chat/<str:canal>/mensajes/", api_chat_mensajes, name="api_chat_mensajes"),
    path("ajax/chat/<str:canal>/enviar/", api_chat_enviar, name="api_chat_enviar"),

    # Notificaciones
    path("notificaciones/", notificaciones_list, name="notificaciones"),
    path("notificaciones/<int:pk>/leer/", notificacion_leer, name="notificaciones_leer"),
    path("notificaciones/leer-todas/", notificaciones_leer_todas, name="notificaciones_leer_todas"),
    path("ajax/notificaciones/", api_notificaciones, name="api_notificaciones"),

    # Administración
    path("usuarios/", usuarios_list, name="usuarios_list"),
    path("usuarios/nuevo/", usuario_create, name="usuarios_create"),
    path("usuarios/<int:pk>/editar/", usuario_update, name="usuarios_update"),
    path("usuarios/<int:pk>/aprobar/", usuario_aprobar, name="usuarios_aprobar"),
    path("usuarios/<int:pk>/eliminar/", usuario_eliminar, name="usuarios_eliminar"),
    path("configuracion/", configuracion, name="configuracion"),
]
