from .chat import api_chat_enviar, api_chat_mensajes, chat
from .combustible import (
    combustible_abastecer,
    combustible_comprobante,
    combustible_despachar,
    combustible_panel,
)
from .configuracion import configuracion
from .contenido import comunicados, galeria, publicacion_aprobar, publicacion_rechazar
from .cuentas import PortalLoginView, perfil, registro, reseteo_password
from .inventario import (
    HistorialInventarioView,
    ProductoListView,
    lote_incrementar,
    producto_agregar_stock,
    producto_create,
    producto_detail,
    producto_eliminar,
)
from .notificaciones import (
    api_notificaciones,
    notificacion_leer,
    notificaciones_leer_todas,
    notificaciones_list,
)
from .pedidos import (
    pedido_aprobar,
    pedido_comprobante,
    pedido_create,
    pedido_despachar,
    pedido_detail,
    pedido_rechazar,
    pedidos_list,
)
from .seguridad import (
    api_buscar_vehiculo,
    ingreso_vehiculo,
    reporte_aprobar,
    reporte_cerrar,
    reporte_create,
    reporte_detail,
    reporte_rechazar,
    reportes_list,
)
from .tablero import tablero
from .usuarios import (
    usuario_aprobar,
    usuario_create,
    usuario_eliminar,
    usuario_update,
    usuarios_list,
)
