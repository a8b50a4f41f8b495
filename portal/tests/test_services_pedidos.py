from decimal import Decimal

from django.core.exceptions import PermissionDenied
from django.test import TestCase

from portal.models import (
    Area,
    EstadoPedido,
    MovimientoInventario,
    Notificacion,
    Pedido,
)
from portal.services.pedidos import (
    PedidoError,
    aprobar_pedido,
    crear_pedido,
    despachar_pedido,
    rechazar_pedido,
)
from portal.tests.helpers import crear_producto, crear_usuario, dias_desde_hoy


class FlujoPedidoTests(TestCase):
    def setUp(self):
        self.produccion = crear_usuario(Area.PRODUCCION)
        self.gerencia = crear_usuario(Area.GERENCIA)
        self.almacen = crear_usuario(Area.ALMACEN)
        self.producto = crear_producto("FER-01", lotes=[("L1", "5", None)])

    def _crear(self, cantidad="5"):
        return crear_pedido(
            usuario=self.produccion,
            items=[{"producto": self.producto, "cantidad": Decimal(cantidad)}],
            centro_costo="CC-100",
        )

    def test_flujo_completo_pendiente_aprobado_despachado(self):
        pedido = self._crear("5")
        self.assertEqual(pedido.estado, EstadoPedido.PENDIENTE)
        self.assertEqual(pedido.area_solicitante, Area.PRODUCCION)
        self.assertTrue(pedido.codigo.startswith("ORD-"))
        self.assertTrue(
            Notificacion.objects.filter(destino=Area.GERENCIA, titulo="Nueva Solicitud de Pedido").exists()
        )
        # Crear el pedido no reserva stock
        self.assertEqual(self.producto.stock_total, Decimal("5"))

        antes = Notificacion.objects.count()
        pedido = aprobar_pedido(pedido=pedido, usuario=self.gerencia)
        self.assertEqual(pedido.estado, EstadoPedido.APROBADO)
        self.assertEqual(pedido.aprobado_por, self.gerencia)
        self.assertIsNotNone(pedido.revisado_en)

        nuevas = Notificacion.objects.order_by("id")[antes:]
        self.assertEqual(len(nuevas), 2)
        self.assertEqual({n.destino for n in nuevas}, {Area.ALMACEN, Area.PRODUCCION})
        self.assertIn(f"Tu Pedido {pedido.codigo} Fue Aprobado", [n.titulo for n in nuevas])

        pedido = despachar_pedido(pedido=pedido, usuario=self.almacen)
        self.assertEqual(pedido.estado, EstadoPedido.DESPACHADO)
        self.assertEqual(pedido.despachado_por, self.almacen)
        self.assertEqual(self.producto.stock_total, Decimal("0"))

        salida = MovimientoInventario.objects.get(tipo=MovimientoInventario.TIPO_SALIDA)
        self.assertEqual(salida.pedido, pedido)
        self.assertEqual(salida.cantidad, Decimal("5"))
        self.assertEqual(salida.area_solicitante, Area.PRODUCCION)
        self.assertTrue(
            Notificacion.objects.filter(titulo=f"Tu Pedido {pedido.codigo} ha sido Despachado").exists()
        )

    def test_crear_pedido_con_mas_que_el_stock_falla(self):
        with self.assertRaises(PedidoError) as ctx:
            self._crear("6")
        self.assertIn("Stock insuficiente", str(ctx.exception))
        self.assertFalse(Pedido.objects.exists())
        self.assertFalse(Notificacion.objects.exists())

    def test_lineas_repetidas_suman_contra_el_stock(self):
        with self.assertRaises(PedidoError) as ctx:
            crear_pedido(
                usuario=self.produccion,
                items=[
                    {"producto": self.producto, "cantidad": Decimal("5")},
                    {"producto": self.producto, "cantidad": Decimal("5")},
                ],
            )
        self.assertIn("Stock insuficiente", str(ctx.exception))
        self.assertFalse(Pedido.objects.exists())

    def test_pedido_sin_items(self):
        with self.assertRaises(PedidoError):
            crear_pedido(usuario=self.produccion, items=[])

    def test_rechazo_notifica_al_area(self):
        pedido = self._crear("1")
        pedido = rechazar_pedido(pedido=pedido, usuario=self.gerencia)
        self.assertEqual(pedido.estado, EstadoPedido.RECHAZADO)
        notif = Notificacion.objects.get(destino=Area.PRODUCCION)
        self.assertEqual(notif.titulo, f"Tu Pedido {pedido.codigo} Fue Rechazado")
        self.assertEqual(notif.descripcion, "Ponte en contacto con Gerencia para más detalles.")

    def test_despacho_lleva_varias_lineas_del_mismo_producto(self):
        producto = crear_producto(
            "AZUFRE",
            lotes=[("A", "4", dias_desde_hoy(5)), ("B", "4", dias_desde_hoy(50))],
        )
        pedido = crear_pedido(
            usuario=self.produccion,
            items=[
                {"producto": producto, "cantidad": Decimal("3"), "area_destino": Area.SANIDAD},
                {"producto": producto, "cantidad": Decimal("3"), "descripcion_uso": "Fumigación"},
            ],
        )
        aprobar_pedido(pedido=pedido, usuario=self.gerencia)
        despachar_pedido(pedido=pedido, usuario=self.almacen)

        cantidades = dict(producto.lotes.values_list("codigo", "cantidad"))
        self.assertEqual(cantidades, {"A": Decimal("0"), "B": Decimal("2")})
        self.assertEqual(pedido.items.get(descripcion_uso="Fumigación").cantidad, Decimal("3"))


class TransicionesPedidoTests(TestCase):
    def setUp(self):
        self.produccion = crear_usuario(Area.PRODUCCION)
        self.gerencia = crear_usuario(Area.GERENCIA)
        self.almacen = crear_usuario(Area.ALMACEN)
        self.producto = crear_producto("FER-02", lotes=[("L1", "10", None)])
        self.pedido = crear_pedido(
            usuario=self.produccion,
            items=[{"producto": self.producto, "cantidad": Decimal("2")}],
        )

    def test_no_se_despacha_un_pedido_pendiente(self):
        with self.assertRaises(PedidoError):
            despachar_pedido(pedido=self.pedido, usuario=self.almacen)
        self.pedido.refresh_from_db()
        self.assertEqual(self.pedido.estado, EstadoPedido.PENDIENTE)
        self.assertEqual(self.producto.stock_total, Decimal("10"))

    def test_doble_aprobacion_falla(self):
        aprobar_pedido(pedido=self.pedido, usuario=self.gerencia)
        with self.assertRaises(PedidoError):
            aprobar_pedido(pedido=self.pedido, usuario=self.gerencia)

    def test_pedido_rechazado_no_vuelve_atras(self):
        rechazar_pedido(pedido=self.pedido, usuario=self.gerencia)
        for accion, usuario in (
            (aprobar_pedido, self.gerencia),
            (rechazar_pedido, self.gerencia),
            (despachar_pedido, self.almacen),
        ):
            with self.assertRaises(PedidoError):
                accion(pedido=self.pedido, usuario=usuario)
        self.pedido.refresh_from_db()
        self.assertEqual(self.pedido.estado, EstadoPedido.RECHAZADO)

    def test_pedido_despachado_es_final(self):
        aprobar_pedido(pedido=self.pedido, usuario=self.gerencia)
        despachar_pedido(pedido=self.pedido, usuario=self.almacen)
        with self.assertRaises(PedidoError):
            despachar_pedido(pedido=self.pedido, usuario=self.almacen)
        with self.assertRaises(PedidoError):
            rechazar_pedido(pedido=self.pedido, usuario=self.gerencia)
        self.assertEqual(self.producto.stock_total, Decimal("8"))

    def test_aprobacion_con_instancia_desactualizada(self):
        # Otra petición ya lo rechazó; la instancia en memoria sigue en Pendiente
        Pedido.objects.filter(pk=self.pedido.pk).update(estado=EstadoPedido.RECHAZADO)
        with self.assertRaises(PedidoError):
            aprobar_pedido(pedido=self.pedido, usuario=self.gerencia)
        self.pedido.refresh_from_db()
        self.assertEqual(self.pedido.estado, EstadoPedido.RECHAZADO)

    def test_dos_pedidos_aprobados_no_venden_el_mismo_stock(self):
        pedidos = []
        for _ in range(2):
            pedido = crear_pedido(
                usuario=self.produccion,
                items=[{"producto": self.producto, "cantidad": Decimal("7")}],
            )
            pedidos.append(aprobar_pedido(pedido=pedido, usuario=self.gerencia))

        despachar_pedido(pedido=pedidos[0], usuario=self.almacen)
        with self.assertRaises(PedidoError):
            despachar_pedido(pedido=pedidos[1], usuario=self.almacen)

        self.assertEqual(self.producto.stock_total, Decimal("3"))
        pedidos[1].refresh_from_db()
        self.assertEqual(pedidos[1].estado, EstadoPedido.APROBADO)

    def test_despacho_sin_stock_suficiente_no_cambia_estado(self):
        aprobar_pedido(pedido=self.pedido, usuario=self.gerencia)
        self.producto.lotes.update(cantidad=Decimal("1"))

        with self.assertRaises(PedidoError) as ctx:
            despachar_pedido(pedido=self.pedido, usuario=self.almacen)

        self.assertIn("Stock insuficiente", str(ctx.exception))
        self.pedido.refresh_from_db()
        self.assertEqual(self.pedido.estado, EstadoPedido.APROBADO)
        self.assertFalse(MovimientoInventario.objects.filter(tipo=MovimientoInventario.TIPO_SALIDA).exists())


class PermisosPedidoTests(TestCase):
    def setUp(self):
        self.produccion = crear_usuario(Area.PRODUCCION)
        self.producto = crear_producto("FER-03", lotes=[("L1", "10", None)])
        self.pedido = crear_pedido(
            usuario=self.produccion,
            items=[{"producto": self.producto, "cantidad": Decimal("1")}],
        )

    def test_solo_gerencia_aprueba(self):
        for area in (Area.PRODUCCION, Area.ALMACEN, Area.LOGISTICA):
            with self.assertRaises(PermissionDenied):
                aprobar_pedido(pedido=self.pedido, usuario=crear_usuario(area))

    def test_solo_almacen_despacha(self):
        aprobar_pedido(pedido=self.pedido, usuario=crear_usuario(Area.GERENCIA))
        with self.assertRaises(PermissionDenied):
            despachar_pedido(pedido=self.pedido, usuario=crear_usuario(Area.GERENCIA))

    def test_administrador_puede_todo(self):
        admin = crear_usuario(Area.ADMINISTRADOR, rol="Administrador")
        aprobar_pedido(pedido=self.pedido, usuario=admin)
        pedido = despachar_pedido(pedido=self.pedido, usuario=admin)
        self.assertEqual(pedido.estado, EstadoPedido.DESPACHADO)
