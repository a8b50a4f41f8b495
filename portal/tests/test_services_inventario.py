from datetime import date, datetime, timezone as dt_timezone
from decimal import Decimal
from unittest import mock

from django.core.exceptions import PermissionDenied
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings

from portal.models import (
    Area,
    CategoriaProducto,
    LoteProducto,
    MovimientoInventario,
    Producto,
    UnidadProducto,
)
from portal.services.inventario import (
    InventarioError,
    agregar_stock,
    crear_producto,
    descontar_stock,
    eliminar_producto,
    historial_producto,
    incrementar_lote,
    obtener_lotes_por_vencer,
    obtener_lotes_vencidos,
    ordenar_lotes_para_salida,
    productos_con_stock,
)
from portal.tests.helpers import crear_producto as crear_producto_db
from portal.tests.helpers import STORAGE_EN_MEMORIA, crear_usuario, dias_desde_hoy


def _datos_producto(sku="UREA-50"):
    return {
        "sku": sku,
        "nombre": "Urea 46%",
        "descripcion": "",
        "categoria": CategoriaProducto.FERTILIZANTES,
        "area": Area.ALMACEN,
        "cultivo": "",
        "ubicacion": "Estante A",
        "unidad": UnidadProducto.KG,
    }


@override_settings(STORAGES=STORAGE_EN_MEMORIA)
class CrearProductoTests(TestCase):
    def setUp(self):
        self.almacen = crear_usuario(Area.ALMACEN)

    def test_crear_producto_con_lote_inicial_registra_entrada(self):
        producto = crear_producto(
            usuario=self.almacen,
            datos=_datos_producto(),
            codigo_lote="L-001",
            cantidad_inicial=Decimal("25"),
            fecha_vencimiento=dias_desde_hoy(60),
        )

        self.assertEqual(producto.stock_total, Decimal("25"))
        self.assertEqual(producto.lotes.count(), 1)

        mov = MovimientoInventario.objects.get(producto=producto)
        self.assertEqual(mov.tipo, MovimientoInventario.TIPO_ENTRADA)
        self.assertEqual(mov.cantidad, Decimal("25"))
        self.assertEqual(mov.codigo_lote, "L-001")
        self.assertEqual(mov.sku, "UREA-50")
        self.assertEqual(mov.usuario, self.almacen)

    def test_sku_duplicado_sin_distinguir_mayusculas(self):
        crear_producto_db("UREA-50")
        with self.assertRaises(InventarioError) as ctx:
            crear_producto(
                usuario=self.almacen,
                datos=_datos_producto("urea-50"),
                codigo_lote="L-001",
                cantidad_inicial=Decimal("1"),
            )
        self.assertEqual(str(ctx.exception), "Ya existe un producto con este SKU.")
        self.assertEqual(Producto.objects.count(), 1)

    def test_sube_imagenes_y_ficha_tecnica(self):
        imagen = SimpleUploadedFile("foto.png", b"png", content_type="image/png")
        ficha = SimpleUploadedFile("ficha.pdf", b"%PDF", content_type="application/pdf")

        producto = crear_producto(
            usuario=self.almacen,
            datos=_datos_producto(),
            codigo_lote="L-001",
            cantidad_inicial=Decimal("1"),
            imagenes=[imagen],
            ficha_tecnica=ficha,
        )

        self.assertEqual(len(producto.imagenes), 1)
        self.assertTrue(producto.ficha_tecnica_url)

    def test_area_sin_permiso_no_crea_productos(self):
        produccion = crear_usuario(Area.PRODUCCION)
        with self.assertRaises(PermissionDenied):
            crear_producto(
                usuario=produccion,
                datos=_datos_producto(),
                codigo_lote="L-001",
                cantidad_inicial=Decimal("1"),
            )
        self.assertFalse(Producto.objects.exists())


class AgregarStockTests(TestCase):
    def setUp(self):
        self.logistica = crear_usuario(Area.LOGISTICA)
        self.producto = crear_producto_db("COBRE", lotes=[("L1", "5", None)])

    def test_agregar_lote_nuevo(self):
        lote = agregar_stock(
            usuario=self.logistica,
            producto=self.producto,
            codigo_lote="L2",
            cantidad=Decimal("10"),
        )
        self.assertEqual(lote.cantidad, Decimal("10"))
        self.assertEqual(self.producto.stock_total, Decimal("15"))
        self.assertEqual(
            MovimientoInventario.objects.filter(tipo=MovimientoInventario.TIPO_ENTRADA).count(),
            1,
        )

    def test_lote_repetido_se_rechaza(self):
        with self.assertRaises(InventarioError) as ctx:
            agregar_stock(
                usuario=self.logistica,
                producto=self.producto,
                codigo_lote="l1",
                cantidad=Decimal("3"),
            )
        self.assertIn('El lote ID "l1" ya existe', str(ctx.exception))
        self.assertEqual(self.producto.lotes.count(), 1)

    def test_cantidad_no_positiva(self):
        with self.assertRaises(InventarioError):
            agregar_stock(
                usuario=self.logistica,
                producto=self.producto,
                codigo_lote="L3",
                cantidad=Decimal("0"),
            )

    def test_incrementar_lote_existente(self):
        lote = self.producto.lotes.get()
        incrementar_lote(usuario=self.logistica, lote=lote, cantidad=Decimal("2.5"))
        lote.refresh_from_db()
        self.assertEqual(lote.cantidad, Decimal("7.5"))


class DescontarStockTests(TestCase):
    def test_descuenta_primero_el_lote_que_vence_antes(self):
        producto = crear_producto_db(
            "AZUFRE",
            lotes=[
                ("SIN-FECHA", "10", None),
                ("TARDE", "5", dias_desde_hoy(90)),
                ("PRONTO", "3", dias_desde_hoy(10)),
            ],
        )

        movimientos = descontar_stock(
            producto=producto,
            cantidad=Decimal("6"),
            area_solicitante=Area.SANIDAD,
        )

        cantidades = dict(producto.lotes.values_list("codigo", "cantidad"))
        self.assertEqual(cantidades["PRONTO"], Decimal("0"))
        self.assertEqual(cantidades["TARDE"], Decimal("2"))
        self.assertEqual(cantidades["SIN-FECHA"], Decimal("10"))

        self.assertEqual([m.codigo_lote for m in movimientos], ["PRONTO", "TARDE"])
        self.assertEqual([m.cantidad for m in movimientos], [Decimal("3"), Decimal("3")])
        self.assertTrue(all(m.area_solicitante == Area.SANIDAD for m in movimientos))

    def test_stock_insuficiente_no_toca_lotes(self):
        producto = crear_producto_db("TIJERA", lotes=[("L1", "2", None)])
        with self.assertRaises(InventarioError) as ctx:
            descontar_stock(producto=producto, cantidad=Decimal("3"), area_solicitante=Area.PRODUCCION)

        self.assertIn("Stock insuficiente", str(ctx.exception))
        self.assertEqual(producto.lotes.get().cantidad, Decimal("2"))
        self.assertFalse(MovimientoInventario.objects.exists())

    def test_orden_de_salida(self):
        sin_fecha = LoteProducto(pk=1, codigo="A", fecha_vencimiento=None)
        tarde = LoteProducto(pk=2, codigo="B", fecha_vencimiento=dias_desde_hoy(20))
        pronto = LoteProducto(pk=3, codigo="C", fecha_vencimiento=dias_desde_hoy(1))
        ordenados = ordenar_lotes_para_salida([sin_fecha, tarde, pronto])
        self.assertEqual([l.codigo for l in ordenados], ["C", "B", "A"])


class ConsultasInventarioTests(TestCase):
    def setUp(self):
        self.producto = crear_producto_db(
            "FUNGICIDA",
            lotes=[
                ("VENCIDO", "2", dias_desde_hoy(-3)),
                ("PRONTO", "4", dias_desde_hoy(7)),
                ("AGOTADO-PRONTO", "0", dias_desde_hoy(7)),
                ("LEJOS", "6", dias_desde_hoy(120)),
            ],
        )

    def test_lotes_por_vencer_con_stock(self):
        codigos = [l.codigo for l in obtener_lotes_por_vencer()]
        self.assertEqual(codigos, ["PRONTO"])

    def test_lotes_por_vencer_con_ventana_propia(self):
        codigos = {l.codigo for l in obtener_lotes_por_vencer(dias=365)}
        self.assertEqual(codigos, {"PRONTO", "LEJOS"})

    def test_lotes_vencidos(self):
        self.assertEqual([l.codigo for l in obtener_lotes_vencidos()], ["VENCIDO"])

    def test_productos_con_stock_anotado(self):
        producto = productos_con_stock().get(pk=self.producto.pk)
        self.assertEqual(producto.total_stock, Decimal("12"))
        self.assertEqual(producto.stock_total, Decimal("12"))

    def test_eliminar_producto_conserva_historial(self):
        almacen = crear_usuario(Area.ALMACEN)
        descontar_stock(producto=self.producto, cantidad=Decimal("1"), area_solicitante=Area.TALLER)
        self.assertEqual(historial_producto(self.producto).count(), 1)

        eliminar_producto(usuario=almacen, producto=self.producto)

        self.assertFalse(Producto.objects.exists())
        self.assertFalse(LoteProducto.objects.exists())
        mov = MovimientoInventario.objects.get()
        self.assertIsNone(mov.producto)
        self.assertEqual(mov.sku, "FUNGICIDA")


class VencimientoZonaHorariaTests(TestCase):
    def test_vencimiento_usa_la_fecha_local(self):
        # 02:00 UTC del 2 de enero sigue siendo 1 de enero en Lima
        ahora = datetime(2030, 1, 2, 2, 0, tzinfo=dt_timezone.utc)
        crear_producto_db("HERBICIDA", lotes=[("HOY", "3", date(2030, 1, 1))])

        with mock.patch("django.utils.timezone.now", return_value=ahora):
            self.assertEqual([l.codigo for l in obtener_lotes_por_vencer()], ["HOY"])
            self.assertEqual(list(obtener_lotes_vencidos()), [])
