from decimal import Decimal

from django.core.cache import cache
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from portal.models import (
    Area,
    CANAL_GENERAL,
    EstadoPedido,
    MensajeChat,
    Notificacion,
    Pedido,
    Producto,
    TipoCombustible,
)
from portal.services.combustible import registrar_abastecimiento
from portal.services.notificaciones import crear_notificacion
from portal.tests.helpers import crear_producto, crear_usuario, dias_desde_hoy


class ProductoAPITests(APITestCase):
    def setUp(self):
        self.almacen = crear_usuario(Area.ALMACEN)
        self.client.force_authenticate(self.almacen)

    def test_requiere_autenticacion(self):
        self.client.force_authenticate(None)
        res = self.client.get(reverse("producto-list"))
        self.assertIn(res.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_listado_con_stock_y_estado(self):
        crear_producto("ABONO", lotes=[("L1", "3", None), ("L2", "4", None)])
        crear_producto("PALA", lotes=[("L1", "0", None)])

        res = self.client.get(reverse("producto-list"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        por_sku = {p["sku"]: p for p in res.data}
        self.assertEqual(Decimal(por_sku["ABONO"]["stock_total"]), Decimal("7"))
        self.assertEqual(por_sku["ABONO"]["estado_stock"], "Poco Stock")
        self.assertEqual(por_sku["PALA"]["estado_stock"], "Agotado")
        self.assertEqual(len(por_sku["ABONO"]["lotes"]), 2)

    def test_crear_producto(self):
        payload = {
            "sku": "NPK-20",
            "nombre": "NPK 20-20-20",
            "categoria": "Fertilizantes",
            "area": Area.ALMACEN,
            "unidad": "Kg",
            "codigo_lote": "L-1",
            "cantidad_inicial": "40",
            "fecha_vencimiento": str(dias_desde_hoy(200)),
        }
        res = self.client.post(reverse("producto-list"), payload, format="json")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["estado_stock"], "En Stock")

        repetido = self.client.post(reverse("producto-list"), {**payload, "sku": "npk-20"}, format="json")
        self.assertEqual(repetido.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(repetido.data["detail"], "Ya existe un producto con este SKU.")
        self.assertEqual(Producto.objects.count(), 1)

    def test_area_sin_permiso_no_crea(self):
        self.client.force_authenticate(crear_usuario(Area.TALLER))
        res = self.client.post(
            reverse("producto-list"),
            {"sku": "X", "nombre": "X", "categoria": "Varios", "area": Area.TALLER,
             "unidad": "Unidad", "codigo_lote": "L", "cantidad_inicial": "1"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_agregar_stock(self):
        producto = crear_producto("ABONO", lotes=[("L1", "3", None)])
        url = reverse("producto-agregar-stock", args=[producto.pk])

        res = self.client.post(url, {"codigo_lote": "L2", "cantidad": "5"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(producto.stock_total, Decimal("8"))

        res = self.client.post(url, {"codigo_lote": "L2", "cantidad": "5"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_incrementar_lote(self):
        producto = crear_producto("ABONO", lotes=[("L1", "3", None)])
        otro = crear_producto("PALA", lotes=[("P1", "1", None)])
        url = reverse("producto-incrementar-lote", args=[producto.pk])

        res = self.client.post(url, {"lote": producto.lotes.get().pk, "cantidad": "2"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(res.data["cantidad"]), Decimal("5"))
        self.assertEqual(
            producto.movimientos.filter(tipo="Entrada", codigo_lote="L1").count(), 1
        )

        ajeno = self.client.post(url, {"lote": otro.lotes.get().pk, "cantidad": "2"}, format="json")
        self.assertEqual(ajeno.status_code, status.HTTP_404_NOT_FOUND)

        invalido = self.client.post(url, {"lote": producto.lotes.get().pk, "cantidad": "0"}, format="json")
        self.assertEqual(invalido.status_code, status.HTTP_400_BAD_REQUEST)

    def test_lotes_por_vencer(self):
        crear_producto("ABONO", lotes=[("PRONTO", "3", dias_desde_hoy(5)), ("LEJOS", "3", dias_desde_hoy(100))])
        res = self.client.get(reverse("producto-por-vencer"))
        self.assertEqual([l["codigo"] for l in res.data], ["PRONTO"])
        self.assertEqual(res.data[0]["producto_nombre"], "Producto ABONO")


class PedidoAPITests(APITestCase):
    def setUp(self):
        self.produccion = crear_usuario(Area.PRODUCCION)
        self.gerencia = crear_usuario(Area.GERENCIA)
        self.almacen = crear_usuario(Area.ALMACEN)
        self.producto = crear_producto("UREA", lotes=[("L1", "10", None)])

    def _crear_pedido(self, cantidad="4"):
        self.client.force_authenticate(self.produccion)
        return self.client.post(
            reverse("pedido-list"),
            {"items": [{"producto": self.producto.pk, "cantidad": cantidad}], "centro_costo": "CC-1"},
            format="json",
        )

    def test_flujo_por_api(self):
        res = self._crear_pedido()
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["estado"], EstadoPedido.PENDIENTE)
        pk = res.data["id"]

        self.client.force_authenticate(self.gerencia)
        res = self.client.post(reverse("pedido-aprobar", args=[pk]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["estado"], EstadoPedido.APROBADO)

        # Segunda aprobación: el pedido ya no está pendiente
        res = self.client.post(reverse("pedido-aprobar", args=[pk]))
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

        self.client.force_authenticate(self.almacen)
        res = self.client.post(reverse("pedido-despachar", args=[pk]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["estado"], EstadoPedido.DESPACHADO)
        self.assertEqual(self.producto.stock_total, Decimal("6"))

    def test_pedido_con_mas_que_el_stock(self):
        res = self._crear_pedido("11")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(Pedido.objects.exists())

    def test_pedido_sin_items(self):
        self.client.force_authenticate(self.produccion)
        res = self.client.post(reverse("pedido-list"), {"items": []}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_produccion_no_aprueba(self):
        pk = self._crear_pedido().data["id"]
        res = self.client.post(reverse("pedido-aprobar", args=[pk]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_cada_area_ve_sus_pedidos(self):
        self._crear_pedido()
        self.client.force_authenticate(crear_usuario(Area.TALLER))
        self.assertEqual(self.client.get(reverse("pedido-list")).data, [])

        self.client.force_authenticate(self.gerencia)
        self.assertEqual(len(self.client.get(reverse("pedido-list")).data), 1)


class CombustibleAPITests(APITestCase):
    def setUp(self):
        self.logistica = crear_usuario(Area.LOGISTICA)
        self.client.force_authenticate(self.logistica)

    def test_abastecer_y_despachar(self):
        url = reverse("combustible-abastecer")
        res = self.client.post(url, {"tipo_combustible": TipoCombustible.PETROLEO, "cantidad": "100"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)

        despacho = {
            "tipo_combustible": TipoCombustible.PETROLEO,
            "cantidad": "30",
            "area": Area.PRODUCCION,
            "conductor": "Carlos Medina",
            "tipo_vehiculo": "Tractor",
            "turno": "Noche",
        }
        res = self.client.post(reverse("combustible-despachar"), despacho, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)

        res = self.client.post(reverse("combustible-despachar"), {**despacho, "cantidad": "80"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        niveles = {n["tipo_combustible"]: Decimal(n["nivel"]) for n in self.client.get(reverse("combustible-list")).data}
        self.assertEqual(niveles[TipoCombustible.PETROLEO], Decimal("70"))

    def test_cantidad_invalida(self):
        res = self.client.post(
            reverse("combustible-abastecer"),
            {"tipo_combustible": TipoCombustible.GASOLINA, "cantidad": "-1"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_historial_solo_para_roles_autorizados(self):
        registrar_abastecimiento(usuario=self.logistica, tipo_combustible=TipoCombustible.GASOLINA, cantidad=Decimal("5"))
        self.assertEqual(len(self.client.get(reverse("combustible-historial")).data), 1)

        self.client.force_authenticate(crear_usuario(Area.TALLER))
        res = self.client.get(reverse("combustible-historial"))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)


class NotificacionAPITests(APITestCase):
    def setUp(self):
        self.taller = crear_usuario(Area.TALLER)
        self.client.force_authenticate(self.taller)

    def test_consulta_incremental(self):
        primera = crear_notificacion(destino=Area.TALLER, titulo="Uno", descripcion="x")
        crear_notificacion(destino=Area.ALMACEN, titulo="Ajena", descripcion="x")
        segunda = crear_notificacion(destino=Area.TALLER, titulo="Dos", descripcion="x")

        res = self.client.get(reverse("notificacion-list"))
        self.assertEqual([n["titulo"] for n in res.data["resultados"]], ["Dos", "Uno"])
        self.assertEqual(res.data["no_leidas"], 2)

        res = self.client.get(reverse("notificacion-list"), {"desde": primera.pk})
        self.assertEqual([n["id"] for n in res.data["resultados"]], [segunda.pk])

        res = self.client.get(reverse("notificacion-list"), {"desde": "abc"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_no_se_marca_una_notificacion_ajena(self):
        ajena = crear_notificacion(destino=Area.ALMACEN, titulo="Ajena", descripcion="x")
        res = self.client.post(reverse("notificacion-leer", args=[ajena.pk]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        ajena.refresh_from_db()
        self.assertFalse(ajena.leida)

    def test_leer_todas(self):
        crear_notificacion(destino=Area.TALLER, titulo="Uno", descripcion="x")
        crear_notificacion(destino="Todos", titulo="Dos", descripcion="x")
        res = self.client.post(reverse("notificacion-leer-todas"))
        self.assertEqual(res.data["actualizadas"], 2)
        self.assertFalse(Notificacion.objects.filter(leida=False).exists())


class ChatAPITests(APITestCase):
    def setUp(self):
        cache.clear()
        self.usuario = crear_usuario(Area.SANIDAD, first_name="Eva", last_name="Soto")
        self.client.force_authenticate(self.usuario)

    def test_enviar_y_consultar(self):
        res = self.client.post(
            reverse("chat-list"),
            {"canal": CANAL_GENERAL, "contenido": "Hola a todos"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["nombre_remitente"], "Eva Soto")

        res = self.client.get(reverse("chat-detail", args=[CANAL_GENERAL]))
        self.assertEqual([m["contenido"] for m in res.data["mensajes"]], ["Hola a todos"])
        self.assertEqual([u["nombre"] for u in res.data["en_linea"]], ["Eva Soto"])

    def test_canal_de_area_con_acento(self):
        res = self.client.get(reverse("chat-detail", args=[Area.LOGISTICA]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)

    def test_canal_desconocido_y_mensaje_vacio(self):
        res = self.client.get(reverse("chat-detail", args=["random"]))
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self.client.post(reverse("chat-list"), {"canal": CANAL_GENERAL, "contenido": "  "}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(MensajeChat.objects.exists())
