"""
Carreras entre peticiones sobre las mismas filas. Requieren PostgreSQL:

    DB_ENGINE=postgresql DB_NAME=agronorte DB_USER=agronorte pytest portal/tests/test_concurrencia.py
"""

import threading
from decimal import Decimal
from unittest import skipUnless

from django.db import connection
from django.test import TransactionTestCase

from portal.models import Area, NivelCombustible, Pedido, EstadoPedido, TipoCombustible, TipoVehiculo
from portal.services.combustible import CombustibleError, despachar_combustible, registrar_abastecimiento
from portal.services.pedidos import PedidoError, aprobar_pedido, crear_pedido, despachar_pedido
from portal.tests.helpers import crear_producto, crear_usuario

solo_postgres = skipUnless(
    connection.vendor == "postgresql",
    "select_for_update solo bloquea filas en PostgreSQL",
)


def _en_paralelo(funciones):
    """Ejecuta las funciones a la vez y devuelve (éxitos, errores)."""
    barrera = threading.Barrier(len(funciones))
    exitos, errores = [], []

    def correr(funcion):
        barrera.wait()
        try:
            exitos.append(funcion())
        except (CombustibleError, PedidoError) as exc:
            errores.append(exc)
        finally:
            connection.close()

    hilos = [threading.Thread(target=correr, args=(f,)) for f in funciones]
    for hilo in hilos:
        hilo.start()
    for hilo in hilos:
        hilo.join()
    return exitos, errores


@solo_postgres
class ConcurrenciaTests(TransactionTestCase):
    def test_dos_despachos_de_combustible_no_sobregiran_el_tanque(self):
        logistica = crear_usuario(Area.LOGISTICA)
        registrar_abastecimiento(usuario=logistica, tipo_combustible=TipoCombustible.GASOLINA, cantidad=Decimal("100"))

        def despachar():
            return despachar_combustible(
                usuario=logistica,
                tipo_combustible=TipoCombustible.GASOLINA,
                cantidad=Decimal("60"),
                area=Area.PRODUCCION,
                conductor="Conductor",
                tipo_vehiculo=TipoVehiculo.CAMION,
            )

        exitos, errores = _en_paralelo([despachar, despachar])

        self.assertEqual((len(exitos), len(errores)), (1, 1))
        nivel = NivelCombustible.objects.get(tipo_combustible=TipoCombustible.GASOLINA)
        self.assertEqual(nivel.nivel, Decimal("40"))

    def test_despachos_de_pedidos_no_venden_el_mismo_stock(self):
        produccion = crear_usuario(Area.PRODUCCION)
        gerencia = crear_usuario(Area.GERENCIA)
        almacen = crear_usuario(Area.ALMACEN)
        producto = crear_producto("UREA", lotes=[("L1", "10", None)])

        pedidos = []
        for _ in range(2):
            pedido = crear_pedido(
                usuario=produccion,
                items=[{"producto": producto, "cantidad": Decimal("7")}],
            )
            pedidos.append(aprobar_pedido(pedido=pedido, usuario=gerencia))

        exitos, errores = _en_paralelo(
            [lambda p=p: despachar_pedido(pedido=p, usuario=almacen) for p in pedidos]
        )

        self.assertEqual((len(exitos), len(errores)), (1, 1))
        self.assertEqual(producto.stock_total, Decimal("3"))
        self.assertEqual(Pedido.objects.filter(estado=EstadoPedido.DESPACHADO).count(), 1)

    def test_un_pedido_se_despacha_una_sola_vez(self):
        produccion = crear_usuario(Area.PRODUCCION)
        almacen = crear_usuario(Area.ALMACEN)
        producto = crear_producto("AZUFRE", lotes=[("L1", "10", None)])
        pedido = crear_pedido(
            usuario=produccion,
            items=[{"producto": producto, "cantidad": Decimal("2")}],
        )
        aprobar_pedido(pedido=pedido, usuario=crear_usuario(Area.GERENCIA))

        exitos, errores = _en_paralelo(
            [lambda: despachar_pedido(pedido=Pedido.objects.get(pk=pedido.pk), usuario=almacen)] * 2
        )

        self.assertEqual((len(exitos), len(errores)), (1, 1))
        self.assertEqual(producto.stock_total, Decimal("8"))
