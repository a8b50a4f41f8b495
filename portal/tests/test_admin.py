from decimal import Decimal

from django.contrib.admin.sites import site
from django.test import RequestFactory, TestCase
from django.urls import reverse

from portal.models import Area, EstadoPedido, EstadoUsuario, Pedido
from portal.services.pedidos import crear_pedido
from portal.tests.helpers import crear_admin, crear_producto, crear_usuario


class AdminTests(TestCase):
    def setUp(self):
        self.admin = crear_admin(is_staff=True, is_superuser=True)
        producto = crear_producto("UREA", lotes=[("L1", "10", None)])
        self.pedido_taller = crear_pedido(
            usuario=crear_usuario(Area.TALLER),
            items=[{"producto": producto, "cantidad": Decimal("1")}],
        )
        crear_pedido(
            usuario=crear_usuario(Area.SANIDAD),
            items=[{"producto": producto, "cantidad": Decimal("1")}],
        )

    def test_listados_del_admin_cargan(self):
        self.client.force_login(self.admin)
        for modelo in ("usuario", "producto", "pedido", "movimientocombustible", "reporteseguridad"):
            with self.subTest(modelo=modelo):
                res = self.client.get(reverse(f"admin:portal_{modelo}_changelist"))
                self.assertEqual(res.status_code, 200)

    def test_personal_de_un_area_solo_ve_sus_pedidos(self):
        staff = crear_usuario(Area.TALLER, is_staff=True)
        request = RequestFactory().get("/")
        request.user = staff

        qs = site._registry[Pedido].get_queryset(request)
        self.assertEqual(list(qs), [self.pedido_taller])

    def test_accion_aprobar_pedidos(self):
        self.client.force_login(self.admin)
        self.client.post(
            reverse("admin:portal_pedido_changelist"),
            {"action": "aprobar_pedidos", "_selected_action": [p.pk for p in Pedido.objects.all()]},
        )
        self.assertEqual(Pedido.objects.filter(estado=EstadoPedido.APROBADO).count(), 2)

    def test_accion_aprobar_cuentas(self):
        pendiente = crear_usuario(estado=EstadoUsuario.PENDIENTE)
        self.client.force_login(self.admin)
        self.client.post(
            reverse("admin:portal_usuario_changelist"),
            {"action": "aprobar_cuentas", "_selected_action": [pendiente.pk]},
        )
        pendiente.refresh_from_db()
        self.assertEqual(pendiente.estado, EstadoUsuario.ACTIVO)
