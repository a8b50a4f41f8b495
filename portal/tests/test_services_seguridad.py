from django.core.exceptions import PermissionDenied
from django.test import TestCase

from portal.models import (
    Area,
    EstadoReporte,
    Notificacion,
    ReporteSeguridad,
    TipoReporte,
    VehiculoRegistrado,
)
from portal.services.seguridad import (
    SeguridadError,
    aprobar_solicitud,
    buscar_vehiculo_por_empleado,
    cerrar_reporte,
    crear_reporte,
    rechazar_solicitud,
    registrar_ingreso_vehiculo,
)
from portal.tests.helpers import crear_usuario


class ReportesTests(TestCase):
    def setUp(self):
        self.seguridad = crear_usuario(Area.SEGURIDAD_PATRIMONIAL)
        self.gerencia = crear_usuario(Area.GERENCIA)

    def test_incidente_nace_abierto_y_se_cierra(self):
        reporte = crear_reporte(
            usuario=self.seguridad,
            tipo=TipoReporte.INCIDENTE,
            titulo="Puerta forzada",
            descripcion="Se encontró la puerta del almacén 2 forzada.",
        )
        self.assertEqual(reporte.estado, EstadoReporte.ABIERTO)
        self.assertTrue(reporte.codigo.startswith("REP-"))
        self.assertFalse(Notificacion.objects.exists())

        reporte = cerrar_reporte(reporte=reporte, usuario=self.seguridad)
        self.assertEqual(reporte.estado, EstadoReporte.CERRADO)

        with self.assertRaises(SeguridadError):
            cerrar_reporte(reporte=reporte, usuario=self.seguridad)

    def test_solicitud_de_permiso_pasa_por_aprobacion(self):
        reporte = crear_reporte(
            usuario=self.seguridad,
            tipo=TipoReporte.SOLICITUD_PERMISO,
            titulo="Salida de herramientas",
            descripcion="Retiro de herramientas para mantenimiento externo.",
            area_destino=Area.GERENCIA,
        )
        self.assertEqual(reporte.estado, EstadoReporte.PENDIENTE)
        self.assertEqual(reporte.estado, "Aprobación Pendiente")

        notif = Notificacion.objects.get()
        self.assertEqual(notif.destino, Area.GERENCIA)
        self.assertEqual(notif.titulo, "Nueva Solicitud de Permiso")

        reporte = aprobar_solicitud(reporte=reporte, usuario=self.gerencia)
        self.assertEqual(reporte.estado, EstadoReporte.APROBADO)
        self.assertTrue(
            Notificacion.objects.filter(destino=Area.SEGURIDAD_PATRIMONIAL, titulo="Solicitud Aprobada").exists()
        )

        with self.assertRaises(SeguridadError):
            rechazar_solicitud(reporte=reporte, usuario=self.gerencia)

    def test_solicitud_requiere_area_destino_valida(self):
        with self.assertRaises(SeguridadError):
            crear_reporte(
                usuario=self.seguridad,
                tipo=TipoReporte.SOLICITUD_PERMISO,
                titulo="Permiso",
                descripcion="x",
                area_destino=Area.TALLER,
            )

    def test_rechazo_de_solicitud(self):
        reporte = crear_reporte(
            usuario=self.seguridad,
            tipo=TipoReporte.SOLICITUD_PERMISO,
            titulo="Ingreso nocturno",
            descripcion="x",
            area_destino=Area.GERENCIA,
        )
        reporte = rechazar_solicitud(reporte=reporte, usuario=self.gerencia)
        self.assertEqual(reporte.estado, EstadoReporte.RECHAZADO)

    def test_solo_se_aprueban_solicitudes(self):
        reporte = crear_reporte(
            usuario=self.seguridad,
            tipo=TipoReporte.NOVEDAD,
            titulo="Ronda sin novedades",
            descripcion="x",
        )
        with self.assertRaises(SeguridadError):
            aprobar_solicitud(reporte=reporte, usuario=self.gerencia)

    def test_solo_seguridad_registra_reportes(self):
        with self.assertRaises(PermissionDenied):
            crear_reporte(
                usuario=crear_usuario(Area.PRODUCCION),
                tipo=TipoReporte.INCIDENTE,
                titulo="x",
                descripcion="x",
            )


class IngresoVehiculoTests(TestCase):
    def setUp(self):
        self.seguridad = crear_usuario(Area.SEGURIDAD_PATRIMONIAL)
        self.datos = {
            "nombre_empleado": "Rosa Campos",
            "area_empleado": Area.SANIDAD,
            "tipo_vehiculo": "Moto Lineal",
            "modelo_vehiculo": "Honda XR150",
            "placa": "ab-1234",
        }

    def test_ingreso_registra_vehiculo_y_reporte_cerrado(self):
        reporte = registrar_ingreso_vehiculo(usuario=self.seguridad, datos=self.datos)

        self.assertEqual(reporte.tipo, TipoReporte.INGRESO_VEHICULO)
        self.assertEqual(reporte.estado, EstadoReporte.CERRADO)
        self.assertEqual(reporte.titulo, "Ingreso Vehicular: Rosa Campos")
        self.assertTrue(reporte.codigo.startswith("VEH-"))

        vehiculo = VehiculoRegistrado.objects.get()
        self.assertEqual(vehiculo.placa, "AB-1234")

    def test_segundo_ingreso_actualiza_el_vehiculo(self):
        registrar_ingreso_vehiculo(usuario=self.seguridad, datos=self.datos)
        registrar_ingreso_vehiculo(
            usuario=self.seguridad,
            datos={**self.datos, "nombre_empleado": "rosa campos", "placa": "XY-9999"},
        )

        self.assertEqual(VehiculoRegistrado.objects.count(), 1)
        self.assertEqual(VehiculoRegistrado.objects.get().placa, "XY-9999")
        self.assertEqual(ReporteSeguridad.objects.count(), 2)

    def test_buscar_vehiculo_sin_distinguir_mayusculas(self):
        registrar_ingreso_vehiculo(usuario=self.seguridad, datos=self.datos)
        vehiculo = buscar_vehiculo_por_empleado("  ROSA CAMPOS ")
        self.assertIsNotNone(vehiculo)
        self.assertEqual(vehiculo.modelo_vehiculo, "Honda XR150")
        self.assertIsNone(buscar_vehiculo_por_empleado("Otro Empleado"))
        self.assertIsNone(buscar_vehiculo_por_empleado(""))
