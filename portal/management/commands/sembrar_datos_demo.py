"""
Carga datos de demostración: un administrador, un usuario por área,
productos con lotes y combustible inicial en los tanques.
"""
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify

from portal.models import (
    Area,
    CategoriaProducto,
    Cultivo,
    EstadoUsuario,
    MovimientoCombustible,
    Producto,
    Rol,
    TipoCombustible,
    UnidadProducto,
)
from portal.services.combustible import registrar_abastecimiento
from portal.services.inventario import crear_producto

PASSWORD_DEMO = "agronorte123"

PRODUCTOS_DEMO = [
    # sku, nombre, categoría, área, unidad, cultivo, stock, días para vencer
    ("FER-UREA-50", "Urea 46% saco 50 kg", CategoriaProducto.FERTILIZANTES, Area.ALMACEN, UnidadProducto.KG, Cultivo.UVA, "500", 180),
    ("AGQ-AZUFRE", "Azufre mojable", CategoriaProducto.AGROQUIMICOS, Area.SANIDAD, UnidadProducto.KG, Cultivo.UVA, "8", 20),
    ("AGQ-COBRE", "Oxicloruro de cobre", CategoriaProducto.AGROQUIMICOS, Area.SANIDAD, UnidadProducto.KG, Cultivo.PALTO, "40", 365),
    ("HER-TIJ-01", "Tijera de podar", CategoriaProducto.HERRAMIENTAS, Area.PRODUCCION, UnidadProducto.UNIDAD, "", "25", None),
    ("REP-FILT-ACE", "Filtro de aceite tractor", CategoriaProducto.REPUESTOS, Area.TALLER, UnidadProducto.UNIDAD, "", "0", None),
    ("RIE-GOT-16", "Manguera gotero 16 mm", CategoriaProducto.IMPLEMENTOS_RIEGO, Area.PRODUCCION, UnidadProducto.METROS, Cultivo.PALTO, "1200", None),
    ("SST-GUANTE", "Guantes de nitrilo", CategoriaProducto.IMPLEMENTOS_SST, Area.SSGG, UnidadProducto.UNIDAD, "", "60", None),
]


class Command(BaseCommand):
    help = "Carga usuarios, productos y combustible de demostración."

    def add_arguments(self, parser):
        parser.add_argument(
            "--sin-combustible",
            action="store_true",
            help="No registrar ingresos de combustible iniciales.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        Usuario = get_user_model()

        admin, creado = Usuario.objects.get_or_create(
            username="admin",
            defaults={
                "email": "admin@agronorte.pe",
                "first_name": "Administrador",
                "rol": Rol.ADMINISTRADOR,
                "area": Area.ADMINISTRADOR,
                "estado": EstadoUsuario.ACTIVO,
                "is_staff": True,
                "is_superuser": True,
            },
        )
        if creado:
            admin.set_password(PASSWORD_DEMO)
            admin.save()
            self.stdout.write(self.style.SUCCESS("Administrador 'admin' creado."))

        for area in Area:
            if area == Area.ADMINISTRADOR:
                continue
            username = slugify(area.value).replace("-", "_")
            usuario, creado = Usuario.objects.get_or_create(
                username=username,
                defaults={
                    "email": f"{username}@agronorte.pe",
                    "first_name": area.label,
                    "area": area,
                    "estado": EstadoUsuario.ACTIVO,
                },
            )
            if creado:
                usuario.set_password(PASSWORD_DEMO)
                usuario.save()
                self.stdout.write(f"Usuario '{username}' ({area.label}) creado.")

        hoy = timezone.localdate()
        for sku, nombre, categoria, area, unidad, cultivo, stock, dias in PRODUCTOS_DEMO:
            if Producto.objects.filter(sku__iexact=sku).exists():
                continue
            crear_producto(
                usuario=admin,
                datos={
                    "sku": sku,
                    "nombre": nombre,
                    "categoria": categoria,
                    "area": area,
                    "unidad": unidad,
                    "cultivo": cultivo,
                },
                codigo_lote=f"{sku}-L1",
                cantidad_inicial=Decimal(stock),
                fecha_vencimiento=hoy + timedelta(days=dias) if dias else None,
            )
            self.stdout.write(f"Producto {sku} creado.")

        if not options["sin_combustible"] and not MovimientoCombustible.objects.exists():
            registrar_abastecimiento(usuario=admin, tipo_combustible=TipoCombustible.GASOLINA, cantidad=Decimal("50"))
            registrar_abastecimiento(usuario=admin, tipo_combustible=TipoCombustible.PETROLEO, cantidad=Decimal("600"))
            self.stdout.write("Combustible inicial registrado.")

        self.stdout.write(self.style.SUCCESS(f"Datos de demostración listos. Contraseña: {PASSWORD_DEMO}"))
