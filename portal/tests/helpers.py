from datetime import date, timedelta
from decimal import Decimal
from itertools import count

from django.contrib.auth import get_user_model
from django.utils import timezone

from portal.models import (
    Area,
    CategoriaProducto,
    EstadoUsuario,
    LoteProducto,
    Producto,
    Rol,
    UnidadProducto,
)

User = get_user_model()

_secuencia = count(1)


def crear_usuario(area=Area.PRODUCCION, *, rol=Rol.USUARIO, estado=EstadoUsuario.ACTIVO, **extra):
    n = next(_secuencia)
    username = extra.pop("username", f"usuario{n}")
    return User.objects.create_user(
        username=username,
        email=extra.pop("email", f"{username}@agronorte.test"),
        password=extra.pop("password", "password123"),
        area=area,
        rol=rol,
        estado=estado,
        **extra,
    )


def crear_admin(**extra):
    return crear_usuario(Area.ADMINISTRADOR, rol=Rol.ADMINISTRADOR, **extra)


def crear_producto(sku="SKU-1", *, lotes=None, **extra):
    """
    Crea un producto directo en la base. `lotes` es una lista de
    (codigo, cantidad, fecha_vencimiento | None).
    """
    producto = Producto.objects.create(
        sku=sku,
        nombre=extra.pop("nombre", f"Producto {sku}"),
        categoria=extra.pop("categoria", CategoriaProducto.FERTILIZANTES),
        area=extra.pop("area", Area.ALMACEN),
        unidad=extra.pop("unidad", UnidadProducto.KG),
        **extra,
    )
    for codigo, cantidad, vence in lotes or []:
        LoteProducto.objects.create(
            producto=producto,
            codigo=codigo,
            cantidad=Decimal(cantidad),
            fecha_vencimiento=vence,
        )
    return producto


def dias_desde_hoy(dias: int) -> date:
    return timezone.localdate() + timedelta(days=dias)


STORAGE_EN_MEMORIA = {
    "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}
