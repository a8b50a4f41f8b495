import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q

from portal.models import Area, EstadoUsuario, Rol
from portal.services.archivos import subir_archivo
from portal.services.notificaciones import crear_notificacion
from portal.utils_roles import GESTIONAR_USUARIOS, exigir_permiso

logger = logging.getLogger(__name__)

# Campos que se pueden editar desde la gestión de usuarios
CAMPOS_EDITABLES = (
    "username",
    "first_name",
    "last_name",
    "email",
    "rol",
    "area",
    "telefono_whatsapp",
)


class UsuarioError(Exception):
    """Errores de dominio en la gestión de cuentas."""
    pass


def _validar_unicidad(username: str, email: str, *, excluir_pk=None) -> None:
    Usuario = get_user_model()
    qs = Usuario.objects.filter(Q(username__iexact=username) | Q(email__iexact=email))
    if excluir_pk is not None:
        qs = qs.exclude(pk=excluir_pk)
    if qs.exists():
        raise UsuarioError("El nombre de usuario o el correo ya están en uso.")


def _crear(datos: dict, *, rol: str, estado: str):
    Usuario = get_user_model()

    password = datos.get("password")
    if not password:
        raise UsuarioError("La contraseña es requerida.")

    username = (datos.get("username") or "").strip()
    email = (datos.get("email") or "").strip().lower()
    if not username or not email:
        raise UsuarioError("Usuario y correo son obligatorios.")

    _validar_unicidad(username, email)

    usuario = Usuario(
        username=username,
        email=email,
        first_name=datos.get("first_name", ""),
        last_name=datos.get("last_name", ""),
        area=datos.get("area") or Area.PRODUCCION,
        telefono_whatsapp=datos.get("telefono_whatsapp", ""),
        rol=rol,
        estado=estado,
    )
    usuario.set_password(password)
    usuario.save()
    return usuario


@transaction.atomic
def registrar_usuario(datos: dict):
    """
    Registro público: la cuenta queda pendiente hasta que un administrador
    la apruebe.
    """
    usuario = _crear(datos, rol=Rol.USUARIO, estado=EstadoUsuario.PENDIENTE)

    crear_notificacion(
        destino=Area.ADMINISTRADOR,
        titulo="Nuevo Usuario Registrado",
        descripcion=f"El usuario {usuario.nombre_completo or usuario.username} ha solicitado una cuenta.",
        enlace="/usuarios/",
    )
    logger.info("Registro pendiente de %s", usuario.username)
    return usuario


@transaction.atomic
def crear_usuario(*, admin, datos: dict):
    exigir_permiso(admin, GESTIONAR_USUARIOS)
    usuario = _crear(
        datos,
        rol=datos.get("rol") or Rol.USUARIO,
        estado=EstadoUsuario.ACTIVO,
    )
    logger.info("Usuario %s creado por %s", usuario.username, admin)
    return usuario


@transaction.atomic
def actualizar_usuario(*, admin, usuario, datos: dict):
    """
    Actualiza datos de la cuenta. Si viene `password` no vacío, se cambia.
    """
    exigir_permiso(admin, GESTIONAR_USUARIOS)

    username = (datos.get("username") or usuario.username).strip()
    email = (datos.get("email") or usuario.email).strip().lower()
    _validar_unicidad(username, email, excluir_pk=usuario.pk)

    for campo in CAMPOS_EDITABLES:
        if campo in datos:
            setattr(usuario, campo, datos[campo])
    usuario.username = username
    usuario.email = email

    if datos.get("password"):
        usuario.set_password(datos["password"])

    usuario.save()
    logger.info("Usuario %s actualizado por %s", usuario.username, admin)
    return usuario


@transaction.atomic
def actualizar_perfil(*, usuario, avatar=None, firma=None):
    """
    El propio usuario cambia su avatar y su firma. Archivos vacíos
    conservan la URL anterior.
    """
    campos = []
    avatar_url = subir_archivo(avatar, carpeta="avatars", prefijo=f"usr{usuario.pk}-avatar")
    if avatar_url:
        usuario.avatar_url = avatar_url
        campos.append("avatar_url")

    firma_url = subir_archivo(firma, carpeta="firmas", prefijo=f"usr{usuario.pk}-firma")
    if firma_url:
        usuario.firma_url = firma_url
        campos.append("firma_url")

    if campos:
        usuario.save(update_fields=campos)
        logger.info("Perfil de %s actualizado (%s)", usuario.username, ", ".join(campos))
    return usuario


@transaction.atomic
def aprobar_usuario(*, admin, usuario):
    exigir_permiso(admin, GESTIONAR_USUARIOS)
    if usuario.estado == EstadoUsuario.ACTIVO:
        raise UsuarioError("La cuenta ya está activa.")
    usuario.estado = EstadoUsuario.ACTIVO
    usuario.is_active = True
    usuario.save(update_fields=["estado", "is_active"])
    logger.info("Usuario %s aprobado por %s", usuario.username, admin)
    return usuario


@transaction.atomic
def eliminar_usuario(*, admin, usuario) -> None:
    exigir_permiso(admin, GESTIONAR_USUARIOS)
    if usuario.pk == admin.pk:
        raise UsuarioError("No puedes eliminar tu propia cuenta.")
    username = usuario.username
    usuario.delete()
    logger.info("Usuario %s eliminado por %s", username, admin)


def buscar_por_credencial(credencial: str):
    """Usuario cuyo username o correo coincide (sin distinguir mayúsculas)."""
    credencial = (credencial or "").strip()
    if not credencial:
        return None
    Usuario = get_user_model()
    return (
        Usuario.objects.filter(Q(username__iexact=credencial) | Q(email__iexact=credencial))
        .order_by("pk")
        .first()
    )


def solicitar_reseteo_password(*, credencial: str, area: str, detalle: str = "") -> bool:
    """
    Avisa a los administradores que alguien pide un reseteo. Siempre
    responde True para no revelar si la cuenta existe.
    """
    usuario = buscar_por_credencial(credencial)
    if usuario is None:
        logger.warning("Reseteo solicitado para una cuenta inexistente: %s", credencial)
        return True

    crear_notificacion(
        destino=Area.ADMINISTRADOR,
        titulo="Solicitud de Reseteo de Contraseña",
        descripcion=(
            f"El usuario {usuario.nombre_completo or usuario.username} ({usuario.username}) "
            f'del área {area} solicita un reseteo. Motivo: "{detalle}"'
        ),
        enlace="/usuarios/",
    )
    logger.info("Reseteo de contraseña solicitado para %s", usuario.username)
    return True
