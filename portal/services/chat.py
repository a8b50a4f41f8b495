import logging
import time

from django.conf import settings
from django.core.cache import cache

from portal.models import MensajeChat, canales_chat
from portal.utils_roles import USAR_CHAT, exigir_permiso

logger = logging.getLogger(__name__)

CLAVE_PRESENCIA = "chat:presencia:{canal}"


class ChatError(Exception):
    """Errores de dominio del chat interno."""
    pass


def _validar_canal(canal: str) -> None:
    if canal not in canales_chat():
        raise ChatError(f"Canal desconocido: {canal}")


def enviar_mensaje(*, usuario, canal: str, contenido: str) -> MensajeChat:
    exigir_permiso(usuario, USAR_CHAT)
    _validar_canal(canal)

    contenido = (contenido or "").strip()
    if not contenido:
        raise ChatError("El mensaje no puede estar vacío.")

    mensaje = MensajeChat.objects.create(
        canal=canal,
        remitente=usuario,
        nombre_remitente=usuario.nombre_completo or usuario.username,
        contenido=contenido,
    )
    logger.debug("Mensaje %s enviado a #%s por %s", mensaje.pk, canal, usuario)
    return mensaje


def mensajes_del_canal(canal: str, *, desde: int | None = None, limite: int = 100):
    """
    Mensajes del canal en orden cronológico. Con `desde` devuelve solo los
    posteriores a ese id; sin cursor, los últimos `limite`.
    """
    _validar_canal(canal)
    qs = MensajeChat.objects.filter(canal=canal).select_related("remitente")
    if desde is not None:
        return list(qs.filter(pk__gt=desde).order_by("enviado_en", "id")[:limite])
    ultimos = list(qs.order_by("-enviado_en", "-id")[:limite])
    ultimos.reverse()
    return ultimos


def _ventana() -> int:
    return getattr(settings, "PORTAL_VENTANA_PRESENCIA_SEGUNDOS", 60)


def registrar_presencia(*, usuario, canal: str) -> None:
    """
    Marca al usuario como presente en el canal. La presencia caduca si no
    se renueva dentro de la ventana configurada.
    """
    _validar_canal(canal)
    clave = CLAVE_PRESENCIA.format(canal=canal)
    ahora = time.time()
    presentes = cache.get(clave) or {}
    presentes = {pk: dato for pk, dato in presentes.items() if ahora - dato["visto"] <= _ventana()}
    presentes[usuario.pk] = {
        "nombre": usuario.nombre_completo or usuario.username,
        "area": usuario.area,
        "visto": ahora,
    }
    cache.set(clave, presentes, timeout=_ventana() * 2)


def usuarios_en_linea(canal: str) -> list[dict]:
    _validar_canal(canal)
    ahora = time.time()
    presentes = cache.get(CLAVE_PRESENCIA.format(canal=canal)) or {}
    return sorted(
        (
            {"id": pk, "nombre": dato["nombre"], "area": dato["area"]}
            for pk, dato in presentes.items()
            if ahora - dato["visto"] <= _ventana()
        ),
        key=lambda d: d["nombre"],
    )
