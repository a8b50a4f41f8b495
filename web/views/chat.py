from django.contrib.auth.decorators import login_required
from django.http import Http404, JsonResponse
from django.shortcuts import render
from django.views.decorators.http import require_POST

from portal.models import CANAL_GENERAL, canales_chat
from portal.services.chat import (
    ChatError,
    enviar_mensaje,
    mensajes_del_canal,
    registrar_presencia,
    usuarios_en_linea,
)


def _mensaje_a_dict(mensaje) -> dict:
    return {
        "id": mensaje.pk,
        "canal": mensaje.canal,
        "remitente": mensaje.nombre_remitente,
        "contenido": mensaje.contenido,
        "enviado_en": mensaje.enviado_en.isoformat(),
    }


@login_required
def chat(request, canal=CANAL_GENERAL):
    if canal not in canales_chat():
        raise Http404("Canal desconocido.")

    registrar_presencia(usuario=request.user, canal=canal)
    context = {
        "canal": canal,
        "canales": canales_chat(),
        "mensajes": mensajes_del_canal(canal),
        "en_linea": usuarios_en_linea(canal),
    }
    return render(request, "web/chat.html", context)


@login_required
def api_chat_mensajes(request, canal):
    """
    Consulta incremental del canal. Renueva la presencia del usuario.

    GET params:
      - desde: id del último mensaje recibido (opcional)
    """
    desde = request.GET.get("desde")
    try:
        desde = int(desde) if desde else None
    except ValueError:
        return JsonResponse({"ok": False, "error": "Parámetro 'desde' inválido."}, status=400)

    try:
        registrar_presencia(usuario=request.user, canal=canal)
        mensajes = mensajes_del_canal(canal, desde=desde)
    except ChatError as exc:
        return JsonResponse({"ok": False, "error": str(exc)}, status=404)

    return JsonResponse(
        {
            "ok": True,
            "mensajes": [_mensaje_a_dict(m) for m in mensajes],
            "en_linea": usuarios_en_linea(canal),
        }
    )


@login_required
@require_POST
def api_chat_enviar(request, canal):
    try:
        mensaje = enviar_mensaje(
            usuario=request.user,
            canal=canal,
            contenido=request.POST.get("contenido", ""),
        )
    except ChatError as exc:
        return JsonResponse({"ok": False, "error": str(exc)}, status=400)

    return JsonResponse({"ok": True, "mensaje": _mensaje_a_dict(mensaje)}, status=201)
