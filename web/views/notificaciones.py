from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST

from portal.models import Notificacion
from portal.services.notificaciones import (
    contar_no_leidas,
    marcar_como_leida,
    marcar_todas_como_leidas,
    notificaciones_para,
)
from portal.utils_roles import VER_NOTIFICACION, exigir_permiso


@login_required
def notificaciones_list(request):
    return render(
        request,
        "web/notificaciones.html",
        {"notificaciones": notificaciones_para(request.user, limite=100)},
    )


@login_required
@require_POST
def notificacion_leer(request, pk):
    """
    Marca la notificación como leída y lleva al enlace que trae, si es
    una ruta del propio portal.
    """
    notificacion = get_object_or_404(Notificacion, pk=pk)
    exigir_permiso(request.user, VER_NOTIFICACION, notificacion)
    marcar_como_leida(notificacion)

    destino = notificacion.enlace
    if destino and url_has_allowed_host_and_scheme(destino, allowed_hosts={request.get_host()}):
        return redirect(destino)
    return redirect("web:notificaciones")


@login_required
@require_POST
def notificaciones_leer_todas(request):
    marcar_todas_como_leidas(request.user)
    return redirect("web:notificaciones")


@login_required
def api_notificaciones(request):
    """
    Consulta incremental para la campana del menú.

    GET params:
      - desde: id de la última notificación recibida (opcional)
    """
    desde = request.GET.get("desde")
    try:
        desde = int(desde) if desde else None
    except ValueError:
        return JsonResponse({"ok": False, "error": "Parámetro 'desde' inválido."}, status=400)

    notificaciones = [
        {
            "id": n.pk,
            "titulo": n.titulo,
            "descripcion": n.descripcion,
            "enlace": n.enlace,
            "leida": n.leida,
            "creada_en": n.creada_en.isoformat(),
        }
        for n in notificaciones_para(request.user, desde=desde)
    ]
    return JsonResponse(
        {
            "ok": True,
            "notificaciones": notificaciones,
            "no_leidas": contar_no_leidas(request.user),
        }
    )
