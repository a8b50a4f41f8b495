from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.shortcuts import redirect, render

from portal.services.configuracion import actualizar_configuracion, obtener_configuracion
from portal.utils_roles import GESTIONAR_CONFIGURACION, autorizar
from web.forms import ConfiguracionEmpresaForm
from web.views.base import ejecutar_servicio


@login_required
def configuracion(request):
    if not autorizar(request.user, GESTIONAR_CONFIGURACION):
        raise PermissionDenied("Solo los administradores cambian la configuración.")

    config = obtener_configuracion()
    if request.method == "POST":
        form = ConfiguracionEmpresaForm(request.POST, request.FILES)
        if form.is_valid():
            ok, _ = ejecutar_servicio(
                request,
                actualizar_configuracion,
                usuario=request.user,
                whatsapp=form.cleaned_data["whatsapp_soporte"],
                logo=form.cleaned_data.get("logo"),
                fondo_login=form.cleaned_data.get("fondo_login"),
                exito="Configuración guardada.",
            )
            if ok:
                return redirect("web:configuracion")
    else:
        form = ConfiguracionEmpresaForm(initial={"whatsapp_soporte": config.whatsapp_soporte})

    return render(request, "web/configuracion.html", {"form": form, "config": config})
