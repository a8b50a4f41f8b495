from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from portal.models import MovimientoCombustible
from portal.services.combustible import (
    despachar_combustible,
    historial_combustible,
    obtener_niveles,
    registrar_abastecimiento,
)
from portal.utils_roles import GESTIONAR_COMBUSTIBLE, VER_HISTORIAL_COMBUSTIBLE, autorizar
from web.forms import AbastecimientoForm, DespachoCombustibleForm
from web.views.base import ejecutar_servicio


@login_required
def combustible_panel(request):
    """
    Niveles de los tanques, formularios de ingreso/despacho y, para los
    roles que corresponda, el historial.
    """
    puede_ver_historial = autorizar(request.user, VER_HISTORIAL_COMBUSTIBLE)
    historial = None
    if puede_ver_historial:
        tipo = request.GET.get("tipo")
        if tipo not in (MovimientoCombustible.TIPO_ABASTECIMIENTO, MovimientoCombustible.TIPO_CONSUMO):
            tipo = None
        historial = historial_combustible(tipo=tipo)[:100]

    context = {
        "niveles": obtener_niveles(),
        "historial": historial,
        "puede_gestionar": autorizar(request.user, GESTIONAR_COMBUSTIBLE),
        "form_abastecimiento": AbastecimientoForm(),
        "form_despacho": DespachoCombustibleForm(initial={"area": request.user.area}),
    }
    return render(request, "web/combustible.html", context)


def _mostrar_errores(request, form):
    for errores in form.errors.values():
        for error in errores:
            messages.error(request, error)


@login_required
@require_POST
def combustible_abastecer(request):
    form = AbastecimientoForm(request.POST)
    if form.is_valid():
        ejecutar_servicio(
            request,
            registrar_abastecimiento,
            usuario=request.user,
            exito="Ingreso de combustible registrado.",
            **form.cleaned_data,
        )
    else:
        _mostrar_errores(request, form)
    return redirect("web:combustible")


@login_required
@require_POST
def combustible_despachar(request):
    form = DespachoCombustibleForm(request.POST)
    if form.is_valid():
        ok, movimiento = ejecutar_servicio(
            request,
            despachar_combustible,
            usuario=request.user,
            exito="Despacho de combustible registrado.",
            **form.cleaned_data,
        )
        if ok:
            return redirect("web:combustible_comprobante", pk=movimiento.pk)
    else:
        _mostrar_errores(request, form)
    return redirect("web:combustible")


@login_required
def combustible_comprobante(request, pk):
    """Vale imprimible de un despacho de combustible."""
    movimiento = get_object_or_404(
        MovimientoCombustible,
        pk=pk,
        tipo=MovimientoCombustible.TIPO_CONSUMO,
    )
    return render(request, "web/combustible_comprobante.html", {"movimiento": movimiento})
