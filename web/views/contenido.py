from django.contrib.auth.decorators import login_required
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from portal.models import Comunicado, PublicacionGaleria
from portal.services.contenido import (
    aprobar_publicacion,
    crear_comunicado,
    crear_publicacion,
    publicaciones_visibles,
    rechazar_publicacion,
)
from portal.utils_roles import APROBAR_PUBLICACION, PUBLICAR_COMUNICADO, autorizar
from web.forms import ComunicadoForm, PublicacionForm
from web.views.base import ejecutar_servicio


# Galería


@login_required
def galeria(request):
    """
    Galería de logros: listado visible para el usuario y formulario de
    nueva publicación en la misma página.
    """
    if request.method == "POST":
        form = PublicacionForm(request.POST, request.FILES)
        if form.is_valid():
            ok, _ = ejecutar_servicio(
                request,
                crear_publicacion,
                usuario=request.user,
                exito="Publicación enviada a Gerencia para su revisión.",
                **form.cleaned_data,
            )
            if ok:
                return redirect("web:galeria")
    else:
        form = PublicacionForm()

    context = {
        "publicaciones": publicaciones_visibles(request.user)[:100],
        "form": form,
        "puede_revisar": autorizar(request.user, APROBAR_PUBLICACION),
    }
    return render(request, "web/galeria.html", context)


@login_required
@require_POST
def publicacion_aprobar(request, pk):
    publicacion = get_object_or_404(PublicacionGaleria, pk=pk)
    ejecutar_servicio(
        request,
        aprobar_publicacion,
        publicacion=publicacion,
        usuario=request.user,
        exito="Publicación aprobada.",
    )
    return redirect("web:galeria")


@login_required
@require_POST
def publicacion_rechazar(request, pk):
    publicacion = get_object_or_404(PublicacionGaleria, pk=pk)
    ejecutar_servicio(
        request,
        rechazar_publicacion,
        publicacion=publicacion,
        usuario=request.user,
        exito="Publicación rechazada.",
    )
    return redirect("web:galeria")


# Comunicados


@login_required
def comunicados(request):
    puede_publicar = autorizar(request.user, PUBLICAR_COMUNICADO)

    if request.method == "POST":
        form = ComunicadoForm(request.POST, request.FILES)
        if form.is_valid():
            ok, _ = ejecutar_servicio(
                request,
                crear_comunicado,
                usuario=request.user,
                exito="Comunicado publicado.",
                **form.cleaned_data,
            )
            if ok:
                return redirect("web:comunicados")
    else:
        form = ComunicadoForm()

    context = {
        "comunicados": Comunicado.objects.all()[:50],
        "form": form if puede_publicar else None,
    }
    return render(request, "web/comunicados.html", context)
