from django.contrib.auth import get_user_model
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.db.models import Q
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from portal.models import Area, EstadoUsuario
from portal.services.usuarios import (
    actualizar_usuario,
    aprobar_usuario,
    crear_usuario,
    eliminar_usuario,
)
from portal.utils_roles import GESTIONAR_USUARIOS, autorizar
from web.forms import UsuarioForm
from web.views.base import ejecutar_servicio


def _exigir_gestion(user):
    if not autorizar(user, GESTIONAR_USUARIOS):
        raise PermissionDenied("Solo los administradores gestionan usuarios.")


@login_required
def usuarios_list(request):
    _exigir_gestion(request.user)
    Usuario = get_user_model()

    qs = Usuario.objects.all()
    q = request.GET.get("q")
    if q:
        qs = qs.filter(
            Q(username__icontains=q)
            | Q(email__icontains=q)
            | Q(first_name__icontains=q)
            | Q(last_name__icontains=q)
        )

    area = request.GET.get("area")
    if area in Area.values:
        qs = qs.filter(area=area)

    context = {
        "usuarios": qs,
        "pendientes": Usuario.objects.filter(estado=EstadoUsuario.PENDIENTE),
        "areas": Area.choices,
    }
    return render(request, "web/usuarios_list.html", context)


@login_required
def usuario_create(request):
    _exigir_gestion(request.user)

    if request.method == "POST":
        form = UsuarioForm(request.POST)
        if form.is_valid():
            ok, _ = ejecutar_servicio(
                request,
                crear_usuario,
                admin=request.user,
                datos=form.cleaned_data,
                exito="Usuario creado.",
            )
            if ok:
                return redirect("web:usuarios_list")
    else:
        form = UsuarioForm()

    return render(request, "web/usuarios_form.html", {"form": form, "modo": "crear"})


@login_required
def usuario_update(request, pk):
    _exigir_gestion(request.user)
    usuario = get_object_or_404(get_user_model(), pk=pk)

    if request.method == "POST":
        form = UsuarioForm(request.POST, instance=usuario)
        if form.is_valid():
            ok, _ = ejecutar_servicio(
                request,
                actualizar_usuario,
                admin=request.user,
                usuario=usuario,
                datos=form.cleaned_data,
                exito="Usuario actualizado.",
            )
            if ok:
                return redirect("web:usuarios_list")
    else:
        form = UsuarioForm(instance=usuario)

    return render(
        request,
        "web/usuarios_form.html",
        {"form": form, "modo": "editar", "usuario_editado": usuario},
    )


@login_required
@require_POST
def usuario_aprobar(request, pk):
    usuario = get_object_or_404(get_user_model(), pk=pk)
    ejecutar_servicio(
        request,
        aprobar_usuario,
        admin=request.user,
        usuario=usuario,
        exito=f"Cuenta de {usuario.username} aprobada.",
    )
    return redirect("web:usuarios_list")


@login_required
@require_POST
def usuario_eliminar(request, pk):
    usuario = get_object_or_404(get_user_model(), pk=pk)
    ejecutar_servicio(
        request,
        eliminar_usuario,
        admin=request.user,
        usuario=usuario,
        exito=f"Usuario {usuario.username} eliminado.",
    )
    return redirect("web:usuarios_list")
