from django.contrib import messages
from django.contrib.auth import views as auth_views
from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect, render

from portal.services.usuarios import (
    actualizar_perfil,
    registrar_usuario,
    solicitar_reseteo_password,
)
from web.forms import LoginForm, PerfilForm, RegistroForm, ReseteoPasswordForm
from web.views.base import ejecutar_servicio


class PortalLoginView(auth_views.LoginView):
    template_name = "web/login.html"
    authentication_form = LoginForm
    redirect_authenticated_user = True


def registro(request):
    """
    Registro público. La cuenta queda pendiente hasta que un administrador
    la apruebe.
    """
    if request.user.is_authenticated:
        return redirect("web:tablero")

    if request.method == "POST":
        form = RegistroForm(request.POST)
        if form.is_valid():
            ok, _ = ejecutar_servicio(
                request,
                registrar_usuario,
                datos=form.cleaned_data,
                exito="Registro enviado. Un administrador revisará tu cuenta.",
            )
            if ok:
                return redirect("web:login")
    else:
        form = RegistroForm()

    return render(request, "web/registro.html", {"form": form})


def reseteo_password(request):
    if request.method == "POST":
        form = ReseteoPasswordForm(request.POST)
        if form.is_valid():
            solicitar_reseteo_password(
                credencial=form.cleaned_data["credencial"],
                area=form.cleaned_data["area"],
                detalle=form.cleaned_data["detalle"],
            )
            messages.success(
                request,
                "Solicitud enviada. Un administrador se pondrá en contacto contigo.",
            )
            return redirect("web:login")
    else:
        form = ReseteoPasswordForm()

    return render(request, "web/reseteo_password.html", {"form": form})


@login_required
def perfil(request):
    if request.method == "POST":
        form = PerfilForm(request.POST, request.FILES)
        if form.is_valid():
            ok, _ = ejecutar_servicio(
                request,
                actualizar_perfil,
                usuario=request.user,
                avatar=form.cleaned_data.get("avatar"),
                firma=form.cleaned_data.get("firma"),
                exito="Perfil actualizado.",
            )
            if ok:
                return redirect("web:perfil")
    else:
        form = PerfilForm()

    return render(request, "web/perfil.html", {"form": form})
