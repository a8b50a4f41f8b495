from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from portal.models import EstadoPedido, Pedido
from portal.services.pedidos import (
    aprobar_pedido,
    crear_pedido,
    despachar_pedido,
    rechazar_pedido,
)
from portal.utils_roles import (
    APROBAR_PEDIDO,
    DESPACHAR_PEDIDO,
    VER_HISTORIAL_PEDIDOS,
    autorizar,
)
from web.forms import PedidoForm, PedidoItemFormSet
from web.views.base import ejecutar_servicio


def _pedidos_visibles(user):
    qs = Pedido.objects.all()
    if not autorizar(user, VER_HISTORIAL_PEDIDOS):
        qs = qs.filter(area_solicitante=user.area)
    return qs


def _puede_ver(user, pedido: Pedido) -> bool:
    return (
        pedido.area_solicitante == user.area
        or autorizar(user, VER_HISTORIAL_PEDIDOS)
        or autorizar(user, APROBAR_PEDIDO)
        or autorizar(user, DESPACHAR_PEDIDO)
    )


@login_required
def pedidos_list(request):
    """
    Pedidos visibles para el usuario. Filtro opcional por estado.
    """
    qs = _pedidos_visibles(request.user).prefetch_related("items")

    estado = request.GET.get("estado")
    if estado in EstadoPedido.values:
        qs = qs.filter(estado=estado)

    context = {
        "pedidos": qs.order_by("-fecha", "-id"),
        "estados": EstadoPedido.choices,
        "estado_actual": estado,
        "puede_revisar": autorizar(request.user, APROBAR_PEDIDO),
        "puede_despachar": autorizar(request.user, DESPACHAR_PEDIDO),
    }
    return render(request, "web/pedidos_list.html", context)


@login_required
def pedido_create(request):
    """
    Encabezado + líneas (formset). El stock se valida al crear, pero no
    se reserva hasta el despacho.
    """
    if request.method == "POST":
        form = PedidoForm(request.POST)
        formset = PedidoItemFormSet(request.POST, prefix="items")
        if form.is_valid() and formset.is_valid():
            items = [f.cleaned_data for f in formset.forms if f.cleaned_data]
            ok, pedido = ejecutar_servicio(
                request,
                crear_pedido,
                usuario=request.user,
                items=items,
                centro_costo=form.cleaned_data["centro_costo"],
                cultivo=form.cleaned_data["cultivo"],
                observaciones=form.cleaned_data["observaciones"],
                exito="Pedido enviado a Gerencia para su aprobación.",
            )
            if ok:
                return redirect("web:pedidos_detail", pk=pedido.pk)
    else:
        form = PedidoForm()
        formset = PedidoItemFormSet(prefix="items")

    return render(
        request,
        "web/pedidos_form.html",
        {"form": form, "formset": formset},
    )


@login_required
def pedido_detail(request, pk):
    pedido = get_object_or_404(Pedido.objects.prefetch_related("items", "movimientos"), pk=pk)
    if not _puede_ver(request.user, pedido):
        raise PermissionDenied("No tienes acceso a este pedido.")

    context = {
        "pedido": pedido,
        "items": pedido.items.all(),
        "movimientos": pedido.movimientos.all(),
        "puede_revisar": pedido.puede_revisarse and autorizar(request.user, APROBAR_PEDIDO),
        "puede_despachar": pedido.puede_despacharse and autorizar(request.user, DESPACHAR_PEDIDO),
    }
    return render(request, "web/pedidos_detail.html", context)


@login_required
def pedido_comprobante(request, pk):
    """
    Comprobante imprimible de un pedido despachado.
    """
    pedido = get_object_or_404(Pedido.objects.prefetch_related("items"), pk=pk)
    if not _puede_ver(request.user, pedido):
        raise PermissionDenied("No tienes acceso a este pedido.")
    if pedido.estado != EstadoPedido.DESPACHADO:
        return redirect("web:pedidos_detail", pk=pedido.pk)
    return render(request, "web/pedidos_comprobante.html", {"pedido": pedido, "items": pedido.items.all()})


@login_required
@require_POST
def pedido_aprobar(request, pk):
    pedido = get_object_or_404(Pedido, pk=pk)
    ejecutar_servicio(
        request,
        aprobar_pedido,
        pedido=pedido,
        usuario=request.user,
        exito=f"Pedido {pedido.codigo} aprobado.",
    )
    return redirect("web:pedidos_detail", pk=pedido.pk)


@login_required
@require_POST
def pedido_rechazar(request, pk):
    pedido = get_object_or_404(Pedido, pk=pk)
    ejecutar_servicio(
        request,
        rechazar_pedido,
        pedido=pedido,
        usuario=request.user,
        exito=f"Pedido {pedido.codigo} rechazado.",
    )
    return redirect("web:pedidos_detail", pk=pedido.pk)


@login_required
@require_POST
def pedido_despachar(request, pk):
    pedido = get_object_or_404(Pedido, pk=pk)
    ejecutar_servicio(
        request,
        despachar_pedido,
        pedido=pedido,
        usuario=request.user,
        exito=f"Pedido {pedido.codigo} despachado.",
    )
    return redirect("web:pedidos_detail", pk=pedido.pk)
