from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import PermissionDenied
from django.db.models import Q
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST
from django.views.generic import ListView

from portal.models import CategoriaProducto, LoteProducto, MovimientoInventario, Producto
from portal.services.inventario import (
    agregar_stock,
    crear_producto,
    eliminar_producto,
    historial_inventario,
    historial_producto,
    incrementar_lote,
    obtener_lotes_por_vencer,
    obtener_lotes_vencidos,
    productos_con_stock,
)
from portal.utils_roles import GESTIONAR_PRODUCTOS, VER_HISTORIAL_INVENTARIO, autorizar
from web.forms import AgregarStockForm, IncrementarLoteForm, ProductoForm
from web.views.base import ejecutar_servicio


class ProductoListView(LoginRequiredMixin, ListView):
    template_name = "web/productos_list.html"
    context_object_name = "productos"
    paginate_by = 20

    def get_queryset(self):
        qs = productos_con_stock().prefetch_related("lotes")

        q = self.request.GET.get("q")
        if q:
            qs = qs.filter(Q(nombre__icontains=q) | Q(sku__icontains=q))

        categoria = self.request.GET.get("categoria")
        if categoria:
            qs = qs.filter(categoria=categoria)

        return qs.order_by("nombre")

    def get_context_data(self, **kwargs):
        ctx = super().get_context_data(**kwargs)
        ctx["categorias"] = CategoriaProducto.choices
        ctx["puede_gestionar"] = autorizar(self.request.user, GESTIONAR_PRODUCTOS)
        ctx["lotes_por_vencer"] = obtener_lotes_por_vencer()
        ctx["lotes_vencidos"] = obtener_lotes_vencidos()
        return ctx


@login_required
def producto_create(request):
    if not autorizar(request.user, GESTIONAR_PRODUCTOS):
        raise PermissionDenied("No tienes permisos para gestionar productos.")

    if request.method == "POST":
        form = ProductoForm(request.POST, request.FILES)
        if form.is_valid():
            ok, producto = ejecutar_servicio(
                request,
                crear_producto,
                usuario=request.user,
                datos=form.datos_producto(),
                codigo_lote=form.cleaned_data["codigo_lote"],
                cantidad_inicial=form.cleaned_data["cantidad_inicial"],
                fecha_vencimiento=form.cleaned_data.get("fecha_vencimiento"),
                imagenes=form.cleaned_data.get("imagenes"),
                ficha_tecnica=form.cleaned_data.get("ficha_tecnica"),
                exito="Producto creado correctamente.",
            )
            if ok:
                return redirect("web:productos_detail", pk=producto.pk)
    else:
        form = ProductoForm()

    return render(request, "web/productos_form.html", {"form": form})


@login_required
def producto_detail(request, pk):
    producto = get_object_or_404(productos_con_stock(), pk=pk)
    puede_ver_historial = autorizar(request.user, VER_HISTORIAL_INVENTARIO)

    context = {
        "producto": producto,
        "lotes": producto.lotes.all(),
        "historial": historial_producto(producto)[:50] if puede_ver_historial else None,
        "puede_gestionar": autorizar(request.user, GESTIONAR_PRODUCTOS),
        "form_stock": AgregarStockForm(),
    }
    return render(request, "web/productos_detail.html", context)


@login_required
@require_POST
def producto_agregar_stock(request, pk):
    producto = get_object_or_404(Producto, pk=pk)
    form = AgregarStockForm(request.POST)
    if form.is_valid():
        ejecutar_servicio(
            request,
            agregar_stock,
            usuario=request.user,
            producto=producto,
            exito="Stock agregado correctamente.",
            **form.cleaned_data,
        )
    else:
        for errores in form.errors.values():
            for error in errores:
                messages.error(request, error)
    return redirect("web:productos_detail", pk=producto.pk)


@login_required
@require_POST
def lote_incrementar(request, pk):
    lote = get_object_or_404(LoteProducto, pk=pk)
    form = IncrementarLoteForm(request.POST)
    if form.is_valid():
        ejecutar_servicio(
            request,
            incrementar_lote,
            usuario=request.user,
            lote=lote,
            cantidad=form.cleaned_data["cantidad"],
            exito=f"Lote {lote.codigo} actualizado.",
        )
    else:
        for errores in form.errors.values():
            for error in errores:
                messages.error(request, error)
    return redirect("web:productos_detail", pk=lote.producto_id)


@login_required
@require_POST
def producto_eliminar(request, pk):
    producto = get_object_or_404(Producto, pk=pk)
    ok, _ = ejecutar_servicio(
        request,
        eliminar_producto,
        usuario=request.user,
        producto=producto,
        exito=f"Producto {producto.sku} eliminado.",
    )
    if ok:
        return redirect("web:productos_list")
    return redirect("web:productos_detail", pk=pk)


class HistorialInventarioView(LoginRequiredMixin, ListView):
    template_name = "web/inventario_historial.html"
    context_object_name = "movimientos"
    paginate_by = 50

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated and not autorizar(request.user, VER_HISTORIAL_INVENTARIO):
            raise PermissionDenied("No tienes permisos para ver el historial de inventario.")
        return super().dispatch(request, *args, **kwargs)

    def get_queryset(self):
        tipo = self.request.GET.get("tipo")
        if tipo not in (MovimientoInventario.TIPO_ENTRADA, MovimientoInventario.TIPO_SALIDA):
            tipo = None
        qs = historial_inventario(tipo=tipo)
        q = self.request.GET.get("q")
        if q:
            qs = qs.filter(Q(nombre_producto__icontains=q) | Q(sku__icontains=q))
        return qs
