from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied
from django.db.models import Q
from django.http import JsonResponse
from django.shortcuts import get_object_or_404, redirect, render
from django.views.decorators.http import require_POST

from portal.models import EstadoReporte, ReporteSeguridad, TipoReporte
from portal.services.seguridad import (
    aprobar_solicitud,
    buscar_vehiculo_por_empleado,
    cerrar_reporte,
    crear_reporte,
    rechazar_solicitud,
    registrar_ingreso_vehiculo,
)
from portal.utils_roles import (
    APROBAR_SOLICITUD_SEGURIDAD,
    GESTIONAR_REPORTES,
    autorizar,
    usuario_es_administrador,
)
from web.forms import IngresoVehiculoForm, ReporteSeguridadForm
from web.views.base import ejecutar_servicio


def _reportes_visibles(user):
    """
    Seguridad Patrimonial ve toda la bitácora; Gerencia y Almacén ven las
    solicitudes dirigidas a su área.
    """
    qs = ReporteSeguridad.objects.all()
    if usuario_es_administrador(user) or autorizar(user, GESTIONAR_REPORTES):
        return qs
    return qs.filter(tipo=TipoReporte.SOLICITUD_PERMISO, area_destino=user.area)


@login_required
def reportes_list(request):
    qs = _reportes_visibles(request.user)

    tipo = request.GET.get("tipo")
    if tipo in TipoReporte.values:
        qs = qs.filter(tipo=tipo)

    estado = request.GET.get("estado")
    if estado in EstadoReporte.values:
        qs = qs.filter(estado=estado)

    q = request.GET.get("q")
    if q:
        qs = qs.filter(Q(titulo__icontains=q) | Q(codigo__icontains=q))

    context = {
        "reportes": qs[:200],
        "tipos": TipoReporte.choices,
        "estados": EstadoReporte.choices,
        "puede_gestionar": autorizar(request.user, GESTIONAR_REPORTES),
    }
    return render(request, "web/seguridad_list.html", context)


@login_required
def reporte_create(request):
    if not autorizar(request.user, GESTIONAR_REPORTES):
        raise PermissionDenied("Solo Seguridad Patrimonial registra reportes.")

    if request.method == "POST":
        form = ReporteSeguridadForm(request.POST, request.FILES)
        if form.is_valid():
            ok, reporte = ejecutar_servicio(
                request,
                crear_reporte,
                usuario=request.user,
                exito="Reporte registrado.",
                **form.cleaned_data,
            )
            if ok:
                return redirect("web:seguridad_detail", pk=reporte.pk)
    else:
        form = ReporteSeguridadForm()

    return render(request, "web/seguridad_form.html", {"form": form})


@login_required
def reporte_detail(request, pk):
    reporte = get_object_or_404(_reportes_visibles(request.user), pk=pk)
    context = {
        "reporte": reporte,
        "puede_revisar": (
            reporte.es_solicitud
            and reporte.estado == EstadoReporte.PENDIENTE
            and autorizar(request.user, APROBAR_SOLICITUD_SEGURIDAD)
        ),
        "puede_cerrar": (
            reporte.estado == EstadoReporte.ABIERTO
            and autorizar(request.user, GESTIONAR_REPORTES)
        ),
    }
    return render(request, "web/seguridad_detail.html", context)


@login_required
@require_POST
def reporte_aprobar(request, pk):
    reporte = get_object_or_404(ReporteSeguridad, pk=pk)
    ejecutar_servicio(
        request,
        aprobar_solicitud,
        reporte=reporte,
        usuario=request.user,
        exito=f"Solicitud {reporte.codigo} aprobada.",
    )
    return redirect("web:seguridad_detail", pk=reporte.pk)


@login_required
@require_POST
def reporte_rechazar(request, pk):
    reporte = get_object_or_404(ReporteSeguridad, pk=pk)
    ejecutar_servicio(
        request,
        rechazar_solicitud,
        reporte=reporte,
        usuario=request.user,
        exito=f"Solicitud {reporte.codigo} rechazada.",
    )
    return redirect("web:seguridad_detail", pk=reporte.pk)


@login_required
@require_POST
def reporte_cerrar(request, pk):
    reporte = get_object_or_404(ReporteSeguridad, pk=pk)
    ejecutar_servicio(
        request,
        cerrar_reporte,
        reporte=reporte,
        usuario=request.user,
        exito=f"Reporte {reporte.codigo} cerrado.",
    )
    return redirect("web:seguridad_detail", pk=reporte.pk)


@login_required
def ingreso_vehiculo(request):
    """
    Ingreso de vehículo de trabajador. Si el empleado ya tiene un vehículo
    registrado, el formulario se autocompleta vía api_buscar_vehiculo.
    """
    if not autorizar(request.user, GESTIONAR_REPORTES):
        raise PermissionDenied("Solo Seguridad Patrimonial registra ingresos.")

    if request.method == "POST":
        form = IngresoVehiculoForm(request.POST, request.FILES)
        if form.is_valid():
            datos = dict(form.cleaned_data)
            foto = datos.pop("foto", None)
            ok, reporte = ejecutar_servicio(
                request,
                registrar_ingreso_vehiculo,
                usuario=request.user,
                datos=datos,
                foto=foto,
                exito="Ingreso vehicular registrado.",
            )
            if ok:
                return redirect("web:seguridad_detail", pk=reporte.pk)
    else:
        form = IngresoVehiculoForm()

    return render(request, "web/seguridad_vehiculo.html", {"form": form})


@login_required
def api_buscar_vehiculo(request):
    """
    GET params:
      - nombre: nombre del empleado (sin distinguir mayúsculas)
    """
    if not autorizar(request.user, GESTIONAR_REPORTES):
        return JsonResponse({"ok": False, "error": "Sin acceso."}, status=403)

    nombre = request.GET.get("nombre", "")
    if not nombre.strip():
        return JsonResponse({"ok": False, "error": "Falta el nombre del empleado."}, status=400)

    vehiculo = buscar_vehiculo_por_empleado(nombre)
    if vehiculo is None:
        return JsonResponse({"ok": True, "encontrado": False})

    return JsonResponse(
        {
            "ok": True,
            "encontrado": True,
            "vehiculo": {
                "nombre_empleado": vehiculo.nombre_empleado,
                "area_empleado": vehiculo.area_empleado,
                "tipo_vehiculo": vehiculo.tipo_vehiculo,
                "modelo_vehiculo": vehiculo.modelo_vehiculo,
                "placa": vehiculo.placa,
            },
        }
    )
