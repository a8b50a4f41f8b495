from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import render

from portal.services.tablero import obtener_datos_tablero


@login_required
def tablero(request):
    datos = obtener_datos_tablero(request.user)
    if datos["error"]:
        messages.error(request, "No se pudieron cargar los datos del panel.")
    return render(request, "web/tablero.html", datos)
