from django.contrib import admin

from .utils_roles import usuario_es_administrador


class SoloAreaUsuarioMixin(admin.ModelAdmin):
    """
    Limita los registros al área del usuario del admin.
    Los administradores ven todo. `campo_area` indica qué campo del modelo
    guarda el área dueña del registro.
    """

    campo_area = "area"

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if usuario_es_administrador(request.user):
            return qs
        return qs.filter(**{self.campo_area: request.user.area})
