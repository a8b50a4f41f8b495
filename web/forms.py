from django import forms
from django.contrib.auth import get_user_model
from django.contrib.auth.forms import AuthenticationForm
from django.forms import formset_factory

from portal.models import (
    Area,
    Cultivo,
    Producto,
    TipoCombustible,
    TipoReporte,
    TipoVehiculo,
    Turno,
)
from portal.services.seguridad import AREAS_DESTINO_SOLICITUD


class MultipleFileInput(forms.ClearableFileInput):
    allow_multiple_selected = True


class MultipleFileField(forms.FileField):
    """Campo de archivo que acepta varias imágenes en un solo input."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("widget", MultipleFileInput(attrs={"class": "form-control"}))
        kwargs.setdefault("required", False)
        super().__init__(*args, **kwargs)

    def clean(self, data, initial=None):
        single_file_clean = super().clean
        if isinstance(data, (list, tuple)):
            return [single_file_clean(d, initial) for d in data]
        return [single_file_clean(data, initial)] if data else []


# Cuentas


class LoginForm(AuthenticationForm):
    username = forms.CharField(
        label="Usuario o correo",
        widget=forms.TextInput(attrs={"class": "form-control", "autofocus": True}),
    )
    password = forms.CharField(
        label="Contraseña",
        strip=False,
        widget=forms.PasswordInput(attrs={"class": "form-control"}),
    )

    error_messages = {
        "invalid_login": "Credenciales incorrectas.",
        "inactive": "Tu cuenta está pendiente de aprobación.",
    }


class RegistroForm(forms.Form):
    first_name = forms.CharField(label="Nombre", max_length=150, widget=forms.TextInput(attrs={"class": "form-control"}))
    last_name = forms.CharField(label="Apellido", max_length=150, widget=forms.TextInput(attrs={"class": "form-control"}))
    username = forms.CharField(label="Usuario", max_length=150, widget=forms.TextInput(attrs={"class": "form-control"}))
    email = forms.EmailField(label="Correo", widget=forms.EmailInput(attrs={"class": "form-control"}))
    area = forms.ChoiceField(
        label="Área",
        choices=[c for c in Area.choices if c[0] != Area.ADMINISTRADOR],
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    telefono_whatsapp = forms.CharField(
        label="WhatsApp",
        max_length=30,
        required=False,
        widget=forms.TextInput(attrs={"class": "form-control"}),
    )
    password = forms.CharField(label="Contraseña", widget=forms.PasswordInput(attrs={"class": "form-control"}))
    password_confirmacion = forms.CharField(
        label="Repite la contraseña",
        widget=forms.PasswordInput(attrs={"class": "form-control"}),
    )

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("password") != cleaned.get("password_confirmacion"):
            self.add_error("password_confirmacion", "Las contraseñas no coinciden.")
        return cleaned


class ReseteoPasswordForm(forms.Form):
    credencial = forms.CharField(
        label="Usuario o correo",
        max_length=254,
        widget=forms.TextInput(attrs={"class": "form-control"}),
    )
    area = forms.ChoiceField(label="Área", choices=Area.choices, widget=forms.Select(attrs={"class": "form-select"}))
    detalle = forms.CharField(
        label="Motivo",
        required=False,
        widget=forms.Textarea(attrs={"class": "form-control", "rows": 3}),
    )


class UsuarioForm(forms.ModelForm):
    """
    Alta y edición de cuentas desde la gestión de usuarios. En la edición
    la contraseña es opcional.
    """

    password = forms.CharField(
        label="Contraseña",
        required=False,
        widget=forms.PasswordInput(attrs={"class": "form-control"}, render_value=False),
    )

    class Meta:
        model = get_user_model()
        fields = ["username", "first_name", "last_name", "email", "rol", "area", "telefono_whatsapp"]
        widgets = {
            "username": forms.TextInput(attrs={"class": "form-control"}),
            "first_name": forms.TextInput(attrs={"class": "form-control"}),
            "last_name": forms.TextInput(attrs={"class": "form-control"}),
            "email": forms.EmailInput(attrs={"class": "form-control"}),
            "rol": forms.Select(attrs={"class": "form-select"}),
            "area": forms.Select(attrs={"class": "form-select"}),
            "telefono_whatsapp": forms.TextInput(attrs={"class": "form-control"}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance.pk is None:
            self.fields["password"].required = True

    def validate_unique(self):
        # Usuario y correo duplicados los informa el servicio de usuarios
        pass


class PerfilForm(forms.Form):
    avatar = forms.FileField(label="Avatar", required=False, widget=forms.ClearableFileInput(attrs={"class": "form-control", "accept": "image/*"}))
    firma = forms.FileField(label="Firma", required=False, widget=forms.ClearableFileInput(attrs={"class": "form-control", "accept": "image/*"}))


# Inventario


class ProductoForm(forms.ModelForm):
    codigo_lote = forms.CharField(
        label="Lote inicial",
        max_length=100,
        widget=forms.TextInput(attrs={"class": "form-control"}),
    )
    cantidad_inicial = forms.DecimalField(
        label="Stock inicial",
        min_value=0,
        max_digits=14,
        decimal_places=2,
        widget=forms.NumberInput(attrs={"class": "form-control", "step": "0.01"}),
    )
    fecha_vencimiento = forms.DateField(
        label="Vencimiento",
        required=False,
        widget=forms.DateInput(attrs={"type": "date", "class": "form-control"}),
    )
    imagenes = MultipleFileField(label="Imágenes")
    ficha_tecnica = forms.FileField(
        label="Ficha técnica",
        required=False,
        widget=forms.ClearableFileInput(attrs={"class": "form-control"}),
    )

    class Meta:
        model = Producto
        fields = [
            "sku",
            "nombre",
            "descripcion",
            "categoria",
            "area",
            "cultivo",
            "ubicacion",
            "unidad",
        ]
        widgets = {
            "sku": forms.TextInput(attrs={"class": "form-control"}),
            "nombre": forms.TextInput(attrs={"class": "form-control"}),
            "descripcion": forms.Textarea(attrs={"class": "form-control", "rows": 3}),
            "categoria": forms.Select(attrs={"class": "form-select"}),
            "area": forms.Select(attrs={"class": "form-select"}),
            "cultivo": forms.Select(attrs={"class": "form-select"}),
            "ubicacion": forms.TextInput(attrs={"class": "form-control"}),
            "unidad": forms.Select(attrs={"class": "form-select"}),
        }

    def validate_unique(self):
        # El SKU duplicado lo informa el servicio de inventario
        pass

    def datos_producto(self) -> dict:
        return {campo: self.cleaned_data[campo] for campo in self.Meta.fields}


class AgregarStockForm(forms.Form):
    codigo_lote = forms.CharField(label="Lote", max_length=100, widget=forms.TextInput(attrs={"class": "form-control"}))
    cantidad = forms.DecimalField(
        label="Cantidad",
        max_digits=14,
        decimal_places=2,
        widget=forms.NumberInput(attrs={"class": "form-control", "step": "0.01"}),
    )
    fecha_vencimiento = forms.DateField(
        label="Vencimiento",
        required=False,
        widget=forms.DateInput(attrs={"type": "date", "class": "form-control"}),
    )

    def clean_cantidad(self):
        cantidad = self.cleaned_data["cantidad"]
        if cantidad <= 0:
            raise forms.ValidationError("La cantidad debe ser mayor a cero.")
        return cantidad


class IncrementarLoteForm(forms.Form):
    cantidad = forms.DecimalField(
        label="Cantidad",
        max_digits=14,
        decimal_places=2,
        widget=forms.NumberInput(attrs={"class": "form-control form-control-sm", "step": "0.01"}),
    )

    def clean_cantidad(self):
        cantidad = self.cleaned_data["cantidad"]
        if cantidad <= 0:
            raise forms.ValidationError("La cantidad debe ser mayor a cero.")
        return cantidad


# Pedidos


class PedidoForm(forms.Form):
    centro_costo = forms.CharField(
        label="Centro de costo",
        max_length=50,
        required=False,
        widget=forms.TextInput(attrs={"class": "form-control"}),
    )
    cultivo = forms.ChoiceField(
        label="Cultivo",
        choices=[("", "---------")] + list(Cultivo.choices),
        required=False,
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    observaciones = forms.CharField(
        label="Observaciones",
        required=False,
        widget=forms.Textarea(attrs={"class": "form-control", "rows": 2}),
    )


class PedidoItemForm(forms.Form):
    producto = forms.ModelChoiceField(
        label="Producto",
        queryset=Producto.objects.order_by("nombre"),
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    cantidad = forms.DecimalField(
        label="Cantidad",
        max_digits=14,
        decimal_places=2,
        widget=forms.NumberInput(attrs={"class": "form-control", "step": "0.01"}),
    )
    area_destino = forms.ChoiceField(
        label="Área destino",
        choices=[("", "---------")] + list(Area.choices),
        required=False,
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    descripcion_uso = forms.CharField(
        label="Uso",
        required=False,
        widget=forms.TextInput(attrs={"class": "form-control"}),
    )

    def clean_cantidad(self):
        cantidad = self.cleaned_data["cantidad"]
        if cantidad <= 0:
            raise forms.ValidationError("La cantidad debe ser mayor a cero.")
        return cantidad


PedidoItemFormSet = formset_factory(
    PedidoItemForm,
    extra=3,
    min_num=1,
    validate_min=True,
)


# Combustible


class AbastecimientoForm(forms.Form):
    tipo_combustible = forms.ChoiceField(
        label="Combustible",
        choices=TipoCombustible.choices,
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    cantidad = forms.DecimalField(
        label="Litros",
        max_digits=12,
        decimal_places=2,
        widget=forms.NumberInput(attrs={"class": "form-control", "step": "0.01"}),
    )

    def clean_cantidad(self):
        cantidad = self.cleaned_data["cantidad"]
        if cantidad <= 0:
            raise forms.ValidationError("La cantidad debe ser mayor a cero.")
        return cantidad


class DespachoCombustibleForm(AbastecimientoForm):
    area = forms.ChoiceField(label="Área", choices=Area.choices, widget=forms.Select(attrs={"class": "form-select"}))
    conductor = forms.CharField(label="Conductor", max_length=255, widget=forms.TextInput(attrs={"class": "form-control"}))
    tipo_vehiculo = forms.ChoiceField(
        label="Vehículo",
        choices=TipoVehiculo.choices,
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    turno = forms.ChoiceField(label="Turno", choices=Turno.choices, widget=forms.Select(attrs={"class": "form-select"}))
    horometro = forms.DecimalField(
        label="Horómetro",
        required=False,
        max_digits=12,
        decimal_places=1,
        widget=forms.NumberInput(attrs={"class": "form-control", "step": "0.1"}),
    )
    kilometraje = forms.DecimalField(
        label="Kilometraje",
        required=False,
        max_digits=12,
        decimal_places=1,
        widget=forms.NumberInput(attrs={"class": "form-control", "step": "0.1"}),
    )


# Seguridad


class ReporteSeguridadForm(forms.Form):
    tipo = forms.ChoiceField(
        label="Tipo",
        choices=[c for c in TipoReporte.choices if c[0] != TipoReporte.INGRESO_VEHICULO],
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    titulo = forms.CharField(label="Título", max_length=255, widget=forms.TextInput(attrs={"class": "form-control"}))
    descripcion = forms.CharField(label="Descripción", widget=forms.Textarea(attrs={"class": "form-control", "rows": 3}))
    area_destino = forms.ChoiceField(
        label="Dirigido a",
        choices=[("", "---------")] + [(a, a) for a in AREAS_DESTINO_SOLICITUD],
        required=False,
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    detalles = forms.CharField(
        label="Detalles",
        required=False,
        widget=forms.Textarea(attrs={"class": "form-control", "rows": 2}),
    )
    fotos = MultipleFileField(label="Fotos")

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("tipo") == TipoReporte.SOLICITUD_PERMISO and not cleaned.get("area_destino"):
            self.add_error("area_destino", "Indica a qué área va dirigida la solicitud.")
        return cleaned


class IngresoVehiculoForm(forms.Form):
    nombre_empleado = forms.CharField(label="Empleado", max_length=255, widget=forms.TextInput(attrs={"class": "form-control"}))
    area_empleado = forms.ChoiceField(label="Área", choices=Area.choices, widget=forms.Select(attrs={"class": "form-select"}))
    tipo_vehiculo = forms.CharField(label="Tipo de vehículo", max_length=50, widget=forms.TextInput(attrs={"class": "form-control"}))
    modelo_vehiculo = forms.CharField(label="Modelo", max_length=100, widget=forms.TextInput(attrs={"class": "form-control"}))
    placa = forms.CharField(label="Placa", max_length=20, widget=forms.TextInput(attrs={"class": "form-control"}))
    foto = forms.FileField(label="Foto", required=False, widget=forms.ClearableFileInput(attrs={"class": "form-control", "accept": "image/*"}))


# Galería y comunicados


class PublicacionForm(forms.Form):
    titulo = forms.CharField(label="Título", max_length=255, widget=forms.TextInput(attrs={"class": "form-control"}))
    descripcion = forms.CharField(label="Descripción", widget=forms.Textarea(attrs={"class": "form-control", "rows": 3}))
    imagenes = MultipleFileField(label="Imágenes")


class ComunicadoForm(PublicacionForm):
    pass


# Configuración


class ConfiguracionEmpresaForm(forms.Form):
    whatsapp_soporte = forms.CharField(
        label="WhatsApp de soporte",
        max_length=30,
        required=False,
        widget=forms.TextInput(attrs={"class": "form-control"}),
    )
    logo = forms.FileField(label="Logo", required=False, widget=forms.ClearableFileInput(attrs={"class": "form-control", "accept": "image/*"}))
    fondo_login = forms.FileField(
        label="Fondo de inicio de sesión",
        required=False,
        widget=forms.ClearableFileInput(attrs={"class": "form-control", "accept": "image/*"}),
    )


