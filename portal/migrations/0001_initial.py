import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


AREAS = [
    ("Gerencia", "Gerencia"),
    ("Logística", "Logística"),
    ("RR.HH", "RR.HH"),
    ("Seguridad Patrimonial", "Seguridad Patrimonial"),
    ("Almacén", "Almacén"),
    ("Taller", "Taller"),
    ("Producción", "Producción"),
    ("Sanidad", "Sanidad"),
    ("SS.GG", "SS.GG"),
    ("Administrador", "Administrador"),
]

UNIDADES = [
    ("Unidad", "Unidad"),
    ("Kg", "Kg"),
    ("Litros", "Litros"),
    ("Metros", "Metros"),
]

CULTIVOS = [("Uva", "Uva"), ("Palto", "Palto")]

COMBUSTIBLES = [("Gasolina", "Gasolina"), ("Petróleo", "Petróleo")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="Usuario",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text="Designates that this user has all permissions without explicitly assigning them.",
                        verbose_name="superuser status",
                    ),
                ),
                (
                    "username",
                    models.CharField(
                        error_messages={"unique": "A user with that username already exists."},
                        help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.",
                        max_length=150,
                        unique=True,
                        validators=[django.contrib.auth.validators.UnicodeUsernameValidator()],
                        verbose_name="username",
                    ),
                ),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                (
                    "is_staff",
                    models.BooleanField(
                        default=False,
                        help_text="Designates whether the user can log into this admin site.",
                        verbose_name="staff status",
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True,
                        help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.",
                        verbose_name="active",
                    ),
                ),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("email", models.EmailField(max_length=254, unique=True)),
                (
                    "rol",
                    models.CharField(
                        choices=[("Administrador", "Administrador"), ("Usuario", "Usuario")],
                        default="Usuario",
                        max_length=20,
                    ),
                ),
                ("area", models.CharField(choices=AREAS, default="Producción", max_length=30)),
                (
                    "estado",
                    models.CharField(
                        choices=[("pendiente", "Pendiente de aprobación"), ("activo", "Activo")],
                        default="pendiente",
                        help_text="Las cuentas pendientes no pueden iniciar sesión.",
                        max_length=20,
                    ),
                ),
                ("telefono_whatsapp", models.CharField(blank=True, max_length=30)),
                ("avatar_url", models.CharField(blank=True, max_length=500)),
                ("firma_url", models.CharField(blank=True, max_length=500)),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "verbose_name": "Usuario",
                "verbose_name_plural": "Usuarios",
                "ordering": ["first_name", "last_name", "username"],
            },
            managers=[
                ("objects", django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="Producto",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("sku", models.CharField(max_length=64, unique=True)),
                ("nombre", models.CharField(max_length=255)),
                ("descripcion", models.TextField(blank=True)),
                (
                    "categoria",
                    models.CharField(
                        choices=[
                            ("Herramientas", "Herramientas"),
                            ("Repuestos", "Repuestos"),
                            ("Fertilizantes", "Fertilizantes"),
                            ("Agroquímicos", "Agroquímicos"),
                            ("Varios", "Varios"),
                            ("Implementos de Riego", "Implementos de Riego"),
                            ("Implementos de SST", "Implementos de SST"),
                        ],
                        max_length=50,
                    ),
                ),
                ("area", models.CharField(choices=AREAS, help_text="Área responsable del producto.", max_length=30)),
                ("cultivo", models.CharField(blank=True, choices=CULTIVOS, max_length=20)),
                ("ubicacion", models.CharField(blank=True, max_length=255)),
                ("unidad", models.CharField(choices=UNIDADES, max_length=20)),
                ("imagenes", models.JSONField(blank=True, default=list)),
                ("ficha_tecnica_url", models.CharField(blank=True, max_length=500)),
            ],
            options={
                "verbose_name": "Producto",
                "verbose_name_plural": "Productos",
                "ordering": ["nombre"],
            },
        ),
        migrations.CreateModel(
            name="LoteProducto",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "codigo",
                    models.CharField(help_text="Identificador del lote, único dentro del producto.", max_length=100),
                ),
                ("cantidad", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("fecha_vencimiento", models.DateField(blank=True, null=True)),
                (
                    "producto",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="lotes",
                        to="portal.producto",
                    ),
                ),
            ],
            options={
                "verbose_name": "Lote de producto",
                "verbose_name_plural": "Lotes de productos",
                "ordering": ["fecha_vencimiento", "codigo"],
                "unique_together": {("producto", "codigo")},
            },
        ),
        migrations.CreateModel(
            name="Pedido",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("codigo", models.CharField(max_length=20, unique=True)),
                ("fecha", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "estado",
                    models.CharField(
                        choices=[
                            ("Pendiente", "Pendiente"),
                            ("Aprobado", "Aprobado"),
                            ("Rechazado", "Rechazado"),
                            ("Despachado", "Despachado"),
                        ],
                        default="Pendiente",
                        max_length=20,
                    ),
                ),
                ("area_solicitante", models.CharField(choices=AREAS, max_length=30)),
                ("nombre_solicitante", models.CharField(max_length=255)),
                ("firma_solicitante_url", models.CharField(blank=True, max_length=500)),
                ("centro_costo", models.CharField(blank=True, max_length=50)),
                ("cultivo", models.CharField(blank=True, choices=CULTIVOS, max_length=20)),
                ("observaciones", models.TextField(blank=True)),
                ("revisado_en", models.DateTimeField(blank=True, null=True)),
                ("despachado_en", models.DateTimeField(blank=True, null=True)),
                (
                    "aprobado_por",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="pedidos_revisados",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "despachado_por",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="pedidos_despachados",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "usuario_solicitante",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="pedidos",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Pedido",
                "verbose_name_plural": "Pedidos",
                "ordering": ["-fecha", "-id"],
            },
        ),
        migrations.CreateModel(
            name="PedidoItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sku", models.CharField(max_length=64)),
                ("nombre", models.CharField(max_length=255)),
                ("unidad", models.CharField(choices=UNIDADES, max_length=20)),
                ("cantidad", models.DecimalField(decimal_places=2, max_digits=14)),
                ("area_destino", models.CharField(blank=True, choices=AREAS, max_length=30)),
                ("descripcion_uso", models.TextField(blank=True)),
                (
                    "pedido",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="portal.pedido",
                    ),
                ),
                (
                    "producto",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="items_pedido",
                        to="portal.producto",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ítem de pedido",
                "verbose_name_plural": "Ítems de pedido",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="MovimientoInventario",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("sku", models.CharField(max_length=64)),
                ("nombre_producto", models.CharField(max_length=255)),
                ("codigo_lote", models.CharField(blank=True, max_length=100)),
                (
                    "tipo",
                    models.CharField(choices=[("Entrada", "Entrada"), ("Salida", "Salida")], max_length=10),
                ),
                ("cantidad", models.DecimalField(decimal_places=2, max_digits=14)),
                ("unidad", models.CharField(choices=UNIDADES, max_length=20)),
                ("area_solicitante", models.CharField(choices=AREAS, max_length=30)),
                ("fecha_movimiento", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "pedido",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="movimientos",
                        to="portal.pedido",
                    ),
                ),
                (
                    "producto",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="movimientos",
                        to="portal.producto",
                    ),
                ),
                (
                    "usuario",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="movimientos_inventario",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Movimiento de inventario",
                "verbose_name_plural": "Movimientos de inventario",
                "ordering": ["-fecha_movimiento", "-id"],
            },
        ),
        migrations.CreateModel(
            name="NivelCombustible",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("tipo_combustible", models.CharField(choices=COMBUSTIBLES, max_length=20, unique=True)),
                ("nivel", models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                (
                    "capacidad",
                    models.DecimalField(
                        decimal_places=2,
                        default=0,
                        help_text="Capacidad nominal del tanque, solo para mostrar el porcentaje.",
                        max_digits=12,
                    ),
                ),
            ],
            options={
                "verbose_name": "Nivel de combustible",
                "verbose_name_plural": "Niveles de combustible",
                "ordering": ["tipo_combustible"],
            },
        ),
        migrations.CreateModel(
            name="MovimientoCombustible",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "tipo",
                    models.CharField(
                        choices=[("Abastecimiento", "Abastecimiento"), ("Consumo", "Consumo")],
                        max_length=20,
                    ),
                ),
                ("tipo_combustible", models.CharField(choices=COMBUSTIBLES, max_length=20)),
                ("cantidad", models.DecimalField(decimal_places=2, max_digits=12)),
                ("area", models.CharField(blank=True, choices=AREAS, max_length=30)),
                ("conductor", models.CharField(blank=True, max_length=255)),
                (
                    "tipo_vehiculo",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("Tractor", "Tractor"),
                            ("Camión", "Camión"),
                            ("Camioneta", "Camioneta"),
                            ("Moto Lineal", "Moto Lineal"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "turno",
                    models.CharField(blank=True, choices=[("Día", "Día"), ("Noche", "Noche")], max_length=10),
                ),
                ("horometro", models.DecimalField(blank=True, decimal_places=1, max_digits=12, null=True)),
                ("kilometraje", models.DecimalField(blank=True, decimal_places=1, max_digits=12, null=True)),
                ("fecha", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "registrado_por",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="movimientos_combustible",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Movimiento de combustible",
                "verbose_name_plural": "Movimientos de combustible",
                "ordering": ["-fecha", "-id"],
            },
        ),
        migrations.CreateModel(
            name="Notificacion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("destino", models.CharField(db_index=True, max_length=30)),
                ("titulo", models.CharField(max_length=255)),
                ("descripcion", models.TextField()),
                ("enlace", models.CharField(blank=True, max_length=255)),
                ("leida", models.BooleanField(default=False)),
                ("creada_en", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Notificación",
                "verbose_name_plural": "Notificaciones",
                "ordering": ["-creada_en", "-id"],
            },
        ),
        migrations.CreateModel(
            name="ReporteSeguridad",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("codigo", models.CharField(max_length=20, unique=True)),
                ("fecha", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "tipo",
                    models.CharField(
                        choices=[
                            ("Incidente", "Incidente"),
                            ("Novedad", "Novedad"),
                            ("Solicitud de Permiso", "Solicitud de Permiso"),
                            ("Ingreso de Proveedor", "Ingreso de Proveedor"),
                            ("Ingreso Vehículo Trabajador", "Ingreso Vehículo Trabajador"),
                        ],
                        max_length=40,
                    ),
                ),
                ("titulo", models.CharField(max_length=255)),
                ("descripcion", models.TextField()),
                ("nombre_autor", models.CharField(max_length=255)),
                ("fotos", models.JSONField(blank=True, default=list)),
                (
                    "estado",
                    models.CharField(
                        choices=[
                            ("Abierto", "Abierto"),
                            ("Cerrado", "Cerrado"),
                            ("Aprobación Pendiente", "Aprobación Pendiente"),
                            ("Aprobado", "Aprobado"),
                            ("Rechazado", "Rechazado"),
                        ],
                        max_length=30,
                    ),
                ),
                ("area_destino", models.CharField(blank=True, choices=AREAS, max_length=30)),
                ("detalles", models.TextField(blank=True)),
                (
                    "autor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reportes_seguridad",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Reporte de seguridad",
                "verbose_name_plural": "Reportes de seguridad",
                "ordering": ["-fecha", "-id"],
            },
        ),
        migrations.CreateModel(
            name="VehiculoRegistrado",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("nombre_empleado", models.CharField(max_length=255, unique=True)),
                ("area_empleado", models.CharField(choices=AREAS, max_length=30)),
                ("tipo_vehiculo", models.CharField(max_length=50)),
                ("modelo_vehiculo", models.CharField(max_length=100)),
                ("placa", models.CharField(max_length=20)),
            ],
            options={
                "verbose_name": "Vehículo registrado",
                "verbose_name_plural": "Vehículos registrados",
                "ordering": ["nombre_empleado"],
            },
        ),
        migrations.CreateModel(
            name="PublicacionGaleria",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("titulo", models.CharField(max_length=255)),
                ("descripcion", models.TextField()),
                ("imagenes", models.JSONField(blank=True, default=list)),
                ("nombre_autor", models.CharField(max_length=255)),
                ("area_autor", models.CharField(choices=AREAS, max_length=30)),
                (
                    "estado",
                    models.CharField(
                        choices=[("Pendiente", "Pendiente"), ("Aprobado", "Aprobado"), ("Rechazado", "Rechazado")],
                        default="Pendiente",
                        max_length=20,
                    ),
                ),
                ("fecha", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "autor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="publicaciones",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Publicación de galería",
                "verbose_name_plural": "Publicaciones de galería",
                "ordering": ["-fecha", "-id"],
            },
        ),
        migrations.CreateModel(
            name="Comunicado",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("titulo", models.CharField(max_length=255)),
                ("descripcion", models.TextField()),
                ("imagenes", models.JSONField(blank=True, default=list)),
                ("nombre_autor", models.CharField(max_length=255)),
                ("fecha", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "autor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="comunicados",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Comunicado",
                "verbose_name_plural": "Comunicados",
                "ordering": ["-fecha", "-id"],
            },
        ),
        migrations.CreateModel(
            name="MensajeChat",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("canal", models.CharField(db_index=True, max_length=30)),
                ("nombre_remitente", models.CharField(max_length=255)),
                ("contenido", models.TextField()),
                ("enviado_en", models.DateTimeField(auto_now_add=True)),
                (
                    "remitente",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="mensajes_chat",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Mensaje de chat",
                "verbose_name_plural": "Mensajes de chat",
                "ordering": ["enviado_en", "id"],
            },
        ),
        migrations.CreateModel(
            name="ConfiguracionEmpresa",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("logo_url", models.CharField(blank=True, max_length=500)),
                ("fondo_login_url", models.CharField(blank=True, max_length=500)),
                ("whatsapp_soporte", models.CharField(blank=True, max_length=30)),
                ("actualizado_en", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Configuración de empresa",
                "verbose_name_plural": "Configuración de empresa",
            },
        ),
    ]
