import logging

from django.db import transaction

from portal.models import ConfiguracionEmpresa
from portal.services.archivos import subir_archivo
from portal.utils_roles import GESTIONAR_CONFIGURACION, exigir_permiso

logger = logging.getLogger(__name__)


def obtener_configuracion() -> ConfiguracionEmpresa:
    return ConfiguracionEmpresa.cargar()


@transaction.atomic
def actualizar_configuracion(
    *,
    usuario,
    whatsapp: str | None = None,
    logo=None,
    fondo_login=None,
) -> ConfiguracionEmpresa:
    """
    Actualiza la configuración visual. Los archivos vacíos conservan la
    imagen anterior.
    """
    exigir_permiso(usuario, GESTIONAR_CONFIGURACION)

    config = ConfiguracionEmpresa.objects.select_for_update().filter(pk=1).first()
    if config is None:
        config = ConfiguracionEmpresa()

    if whatsapp is not None:
        config.whatsapp_soporte = whatsapp.strip()

    logo_url = subir_archivo(logo, carpeta="empresa", prefijo="logo")
    if logo_url:
        config.logo_url = logo_url

    fondo_url = subir_archivo(fondo_login, carpeta="empresa", prefijo="fondo-login")
    if fondo_url:
        config.fondo_login_url = fondo_url

    config.save()
    logger.info("Configuración de empresa actualizada por %s", usuario)
    return config
