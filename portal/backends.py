import logging

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

from portal.services.usuarios import buscar_por_credencial

logger = logging.getLogger(__name__)


class CredencialBackend(ModelBackend):
    """
    Inicio de sesión con usuario o correo. Las cuentas pendientes de
    aprobación no pueden entrar (ni conservar una sesión abierta, ya que
    get_user() también pasa por user_can_authenticate()).
    """

    def authenticate(self, request, username=None, password=None, **kwargs):
        credencial = username or kwargs.get("email")
        if not credencial or password is None:
            return None

        usuario = buscar_por_credencial(credencial)
        if usuario is None:
            # Mismo costo que un usuario existente
            get_user_model()().set_password(password)
            return None

        if usuario.check_password(password) and self.user_can_authenticate(usuario):
            return usuario
        return None

    def user_can_authenticate(self, user):
        if not super().user_can_authenticate(user):
            return False
        if user.is_superuser:
            return True
        if not user.esta_activo:
            logger.info("Intento de acceso de cuenta pendiente: %s", user.username)
            return False
        return True
