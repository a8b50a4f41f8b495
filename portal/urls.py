from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    ChatViewSet,
    CombustibleViewSet,
    NotificacionViewSet,
    PedidoViewSet,
    ProductoViewSet,
)

router = DefaultRouter()
router.register(r"productos", ProductoViewSet, basename="producto")
router.register(r"pedidos", PedidoViewSet, basename="pedido")
router.register(r"combustible", CombustibleViewSet, basename="combustible")
router.register(r"notificaciones", NotificacionViewSet, basename="notificacion")
router.register(r"chat", ChatViewSet, basename="chat")


urlpatterns = [
    path("", include(router.urls)),
]
