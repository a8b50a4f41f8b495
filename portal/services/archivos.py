import logging
import os

from django.core.files.storage import default_storage
from django.utils import timezone
from django.utils.text import get_valid_filename

logger = logging.getLogger(__name__)


def subir_archivo(archivo, *, carpeta: str, prefijo: str) -> str | None:
    """
    Guarda un archivo subido en el storage configurado y devuelve su URL
    pública. Archivos vacíos o ausentes se ignoran (devuelve None).
    """
    if not archivo or not getattr(archivo, "size", 0):
        return None

    nombre = get_valid_filename(os.path.basename(archivo.name or "archivo"))
    marca = timezone.now().strftime("%Y%m%d%H%M%S%f")
    ruta = f"{carpeta}/{prefijo}-{marca}-{nombre}"

    guardado = default_storage.save(ruta, archivo)
    url = default_storage.url(guardado)
    logger.info("Archivo subido a %s", guardado)
    return url


def subir_archivos(archivos, *, carpeta: str, prefijo: str) -> list[str]:
    urls = []
    for archivo in archivos or []:
        url = subir_archivo(archivo, carpeta=carpeta, prefijo=prefijo)
        if url:
            urls.append(url)
    return urls
