"""
Compara el nivel guardado de cada tanque con la suma de su historial.
"""
from django.core.management.base import BaseCommand, CommandError

from portal.services.combustible import verificar_consistencia


class Command(BaseCommand):
    help = "Verifica que el nivel de cada tanque coincida con su historial de movimientos."

    def handle(self, *args, **options):
        resultado = verificar_consistencia()

        inconsistentes = []
        for tipo, datos in resultado.items():
            linea = f"{tipo}: nivel {datos['nivel']} L, historial {datos['historial']} L"
            if datos["consistente"]:
                self.stdout.write(self.style.SUCCESS(f"OK  {linea}"))
            else:
                self.stdout.write(self.style.ERROR(f"ERR {linea}"))
                inconsistentes.append(tipo)

        if inconsistentes:
            raise CommandError(f"Tanques inconsistentes: {', '.join(inconsistentes)}")
