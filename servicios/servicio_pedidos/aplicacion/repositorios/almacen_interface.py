# servicios/servicio_pedidos/aplicacion/repositorios/almacen_interface.py

from abc import ABC, abstractmethod
from typing import Optional


class ErrorAlmacen(Exception):
    """Fallo del backend de almacenamiento (no disponible, cuota, etc.)."""
    pass


# ==============================================================================
# INTERFAZ (Contrato)
# Almacenamiento clave-valor duradero donde viven las ordenes de cada usuario
# y el registro de la sesion activa. Los valores son texto (JSON).
# ==============================================================================
class IAlmacenClaveValor(ABC):

    @abstractmethod
    def obtener(self, clave: str) -> Optional[str]:
        """Retorna el valor guardado bajo 'clave' o None si no existe."""
        pass

    @abstractmethod
    def guardar(self, clave: str, valor: str) -> None:
        """Guarda o reemplaza el valor de 'clave'."""
        pass

    @abstractmethod
    def eliminar(self, clave: str) -> None:
        """Elimina 'clave'; no falla si no existe."""
        pass
