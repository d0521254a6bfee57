from typing import Dict, Optional

from servicios.servicio_pedidos.aplicacion.repositorios.almacen_interface import IAlmacenClaveValor


class MemoriaAlmacenClaveValor(IAlmacenClaveValor):
    """Almacen en memoria del proceso. Util para pruebas y desarrollo local."""

    def __init__(self, valores: Optional[Dict[str, str]] = None):
        self.valores: Dict[str, str] = dict(valores or {})

    def obtener(self, clave: str) -> Optional[str]:
        return self.valores.get(clave)

    def guardar(self, clave: str, valor: str) -> None:
        self.valores[clave] = valor

    def eliminar(self, clave: str) -> None:
        self.valores.pop(clave, None)
