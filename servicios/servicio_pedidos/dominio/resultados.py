# servicios/servicio_pedidos/dominio/resultados.py

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Union

from servicios.servicio_pedidos.dominio.orden import Orden


# ==============================================================================
# RESULTADO DE CARGA
# Una carga fallida nunca se propaga: se degrada a coleccion vacia con motivo.
# ==============================================================================
class MotivoVacio(enum.Enum):
    SIN_SESION = "sin_sesion"
    SIN_DATOS = "sin_datos"
    CORRUPTO = "corrupto"
    ERROR_ALMACEN = "error_almacen"


@dataclass
class Cargado:
    ordenes: List[Orden] = field(default_factory=list)


@dataclass
class Vacio:
    motivo: MotivoVacio
    detalle: str = ""

    @property
    def ordenes(self) -> List[Orden]:
        return []


ResultadoCarga = Union[Cargado, Vacio]


# ==============================================================================
# RESULTADO DE OPERACION
# ==============================================================================
class MotivoFallo(enum.Enum):
    NO_ENCONTRADA = "no_encontrada"
    NO_PENDIENTE = "no_pendiente"


@dataclass
class ResultadoOperacion:
    """
    Resultado de una mutacion del servicio de ordenes.
    Es verdadero en contexto booleano solo si la operacion tuvo exito.
    """
    exito: bool
    motivo: Optional[MotivoFallo] = None
    orden: Optional[Orden] = None

    @classmethod
    def ok(cls, orden: Optional[Orden] = None) -> "ResultadoOperacion":
        return cls(exito=True, orden=orden)

    @classmethod
    def fallo(cls, motivo: MotivoFallo) -> "ResultadoOperacion":
        return cls(exito=False, motivo=motivo)

    def __bool__(self) -> bool:
        return self.exito
