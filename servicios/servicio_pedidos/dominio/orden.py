# servicios/servicio_pedidos/dominio/orden.py

import copy
import enum
import uuid
from datetime import datetime
from numbers import Real
from typing import Any, Dict, Optional

from servicios.servicio_pedidos.dominio.excepciones import DatosDeOrdenInvalidosError

# Claves reservadas del snapshot; el resto es payload opaco de la orden.
CAMPOS_RESERVADOS = ("id", "status", "price", "createdAt")


# ==============================================================================
# ESTADOS DE LA ORDEN
# ==============================================================================
class EstadoOrden(enum.Enum):
    PENDIENTE = "pending"
    RECOGIDA = "picked"
    EXPIRADA = "expired"


def _validar_precio(precio: Any) -> float:
    if isinstance(precio, bool) or not isinstance(precio, Real):
        raise DatosDeOrdenInvalidosError(f"Precio inválido: {precio!r}")
    if precio < 0:
        raise DatosDeOrdenInvalidosError(f"El precio no puede ser negativo: {precio!r}")
    return precio


def _leer_fecha(valor: Any) -> Optional[datetime]:
    if valor is None or isinstance(valor, datetime):
        return valor
    texto = str(valor)
    # Fechas de JavaScript (toISOString) terminan en "Z"
    if texto.endswith("Z"):
        texto = texto[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(texto)
    except ValueError:
        raise DatosDeOrdenInvalidosError(f"Fecha de creación inválida: {valor!r}")


# ==============================================================================
# ENTIDAD ORDEN
# ==============================================================================
class Orden:
    """
    Representa un pedido realizado por un usuario y pendiente de recoger.
    El estado solo avanza de 'pending' a 'picked' o 'expired'; ambos son finales.
    """
    def __init__(self, id: str, precio: float, estado: EstadoOrden = EstadoOrden.PENDIENTE,
                 fecha_creacion: datetime = None, datos: Optional[Dict[str, Any]] = None):

        self.id = id
        self.precio = precio
        self.estado = estado
        self.fecha_creacion = fecha_creacion if fecha_creacion else datetime.now()
        # Items, nombre del cliente, hora de recogida, etc. No se interpretan.
        self.datos = dict(datos or {})

    @classmethod
    def crear_nueva(cls, datos: Dict[str, Any]) -> "Orden":
        """
        Metodo factory: construye una orden nueva (siempre 'pending') a partir
        de los datos del llamador. Solo 'price' es obligatorio.
        """
        if not isinstance(datos, dict) or "price" not in datos:
            raise DatosDeOrdenInvalidosError("Falta el campo obligatorio 'price'.")

        id_orden = datos.get("id")
        return cls(
            id=str(id_orden) if id_orden is not None else str(uuid.uuid4()),
            precio=_validar_precio(datos["price"]),
            fecha_creacion=_leer_fecha(datos.get("createdAt")),
            datos={k: v for k, v in datos.items() if k not in CAMPOS_RESERVADOS},
        )

    # --------------------------------------------------------------------------
    # Transiciones de estado
    # --------------------------------------------------------------------------
    def marcar_como_recogida(self) -> None:
        if self.estado is EstadoOrden.PENDIENTE:
            self.estado = EstadoOrden.RECOGIDA

    def marcar_como_expirada(self) -> None:
        if self.estado is EstadoOrden.PENDIENTE:
            self.estado = EstadoOrden.EXPIRADA

    def esta_pendiente(self) -> bool:
        return self.estado is EstadoOrden.PENDIENTE

    def esta_recogida(self) -> bool:
        return self.estado is EstadoOrden.RECOGIDA

    def esta_expirada(self) -> bool:
        return self.estado is EstadoOrden.EXPIRADA

    # --------------------------------------------------------------------------
    # Serialización
    # --------------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        data = copy.deepcopy(self.datos)
        data.update({
            'id': self.id,
            'status': self.estado.value,
            'price': self.precio,
            'createdAt': self.fecha_creacion.isoformat(),
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Orden":
        """Reconstruye una orden desde su snapshot, conservando el estado."""
        if not isinstance(data, dict) or "id" not in data or "price" not in data:
            raise DatosDeOrdenInvalidosError("Snapshot de orden incompleto.")
        try:
            estado = EstadoOrden(data.get("status", EstadoOrden.PENDIENTE.value))
        except ValueError:
            raise DatosDeOrdenInvalidosError(f"Estado desconocido: {data.get('status')!r}")

        return cls(
            id=str(data["id"]),
            precio=_validar_precio(data["price"]),
            estado=estado,
            fecha_creacion=_leer_fecha(data.get("createdAt")),
            datos=copy.deepcopy({k: v for k, v in data.items() if k not in CAMPOS_RESERVADOS}),
        )

    def copiar(self) -> "Orden":
        return Orden(
            id=self.id,
            precio=self.precio,
            estado=self.estado,
            fecha_creacion=self.fecha_creacion,
            datos=copy.deepcopy(self.datos),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Orden):
            return NotImplemented
        return (
            self.id == other.id
            and self.estado is other.estado
            and self.precio == other.precio
            and self.fecha_creacion == other.fecha_creacion
            and self.datos == other.datos
        )

    def __repr__(self) -> str:
        return f"<Orden id={self.id}, estado={self.estado.value}, precio={self.precio}>"
