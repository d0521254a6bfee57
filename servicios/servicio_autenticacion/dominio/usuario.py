# servicios/servicio_autenticacion/dominio/usuario.py

from dataclasses import dataclass
from typing import Any, Dict, Optional

# ==============================================================================
# ENTIDAD DE DOMINIO: USUARIO DE SESION
# Registro del usuario que inicio sesion, tal como lo guarda el flujo de
# autenticacion. El servicio de pedidos solo lo lee.
# ==============================================================================
@dataclass
class Usuario:
    """
    Usuario activo. El telefono es su identificador para el resto de servicios.
    """
    telefono: str
    nombre: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def desde_dict(cls, data: Dict[str, Any]) -> "Usuario":
        """
        Construye el usuario desde el JSON de sesion ('phone', 'name', 'email').
        Un 'phone' ausente o vacio deja el telefono en "".
        """
        if not isinstance(data, dict):
            raise ValueError("El registro de sesion debe ser un objeto JSON.")
        return cls(
            telefono=str(data.get("phone") or ""),
            nombre=data.get("name"),
            email=data.get("email"),
        )

    def __str__(self):
        return f"Usuario(Telefono: {self.telefono})"
