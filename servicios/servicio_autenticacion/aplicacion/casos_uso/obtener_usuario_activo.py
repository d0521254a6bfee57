# servicios/servicio_autenticacion/aplicacion/casos_uso/obtener_usuario_activo.py

import json
import logging

from servicios.servicio_autenticacion.dominio.usuario import Usuario
from servicios.servicio_pedidos.aplicacion.repositorios.almacen_interface import IAlmacenClaveValor

logger = logging.getLogger("servicios.autenticacion.obtener_usuario_activo")


# ==============================================================================
# CASO DE USO: OBTENER USUARIO ACTIVO
# Lee el marcador de sesion externo y devuelve el telefono del usuario.
# ==============================================================================
class ObtenerUsuarioActivo:
    """
    Caso de Uso de solo lectura sobre la clave de sesion (p.ej. 'goodbite_user').
    Nunca lanza: un registro ausente o ilegible equivale a "sin sesion" ("").
    """
    def __init__(self, almacen: IAlmacenClaveValor, clave_sesion: str):
        self.almacen = almacen
        self.clave_sesion = clave_sesion

    def ejecutar(self) -> str:
        try:
            crudo = self.almacen.obtener(self.clave_sesion)
            if not crudo:
                return ""
            return Usuario.desde_dict(json.loads(crudo)).telefono
        except Exception:
            logger.exception("Error leyendo el usuario de sesion (%s)", self.clave_sesion)
            return ""

    __call__ = ejecutar
