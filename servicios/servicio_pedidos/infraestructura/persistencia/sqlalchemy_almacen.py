# servicios/servicio_pedidos/infraestructura/persistencia/sqlalchemy_almacen.py

from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from inicializar_db import AlmacenClaveValorORM, inicializar_base_datos
from servicios.servicio_pedidos.aplicacion.repositorios.almacen_interface import ErrorAlmacen, IAlmacenClaveValor


# ==============================================================================
# IMPLEMENTACIÓN DEL ALMACEN CLAVE-VALOR (INFRAESTRUCTURA)
# ==============================================================================
class SQLAlchemyAlmacenClaveValor(IAlmacenClaveValor):
    """
    Adaptador de persistencia que implementa IAlmacenClaveValor sobre la tabla
    'almacen_clave_valor' usando SQLAlchemy (SQLite local o Postgres).
    """

    def __init__(self, db_uri: Optional[str] = None):
        # Crea la tabla si no existe; la sesión se abre y cierra en cada operación.
        self.engine, self.Session = inicializar_base_datos(db_uri)

    def obtener(self, clave: str) -> Optional[str]:
        session = self.Session()
        try:
            fila = session.get(AlmacenClaveValorORM, clave)
            return fila.valor if fila else None
        except SQLAlchemyError as e:
            raise ErrorAlmacen(f"No se pudo leer la clave {clave!r}: {e}") from e
        finally:
            session.close()

    def guardar(self, clave: str, valor: str) -> None:
        """Guarda un valor nuevo o reemplaza el existente (UPSERT)."""
        session = self.Session()
        try:
            fila = session.get(AlmacenClaveValorORM, clave)
            if fila:
                fila.valor = valor
            else:
                session.add(AlmacenClaveValorORM(clave=clave, valor=valor))
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise ErrorAlmacen(f"No se pudo guardar la clave {clave!r}: {e}") from e
        finally:
            session.close()

    def eliminar(self, clave: str) -> None:
        session = self.Session()
        try:
            fila = session.get(AlmacenClaveValorORM, clave)
            if fila:
                session.delete(fila)
                session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise ErrorAlmacen(f"No se pudo eliminar la clave {clave!r}: {e}") from e
        finally:
            session.close()
