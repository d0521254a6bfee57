# inicializar_db.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import (
    create_engine,
    Column,
    String,
    Text,
    DateTime,
    func,
)
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.exc import SQLAlchemyError

try:
    # Si tu Config define SQLALCHEMY_DATABASE_URI, lo utilizamos
    from configuracion import Config
    DEFAULT_DB_URI = getattr(Config, "SQLALCHEMY_DATABASE_URI", None)
except Exception:
    Config = None
    DEFAULT_DB_URI = None

logger = logging.getLogger("inicializar_db")

# ----------------------------------------------------------------------
# Base ORM
# ----------------------------------------------------------------------
Base = declarative_base()

# ----------------------------------------------------------------------
# Modelos ORM
# ----------------------------------------------------------------------
class AlmacenClaveValorORM(Base):
    """
    Almacen clave-valor duradero.
    - clave: p.ej. 'goodbite_orders_+50255550000' o 'goodbite_user'
    - valor: JSON serializado (arreglo de ordenes o usuario de sesión)
    """
    __tablename__ = "almacen_clave_valor"

    clave = Column(String, primary_key=True)
    valor = Column(Text, nullable=False)
    actualizado_en = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)


# ----------------------------------------------------------------------
# Helpers DB
# ----------------------------------------------------------------------
def resolve_db_uri(db_uri: Optional[str] = None) -> str:
    """
    Devuelve la URI de la base de datos a usar.
    1) La URI explícita, si se pasa.
    2) Si Config.SQLALCHEMY_DATABASE_URI existe, usa esa.
    3) Si no, usa sqlite:///data/pedidos.db y crea carpeta data/ si no existe.
    """
    db_uri = db_uri or DEFAULT_DB_URI
    if not db_uri:
        base_dir = Path(__file__).resolve().parent
        db_uri = f"sqlite:///{(base_dir / 'data' / 'pedidos.db').as_posix()}"
    # Si es SQLite file-based, asegúrate que la carpeta exista
    if db_uri.startswith("sqlite:///") and db_uri != "sqlite:///:memory:":
        sqlite_file = Path(db_uri.replace("sqlite:///", "", 1))
        sqlite_file.parent.mkdir(parents=True, exist_ok=True)
    return db_uri


def get_engine_and_session(db_uri: str):
    engine = create_engine(db_uri, echo=False, future=True)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    return engine, SessionLocal


# ----------------------------------------------------------------------
# Inicialización
# ----------------------------------------------------------------------
def inicializar_base_datos(db_uri: Optional[str] = None):
    """Crea las tablas si no existen. Retorna (engine, SessionLocal)."""
    db_uri = resolve_db_uri(db_uri)
    engine, SessionLocal = get_engine_and_session(db_uri)
    try:
        Base.metadata.create_all(engine)
        logger.info("Tablas creadas/verificadas en: %s", db_uri)
    except SQLAlchemyError:
        logger.exception("Error durante la inicialización de la base de datos")
        raise
    return engine, SessionLocal


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    inicializar_base_datos()
