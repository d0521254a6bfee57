"""Shared fixtures: in-memory storage, store factory and Flask test client."""

import os

import pytest

# Ensure tests never touch the developer's local database
os.environ.setdefault("SQLALCHEMY_DATABASE_URI", "sqlite:///:memory:")

from app import crear_app  # noqa: E402
from configuracion import Config  # noqa: E402
from servicios.servicio_pedidos.aplicacion.servicio_ordenes import ServicioOrdenes  # noqa: E402
from servicios.servicio_pedidos.infraestructura.persistencia.memoria_almacen import (  # noqa: E402
    MemoriaAlmacenClaveValor,
)


class ConfigPruebas(Config):
    TESTING = True
    LOG_LEVEL = "WARNING"
    PEDIDOS_PREFIJO_CLAVE = "goodbite_orders_"
    CLAVE_USUARIO_SESION = "goodbite_user"


@pytest.fixture
def almacen():
    return MemoriaAlmacenClaveValor()


@pytest.fixture
def servicio(almacen):
    """Store bound to user +1555 with empty storage."""
    servicio = ServicioOrdenes(almacen, prefijo="goodbite_orders_")
    servicio.vincular_usuario("+1555")
    return servicio


@pytest.fixture
def nueva_app(almacen):
    """Builds the app on demand, after a test has seeded the storage."""
    return lambda: crear_app(ConfigPruebas, almacen=almacen)


@pytest.fixture
def app(nueva_app):
    return nueva_app()


@pytest.fixture
def client(app):
    return app.test_client()
