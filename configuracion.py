# configuracion.py
import os
from pathlib import Path

try:
    # Cargar variables de entorno si existe .env (opcional)
    from dotenv import load_dotenv, find_dotenv
    load_dotenv(find_dotenv())
except Exception:
    pass


class Config:
    """
    Configuración global de la aplicación Flask.
    Por defecto el almacen de pedidos vive en 'data/pedidos.db' en la raíz del proyecto.
    """

    # -------------------- Flask / SQLAlchemy --------------------
    BASE_DIR = Path(__file__).resolve().parent
    DB_PATH = BASE_DIR / "data" / "pedidos.db"
    # Prefer explicit SQLALCHEMY_DATABASE_URI, then DATABASE_URL (e.g., Neon), else local SQLite
    _db_url = (
        os.getenv("SQLALCHEMY_DATABASE_URI")
        or os.getenv("DATABASE_URL")
        or f"sqlite:///{DB_PATH.as_posix()}"
    )

    # Normalize Postgres URL to use psycopg3 driver if available
    try:
        import psycopg  # noqa: F401
        if _db_url.startswith("postgresql://") and "+" not in _db_url.split("://", 1)[0]:
            _db_url = _db_url.replace("postgresql://", "postgresql+psycopg://", 1)
    except Exception:
        pass

    SQLALCHEMY_DATABASE_URI = _db_url
    JSON_AS_ASCII = False

    # -------------------- Seguridad / Sesiones --------------------
    SECRET_KEY = os.getenv("SECRET_KEY", "clave-secreta-para-prototipo")

    # -------------------- Pedidos --------------------
    # Prefijo fijo de las claves de ordenes: <prefijo><telefono del usuario>
    PEDIDOS_PREFIJO_CLAVE = os.getenv("PEDIDOS_PREFIJO_CLAVE", "goodbite_orders_")
    # Clave donde el flujo de autenticación deja el usuario activo (JSON con 'phone')
    CLAVE_USUARIO_SESION = os.getenv("CLAVE_USUARIO_SESION", "goodbite_user")

    # -------------------- Operación --------------------
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
