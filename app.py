# app.py
from flask import Flask, jsonify, current_app
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
import logging

from configuracion import Config
from servicios.servicio_autenticacion.aplicacion.casos_uso.obtener_usuario_activo import ObtenerUsuarioActivo
from servicios.servicio_pedidos.aplicacion.servicio_ordenes import ServicioOrdenes
from servicios.servicio_pedidos.infraestructura.persistencia.sqlalchemy_almacen import SQLAlchemyAlmacenClaveValor
from servicios.servicio_pedidos.presentacion.rutas import pedidos_bp


def _configurar_logging(app, nivel: str) -> None:
    if not app.logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        app.logger.addHandler(handler)
    app.logger.setLevel(getattr(logging, nivel, logging.INFO))

    # Los servicios usan loggers "servicios.*"; comparten el handler de la app
    servicios_logger = logging.getLogger("servicios")
    if not servicios_logger.handlers:
        servicios_logger.handlers = list(app.logger.handlers)
    servicios_logger.setLevel(getattr(logging, nivel, logging.INFO))


def crear_app(config_objeto=None, almacen=None):
    """
    Raíz de composición: una sola instancia de ServicioOrdenes por aplicación.
    - config_objeto: clase/objeto de configuración (por defecto Config)
    - almacen: IAlmacenClaveValor a usar (por defecto SQLAlchemy sobre la URI configurada)
    """
    app = Flask(__name__)
    app.config.from_object(config_objeto or Config)

    # Habilitar CORS para la API
    # Si necesitas probar desde un dominio distinto, define CORS_ORIGINS
    # como lista separada por comas: "https://mi-frontend.com,https://otro.com"
    cors_env = app.config.get("CORS_ORIGINS", "*")
    allowed = [o.strip() for o in cors_env.split(",") if o.strip()] if cors_env and cors_env != "*" else "*"
    CORS(app, resources={r"/api/*": {"origins": allowed}}, supports_credentials=True)

    _configurar_logging(app, str(app.config.get("LOG_LEVEL", "INFO")).upper())
    # Evitar redirecciones 308/301 automáticas por barra final en rutas
    app.url_map.strict_slashes = False

    if almacen is None:
        almacen = SQLAlchemyAlmacenClaveValor(app.config["SQLALCHEMY_DATABASE_URI"])
    lector_sesion = ObtenerUsuarioActivo(almacen, app.config["CLAVE_USUARIO_SESION"])
    app.extensions["servicio_ordenes"] = ServicioOrdenes(
        almacen,
        lector_sesion=lector_sesion,
        prefijo=app.config["PEDIDOS_PREFIJO_CLAVE"],
    )

    # Blueprints
    app.register_blueprint(pedidos_bp)   # /api/v1/pedidos/*

    @app.errorhandler(404)
    def pagina_no_encontrada(_error):
        return jsonify({"ok": False, "error": "Ruta no encontrada"}), 404

    @app.errorhandler(Exception)
    def _unhandled(e):
        if isinstance(e, HTTPException):
            return jsonify({"ok": False, "error": e.name}), e.code
        current_app.logger.exception("Unhandled")
        return {"ok": False, "error": "server_error"}, 500

    return app

create_app = crear_app

if __name__ == "__main__":
    app = crear_app()
    print("Iniciando servidor Flask. Accede a http://127.0.0.1:5000/")
    app.run(debug=True)
