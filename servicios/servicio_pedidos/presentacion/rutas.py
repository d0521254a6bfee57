from flask import Blueprint, current_app, jsonify, request

from servicios.servicio_pedidos.aplicacion.servicio_ordenes import ServicioOrdenes
from servicios.servicio_pedidos.dominio.resultados import MotivoFallo

# Crear el Blueprint de Pedidos
pedidos_bp = Blueprint('pedidos_bp', __name__, url_prefix='/api/v1/pedidos')

_CODIGOS_FALLO = {
    MotivoFallo.NO_ENCONTRADA: 404,
    MotivoFallo.NO_PENDIENTE: 409,
}


def obtener_servicio_ordenes() -> ServicioOrdenes:
    """Instancia única del servicio, registrada por crear_app()."""
    return current_app.extensions["servicio_ordenes"]


def _respuesta_resultado(resultado):
    if resultado:
        return jsonify({"ok": True, "orden": resultado.orden.to_dict()}), 200
    return jsonify({"ok": False, "error": resultado.motivo.value}), _CODIGOS_FALLO[resultado.motivo]


# ----------------- Sesion -----------------
@pedidos_bp.post('/sesion')
def vincular_usuario():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return jsonify({"ok": False, "error": "Falta phone"}), 400
    telefono = str(data.get("phone") or "").strip()
    if not telefono:
        return jsonify({"ok": False, "error": "Falta phone"}), 400
    servicio = obtener_servicio_ordenes()
    servicio.vincular_usuario(telefono)
    return jsonify({"ok": True, "resumen": servicio.resumen()}), 200


@pedidos_bp.delete('/sesion')
def limpiar_sesion():
    obtener_servicio_ordenes().limpiar_sesion()
    return jsonify({"ok": True}), 200


# ----------------- Ordenes -----------------
@pedidos_bp.get('')
def listar_ordenes():
    servicio = obtener_servicio_ordenes()
    estado = request.args.get("estado")
    ordenes = servicio.listar_por_estado(estado) if estado else servicio.listar_todas()
    return jsonify({"ok": True, "ordenes": [o.to_dict() for o in ordenes]}), 200


@pedidos_bp.post('')
def crear_orden():
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        return jsonify({"ok": False, "error": "Datos de orden incompletos"}), 400
    servicio = obtener_servicio_ordenes()
    if data.get("id") is not None and servicio.existe(str(data["id"])):
        return jsonify({"ok": False, "error": "id_duplicado"}), 409
    orden = servicio.crear(data)
    if orden is None:
        return jsonify({"ok": False, "error": "Datos de orden invalidos"}), 400
    current_app.logger.info("Orden creada %s", orden.id)
    return jsonify({"ok": True, "orden": orden.to_dict()}), 201


@pedidos_bp.delete('')
def limpiar_ordenes():
    obtener_servicio_ordenes().limpiar_todo()
    return jsonify({"ok": True}), 200


@pedidos_bp.get('/resumen')
def resumen():
    return jsonify({"ok": True, "resumen": obtener_servicio_ordenes().resumen()}), 200


@pedidos_bp.post('/recargar')
def recargar():
    servicio = obtener_servicio_ordenes()
    servicio.recargar()
    return jsonify({"ok": True, "total_ordenes": servicio.contar()}), 200


@pedidos_bp.get('/<id_orden>')
def obtener_orden(id_orden):
    orden = obtener_servicio_ordenes().buscar_por_id(id_orden)
    if orden is None:
        return jsonify({"ok": False, "error": MotivoFallo.NO_ENCONTRADA.value}), 404
    return jsonify({"ok": True, "orden": orden.to_dict()}), 200


@pedidos_bp.delete('/<id_orden>')
def eliminar_orden(id_orden):
    return _respuesta_resultado(obtener_servicio_ordenes().eliminar(id_orden))


@pedidos_bp.post('/<id_orden>/recoger')
def marcar_recogida(id_orden):
    return _respuesta_resultado(obtener_servicio_ordenes().marcar_recogida(id_orden))


@pedidos_bp.post('/<id_orden>/expirar')
def marcar_expirada(id_orden):
    return _respuesta_resultado(obtener_servicio_ordenes().marcar_expirada(id_orden))
