"""Tests for ServicioOrdenes: session isolation, transitions, persistence policy."""

import json
import logging
from datetime import datetime
from fractions import Fraction

import pytest

from servicios.servicio_autenticacion.aplicacion.casos_uso.obtener_usuario_activo import ObtenerUsuarioActivo
from servicios.servicio_pedidos.aplicacion.repositorios.almacen_interface import ErrorAlmacen
from servicios.servicio_pedidos.aplicacion.servicio_ordenes import ServicioOrdenes
from servicios.servicio_pedidos.dominio.orden import EstadoOrden, Orden
from servicios.servicio_pedidos.dominio.resultados import Cargado, MotivoFallo, MotivoVacio, Vacio
from servicios.servicio_pedidos.infraestructura.persistencia.memoria_almacen import MemoriaAlmacenClaveValor

PREFIJO = "goodbite_orders_"


class AlmacenRoto(MemoriaAlmacenClaveValor):
    """Reads work, writes fail like a full or unavailable backend."""

    def guardar(self, clave, valor):
        raise ErrorAlmacen("cuota excedida")

    def eliminar(self, clave):
        raise ErrorAlmacen("no disponible")


def _guardadas(almacen, usuario="+1555"):
    return json.loads(almacen.obtener(PREFIJO + usuario))


# ----------------------------------------------------------------------
# Escenario completo
# ----------------------------------------------------------------------
def test_full_pickup_scenario(almacen, servicio):
    assert servicio.contar() == 0

    orden = servicio.crear({"price": 12.5, "items": ["combo"]})
    assert servicio.contar() == 1
    assert servicio.ingresos_totales() == 12.5

    assert servicio.marcar_recogida(orden.id)
    assert len(servicio.listar_por_estado("picked")) == 1
    assert servicio.listar_por_estado("pending") == []

    servicio.limpiar_todo()
    assert servicio.contar() == 0
    assert almacen.obtener(PREFIJO + "+1555") is None

    otro = ServicioOrdenes(almacen, prefijo=PREFIJO)
    otro.vincular_usuario("+1555")
    assert otro.contar() == 0


# ----------------------------------------------------------------------
# Sesion y aislamiento
# ----------------------------------------------------------------------
def test_users_are_isolated(almacen, servicio):
    servicio.crear({"id": "a1", "price": 5})
    antes = servicio.listar_todas()

    servicio.vincular_usuario("+2000")
    assert servicio.contar() == 0
    servicio.crear({"id": "b1", "price": 8})
    servicio.eliminar("b1")
    servicio.crear({"id": "b2", "price": 9})

    servicio.vincular_usuario("+1555")
    assert servicio.listar_todas() == antes
    assert [o["id"] for o in _guardadas(almacen, "+2000")] == ["b2"]


def test_storage_key_uses_prefix_and_user(servicio):
    assert servicio.clave_almacen() == PREFIJO + "+1555"
    assert servicio.clave_almacen("+2") == PREFIJO + "+2"


def test_construction_binds_user_from_session_marker(almacen):
    almacen.guardar("goodbite_user", json.dumps({"phone": "+502"}))
    almacen.guardar(PREFIJO + "+502", json.dumps([Orden.crear_nueva({"id": "z", "price": 1}).to_dict()]))

    servicio = ServicioOrdenes(almacen, lector_sesion=ObtenerUsuarioActivo(almacen, "goodbite_user"), prefijo=PREFIJO)

    assert servicio.usuario_activo == "+502"
    assert servicio.existe("z")
    assert isinstance(servicio.ultima_carga, Cargado)


def test_construction_without_session_is_empty(almacen):
    servicio = ServicioOrdenes(almacen, lector_sesion=lambda: "", prefijo=PREFIJO)
    assert servicio.usuario_activo == ""
    assert servicio.contar() == 0
    assert servicio.ultima_carga == Vacio(MotivoVacio.SIN_SESION)


def test_clear_session_keeps_persisted_data(almacen, servicio):
    servicio.crear({"price": 4})
    servicio.limpiar_sesion()

    assert servicio.usuario_activo == ""
    assert servicio.contar() == 0
    assert len(_guardadas(almacen)) == 1


def test_create_without_session_is_transient(almacen):
    servicio = ServicioOrdenes(almacen, prefijo=PREFIJO)

    orden = servicio.crear({"price": 3})

    assert orden is not None
    assert servicio.contar() == 1
    assert almacen.valores == {}
    servicio.recargar()
    assert servicio.contar() == 0


def test_clear_all_without_session_only_clears_memory(almacen):
    almacen.guardar(PREFIJO, "[]")
    servicio = ServicioOrdenes(almacen, prefijo=PREFIJO)
    servicio.crear({"price": 3})

    servicio.limpiar_todo()

    assert servicio.contar() == 0
    assert almacen.obtener(PREFIJO) == "[]"


# ----------------------------------------------------------------------
# Carga degradada
# ----------------------------------------------------------------------
@pytest.mark.parametrize("crudo", [
    "{no es json",
    json.dumps({"id": "1"}),
    json.dumps([{"id": "1", "price": 1, "status": "lost"}]),
    json.dumps([{"price": 1}]),
    "[" * 100000 + "]" * 100000,
])
def test_corrupt_storage_loads_as_empty(almacen, crudo, caplog):
    almacen.guardar(PREFIJO + "+9", crudo)
    servicio = ServicioOrdenes(almacen, prefijo=PREFIJO)

    with caplog.at_level(logging.WARNING, logger="servicios.pedidos.servicio_ordenes"):
        servicio.vincular_usuario("+9")

    assert servicio.contar() == 0
    assert servicio.ultima_carga.motivo is MotivoVacio.CORRUPTO
    assert "corruptas" in caplog.text


def test_missing_key_loads_as_empty(servicio):
    assert servicio.ultima_carga == Vacio(MotivoVacio.SIN_DATOS)


def test_storage_read_error_loads_as_empty():
    class AlmacenIlegible(MemoriaAlmacenClaveValor):
        def obtener(self, clave):
            raise ErrorAlmacen("disco")

    servicio = ServicioOrdenes(AlmacenIlegible(), prefijo=PREFIJO)
    servicio.vincular_usuario("+1")

    assert servicio.contar() == 0
    assert servicio.ultima_carga.motivo is MotivoVacio.ERROR_ALMACEN


def test_duplicate_ids_in_storage_keep_first(almacen):
    almacen.guardar(PREFIJO + "+1", json.dumps([
        {"id": "d", "price": 1, "status": "pending"},
        {"id": "d", "price": 99, "status": "picked"},
        {"id": "e", "price": 2, "status": "expired"},
    ]))
    servicio = ServicioOrdenes(almacen, prefijo=PREFIJO)
    servicio.vincular_usuario("+1")

    assert [o.id for o in servicio.listar_todas()] == ["d", "e"]
    assert servicio.ingresos_totales() == 3


def test_reload_picks_up_external_changes(almacen, servicio):
    servicio.crear({"id": "a", "price": 1})
    externo = ServicioOrdenes(almacen, prefijo=PREFIJO)
    externo.vincular_usuario("+1555")
    externo.crear({"id": "b", "price": 2})

    servicio.recargar()

    assert [o.id for o in servicio.listar_todas()] == ["a", "b"]


# ----------------------------------------------------------------------
# Mutaciones
# ----------------------------------------------------------------------
def test_every_mutation_persists_immediately(almacen, servicio):
    servicio.crear({"id": "a", "price": 1})
    assert [o["status"] for o in _guardadas(almacen)] == ["pending"]

    servicio.marcar_expirada("a")
    assert [o["status"] for o in _guardadas(almacen)] == ["expired"]

    servicio.crear({"id": "b", "price": 2})
    servicio.eliminar("a")
    assert [o["id"] for o in _guardadas(almacen)] == ["b"]


def test_create_rejects_invalid_data_without_raising(servicio):
    assert servicio.crear({"items": []}) is None
    assert servicio.crear({"price": -5}) is None
    assert servicio.contar() == 0


def test_create_rejects_duplicate_id(servicio):
    servicio.crear({"id": "a", "price": 1})
    assert servicio.crear({"id": "a", "price": 2}) is None
    assert servicio.contar() == 1


def test_transition_on_non_pending_fails_and_keeps_status(servicio):
    orden = servicio.crear({"price": 1})
    assert servicio.marcar_recogida(orden.id)

    resultado = servicio.marcar_expirada(orden.id)
    assert not resultado
    assert resultado.motivo is MotivoFallo.NO_PENDIENTE
    assert servicio.buscar_por_id(orden.id).esta_recogida()

    resultado = servicio.marcar_recogida(orden.id)
    assert resultado.motivo is MotivoFallo.NO_PENDIENTE


def test_transition_on_missing_id_fails(servicio):
    resultado = servicio.marcar_recogida("nada")
    assert not resultado
    assert resultado.motivo is MotivoFallo.NO_ENCONTRADA
    assert servicio.marcar_expirada("nada").motivo is MotivoFallo.NO_ENCONTRADA


def test_delete_then_find_returns_none(servicio):
    orden = servicio.crear({"price": 1})
    assert servicio.eliminar(orden.id)
    assert servicio.buscar_por_id(orden.id) is None
    assert not servicio.existe(orden.id)


def test_delete_missing_id_leaves_collection(servicio):
    servicio.crear({"id": "a", "price": 1})
    resultado = servicio.eliminar("b")
    assert resultado.motivo is MotivoFallo.NO_ENCONTRADA
    assert servicio.contar() == 1


def test_write_failure_keeps_in_memory_effect(caplog):
    almacen = AlmacenRoto()
    servicio = ServicioOrdenes(almacen, prefijo=PREFIJO)
    servicio.vincular_usuario("+1")

    with caplog.at_level(logging.ERROR, logger="servicios.pedidos.servicio_ordenes"):
        orden = servicio.crear({"price": 2})
        assert servicio.marcar_recogida(orden.id)
        servicio.limpiar_todo()

    assert servicio.contar() == 0
    assert "Error guardando ordenes" in caplog.text
    assert "Error eliminando ordenes" in caplog.text


# ----------------------------------------------------------------------
# Consultas
# ----------------------------------------------------------------------
def test_queries_return_copies(almacen, servicio):
    orden = servicio.crear({"price": 1, "items": ["a"]})

    copia = servicio.buscar_por_id(orden.id)
    copia.marcar_como_recogida()
    orden.marcar_como_expirada()
    servicio.listar_todas()[0].datos["items"].append("b")

    guardada = servicio.buscar_por_id(orden.id)
    assert guardada.esta_pendiente()
    assert guardada.datos == {"items": ["a"]}
    assert _guardadas(almacen)[0]["status"] == "pending"


def test_load_outcome_does_not_share_orders(almacen, servicio):
    orden = servicio.crear({"price": 1})
    servicio.recargar()

    servicio.ultima_carga.ordenes[0].marcar_como_recogida()

    assert servicio.buscar_por_id(orden.id).esta_pendiente()
    assert servicio.ultima_carga.ordenes[0].esta_pendiente()
    assert _guardadas(almacen)[0]["status"] == "pending"


def test_clear_all_resets_load_outcome(servicio):
    servicio.crear({"price": 1})
    servicio.recargar()

    servicio.limpiar_todo()

    assert servicio.ultima_carga == Vacio(MotivoVacio.SIN_DATOS)


def test_operation_results_carry_copies(almacen, servicio):
    a = servicio.crear({"id": "a", "price": 1})
    servicio.crear({"id": "b", "price": 2})

    recogida = servicio.marcar_recogida("a").orden
    recogida.datos["extra"] = True
    eliminada = servicio.eliminar("b").orden
    eliminada.marcar_como_expirada()

    assert servicio.buscar_por_id("a").datos == {}
    assert servicio.buscar_por_id("a").esta_recogida()
    assert a.esta_pendiente()
    assert [(o["id"], o["status"]) for o in _guardadas(almacen)] == [("a", "picked")]


@pytest.mark.parametrize("datos", [
    {"id": "b", "price": Fraction(1, 3)},
    {"id": "b", "price": 2, "pickup": datetime(2026, 1, 1)},
])
def test_unserializable_order_is_rejected(almacen, servicio, datos):
    servicio.crear({"id": "a", "price": 1})

    assert servicio.crear(datos) is None
    servicio.crear({"id": "c", "price": 3})
    servicio.marcar_recogida("a")

    assert servicio.contar() == 2
    assert [(o["id"], o["status"]) for o in _guardadas(almacen)] == [("a", "picked"), ("c", "pending")]


def test_list_by_status_preserves_order(servicio):
    for i in range(5):
        servicio.crear({"id": str(i), "price": i})
    servicio.marcar_recogida("1")
    servicio.marcar_expirada("2")
    servicio.marcar_recogida("3")

    assert [o.id for o in servicio.listar_pendientes()] == ["0", "4"]
    assert [o.id for o in servicio.listar_recogidas()] == ["1", "3"]
    assert [o.id for o in servicio.listar_expiradas()] == ["2"]
    assert [o.id for o in servicio.listar_por_estado(EstadoOrden.RECOGIDA)] == ["1", "3"]
    assert servicio.listar_por_estado("cancelled") == []


def test_total_revenue_matches_listed_prices(servicio):
    assert servicio.ingresos_totales() == 0
    for precio in (1.5, 2, 0, 10.25):
        servicio.crear({"price": precio})
    servicio.eliminar(servicio.listar_todas()[1].id)

    assert servicio.ingresos_totales() == sum(o.precio for o in servicio.listar_todas())
    assert servicio.ingresos_totales() == 11.75
    assert len(servicio) == 3


def test_summary_counts_per_status(servicio):
    a = servicio.crear({"price": 1})
    servicio.crear({"price": 2})
    servicio.marcar_expirada(a.id)

    assert servicio.resumen() == {
        "usuario": "+1555",
        "total_ordenes": 2,
        "ingresos_totales": 3,
        "por_estado": {"pending": 1, "picked": 0, "expired": 1},
    }
