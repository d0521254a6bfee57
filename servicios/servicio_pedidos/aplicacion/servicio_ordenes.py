# servicios/servicio_pedidos/aplicacion/servicio_ordenes.py

import json
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Union

from servicios.servicio_pedidos.aplicacion.repositorios.almacen_interface import IAlmacenClaveValor
from servicios.servicio_pedidos.dominio.excepciones import ExcepcionDominio
from servicios.servicio_pedidos.dominio.orden import EstadoOrden, Orden
from servicios.servicio_pedidos.dominio.resultados import (
    Cargado,
    MotivoFallo,
    MotivoVacio,
    ResultadoCarga,
    ResultadoOperacion,
    Vacio,
)

logger = logging.getLogger("servicios.pedidos.servicio_ordenes")

PREFIJO_CLAVE_DEFECTO = "goodbite_orders_"


# ==============================================================================
# SERVICIO DE ORDENES
# ==============================================================================
class ServicioOrdenes:
    """
    Coleccion de ordenes del usuario activo, persistida en un almacen clave-valor.

    - Cada usuario tiene su propia clave (prefijo + telefono), asi que dos
      usuarios nunca leen ni escriben el mismo registro.
    - Toda mutacion vuelve a guardar la coleccion completa en el momento.
    - Las consultas devuelven copias; solo los metodos del servicio modifican
      las ordenes que se persisten.
    - Ningun metodo publico lanza excepciones: los fallos se informan con
      None, listas vacias o ResultadoOperacion, y se registran en el log.
    """

    def __init__(self, almacen: IAlmacenClaveValor,
                 lector_sesion: Optional[Callable[[], str]] = None,
                 prefijo: str = PREFIJO_CLAVE_DEFECTO):
        """
        Inyeccion de Dependencias:
        - almacen: el contrato de almacenamiento duradero.
        - lector_sesion: devuelve el telefono del usuario con sesion iniciada
          ("" si no hay). Si se provee, se vincula ese usuario al construir.
        - prefijo: espacio de nombres fijo para las claves de ordenes.
        """
        self.almacen = almacen
        self.prefijo = prefijo
        self.usuario_activo = ""
        self.ordenes: List[Orden] = []
        self._ultima_carga: ResultadoCarga = Vacio(MotivoVacio.SIN_SESION)
        self._lock = threading.RLock()

        if lector_sesion is not None:
            self.vincular_usuario(lector_sesion() or "")

    # --------------------------------------------------------------------------
    # Persistencia
    # --------------------------------------------------------------------------
    def clave_almacen(self, usuario: Optional[str] = None) -> str:
        return self.prefijo + (self.usuario_activo if usuario is None else usuario)

    def _cargar(self) -> ResultadoCarga:
        if not self.usuario_activo:
            return Vacio(MotivoVacio.SIN_SESION)

        clave = self.clave_almacen()
        try:
            crudo = self.almacen.obtener(clave)
        except Exception as e:
            logger.exception("Error leyendo ordenes de %s", clave)
            return Vacio(MotivoVacio.ERROR_ALMACEN, str(e))

        if not crudo:
            return Vacio(MotivoVacio.SIN_DATOS)

        try:
            snapshots = json.loads(crudo)
            if not isinstance(snapshots, list):
                raise ValueError(f"se esperaba un arreglo, llego {type(snapshots).__name__}")
            ordenes = [Orden.from_dict(s) for s in snapshots]
        except (ValueError, TypeError, RecursionError, ExcepcionDominio) as e:
            logger.warning("Ordenes corruptas en %s, se usa coleccion vacia: %s", clave, e)
            return Vacio(MotivoVacio.CORRUPTO, str(e))

        return Cargado(self._sin_duplicados(ordenes, clave))

    @staticmethod
    def _sin_duplicados(ordenes: List[Orden], clave: str) -> List[Orden]:
        vistas = set()
        unicas = []
        for orden in ordenes:
            if orden.id in vistas:
                logger.warning("Orden duplicada %s en %s; se conserva la primera", orden.id, clave)
                continue
            vistas.add(orden.id)
            unicas.append(orden)
        return unicas

    def _aplicar_carga(self) -> None:
        carga = self._cargar()
        self.ordenes = list(carga.ordenes)
        # El resultado guardado no comparte instancias con la coleccion viva.
        if isinstance(carga, Cargado):
            carga = Cargado([orden.copiar() for orden in carga.ordenes])
        self._ultima_carga = carga

    @property
    def ultima_carga(self) -> ResultadoCarga:
        """Resultado de la ultima carga; las ordenes que trae son copias."""
        if isinstance(self._ultima_carga, Cargado):
            return Cargado([orden.copiar() for orden in self._ultima_carga.ordenes])
        return self._ultima_carga

    def _guardar(self) -> bool:
        """Escribe la coleccion completa del usuario activo. False si no se pudo."""
        if not self.usuario_activo:
            logger.warning("No hay usuario con sesion; las ordenes no se guardan")
            return False
        try:
            valor = json.dumps([orden.to_dict() for orden in self.ordenes])
            self.almacen.guardar(self.clave_almacen(), valor)
            return True
        except Exception:
            # La memoria queda como fuente de verdad hasta la proxima escritura exitosa.
            logger.exception("Error guardando ordenes de %s", self.clave_almacen())
            return False

    def _buscar(self, id_orden: str) -> Optional[Orden]:
        return next((o for o in self.ordenes if o.id == id_orden), None)

    # --------------------------------------------------------------------------
    # Sesion
    # --------------------------------------------------------------------------
    def vincular_usuario(self, usuario: str) -> None:
        """Cambia de usuario (login o cambio de cuenta) y carga sus ordenes."""
        with self._lock:
            self.usuario_activo = usuario or ""
            self._aplicar_carga()
            logger.info("Usuario vinculado: %r (%d ordenes)", self.usuario_activo, len(self.ordenes))

    def limpiar_sesion(self) -> None:
        """Logout: desvincula al usuario sin borrar sus datos guardados."""
        with self._lock:
            self.usuario_activo = ""
            self.ordenes = []
            self._ultima_carga = Vacio(MotivoVacio.SIN_SESION)

    def recargar(self) -> None:
        """Vuelve a leer el almacen (por si cambio fuera de este proceso)."""
        with self._lock:
            self._aplicar_carga()

    # --------------------------------------------------------------------------
    # Mutaciones
    # --------------------------------------------------------------------------
    def crear(self, datos: Dict[str, Any]) -> Optional[Orden]:
        """
        Crea una orden 'pending', la agrega al final y persiste.
        Retorna una copia de la orden, o None si los datos son invalidos o el
        id ya existe. Sin sesion, la orden solo vive en memoria.
        """
        with self._lock:
            try:
                orden = Orden.crear_nueva(datos)
            except ExcepcionDominio as e:
                logger.warning("Datos de orden invalidos: %s", e)
                return None
            if self._buscar(orden.id) is not None:
                logger.warning("Ya existe una orden con id %s", orden.id)
                return None
            try:
                json.dumps(orden.to_dict())
            except (TypeError, ValueError) as e:
                logger.warning("La orden %s no se puede serializar: %s", orden.id, e)
                return None

            self.ordenes.append(orden)
            self._guardar()
            return orden.copiar()

    def _transicionar(self, id_orden: str, transicion: Callable[[Orden], None]) -> ResultadoOperacion:
        with self._lock:
            orden = self._buscar(id_orden)
            if orden is None:
                return ResultadoOperacion.fallo(MotivoFallo.NO_ENCONTRADA)
            if not orden.esta_pendiente():
                return ResultadoOperacion.fallo(MotivoFallo.NO_PENDIENTE)
            transicion(orden)
            self._guardar()
            return ResultadoOperacion.ok(orden.copiar())

    def marcar_recogida(self, id_orden: str) -> ResultadoOperacion:
        return self._transicionar(id_orden, Orden.marcar_como_recogida)

    def marcar_expirada(self, id_orden: str) -> ResultadoOperacion:
        return self._transicionar(id_orden, Orden.marcar_como_expirada)

    def eliminar(self, id_orden: str) -> ResultadoOperacion:
        with self._lock:
            orden = self._buscar(id_orden)
            if orden is None:
                return ResultadoOperacion.fallo(MotivoFallo.NO_ENCONTRADA)
            self.ordenes.remove(orden)
            self._guardar()
            return ResultadoOperacion.ok(orden.copiar())

    def limpiar_todo(self) -> None:
        """Vacia la coleccion y borra el registro guardado del usuario activo."""
        with self._lock:
            self.ordenes = []
            if not self.usuario_activo:
                return
            self._ultima_carga = Vacio(MotivoVacio.SIN_DATOS)
            try:
                self.almacen.eliminar(self.clave_almacen())
            except Exception:
                logger.exception("Error eliminando ordenes de %s", self.clave_almacen())

    # --------------------------------------------------------------------------
    # Consultas
    # --------------------------------------------------------------------------
    def buscar_por_id(self, id_orden: str) -> Optional[Orden]:
        with self._lock:
            orden = self._buscar(id_orden)
            return orden.copiar() if orden else None

    def listar_todas(self) -> List[Orden]:
        with self._lock:
            return [orden.copiar() for orden in self.ordenes]

    def listar_por_estado(self, estado: Union[EstadoOrden, str]) -> List[Orden]:
        try:
            estado = EstadoOrden(estado)
        except ValueError:
            return []
        with self._lock:
            return [orden.copiar() for orden in self.ordenes if orden.estado is estado]

    def listar_pendientes(self) -> List[Orden]:
        return self.listar_por_estado(EstadoOrden.PENDIENTE)

    def listar_recogidas(self) -> List[Orden]:
        return self.listar_por_estado(EstadoOrden.RECOGIDA)

    def listar_expiradas(self) -> List[Orden]:
        return self.listar_por_estado(EstadoOrden.EXPIRADA)

    def existe(self, id_orden: str) -> bool:
        with self._lock:
            return self._buscar(id_orden) is not None

    def contar(self) -> int:
        with self._lock:
            return len(self.ordenes)

    __len__ = contar

    def ingresos_totales(self) -> float:
        with self._lock:
            return sum((orden.precio for orden in self.ordenes), 0)

    def resumen(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'usuario': self.usuario_activo,
                'total_ordenes': len(self.ordenes),
                'ingresos_totales': self.ingresos_totales(),
                'por_estado': {
                    estado.value: sum(1 for o in self.ordenes if o.estado is estado)
                    for estado in EstadoOrden
                },
            }
