class ExcepcionDominio(Exception):
    """Clase base para todas las excepciones de dominio de pedidos."""
    pass

class DatosDeOrdenInvalidosError(ExcepcionDominio):
    """Excepción lanzada cuando los datos para construir una orden son inválidos."""
    def __init__(self, mensaje="Los datos de orden proporcionados son inválidos."):
        self.mensaje = mensaje
        super().__init__(self.mensaje)
