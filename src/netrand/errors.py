class NetRandError(Exception):
    """Base de todos los errores de netrand."""


class ConfigurationError(NetRandError, ValueError):
    """Parámetros inválidos al construir un Generator o al llamar a get()."""


class OutOfRangeError(NetRandError, RuntimeError):
    """Invariante interna rota (anchura >= 2^32, pool vaciado por debajo de cero)."""
