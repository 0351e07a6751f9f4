class StockServiceError(Exception):
    """Base de los errores del servicio"""
    pass


class ValidationError(StockServiceError):
    """Parámetros de request inválidos o faltantes"""
    pass


class AuthError(StockServiceError):
    """Falla al autenticar contra la API del exchange"""
    pass


class FetchError(StockServiceError):
    """Falla de red, status no-2xx o payload con forma inesperada"""
    pass


class NotFoundError(StockServiceError):
    """Request válido pero sin datos que califiquen"""
    pass
