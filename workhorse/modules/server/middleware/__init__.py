from .errors import error_middleware
from .metrics import metrics_middleware
from .request_id import REQUEST_ID_HEADER, request_id_middleware

__all__ = ['REQUEST_ID_HEADER', 'error_middleware', 'metrics_middleware', 'request_id_middleware']
