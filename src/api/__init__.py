# src/api/__init__.py
from .app import create_app
from .router import router
from .models import HealthResponse, StatusResponse
from .exceptions import DriverUnavailableError

__all__ = [
    'create_app',
    'router',
    'HealthResponse',
    'StatusResponse',
    'DriverUnavailableError'
]
