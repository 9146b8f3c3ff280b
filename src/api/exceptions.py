# src/api/exceptions.py
from fastapi import HTTPException
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE


class DriverUnavailableError(HTTPException):
    def __init__(self, detail: str = "Poll driver is not configured"):
        super().__init__(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
