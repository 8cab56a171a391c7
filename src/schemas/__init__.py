from .common import ErrorCode, ErrorResponse
from .db_test import DbTestError, DbTestResponse
from .health import HealthResponse, HelloResponse

__all__ = [
    # common
    "ErrorCode",
    "ErrorResponse",
    # db_test
    "DbTestError",
    "DbTestResponse",
    # health
    "HealthResponse",
    "HelloResponse",
]
