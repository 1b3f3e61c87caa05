"""Raw SQL execution layer."""
from minidb.connection.connection import Connection
from minidb.connection.errors import BindingError, DriverError, ExecutionError

__all__ = [
    "Connection",
    "DriverError",
    "BindingError",
    "ExecutionError",
]
