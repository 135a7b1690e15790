from .construct import DatabaseConstruct, DatabaseInputParameters, sanitize_database_identifier
from .stack import DatabaseStack

__all__ = [
    "DatabaseConstruct",
    "DatabaseInputParameters",
    "DatabaseStack",
    "sanitize_database_identifier",
]
