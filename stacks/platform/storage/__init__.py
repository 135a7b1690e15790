from .construct import StorageConstruct, StorageInputParameters
from .stack import StorageStack

__all__ = ["StorageConstruct", "StorageInputParameters", "StorageStack"]
