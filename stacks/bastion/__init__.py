from .construct import BastionConstruct, BastionInputParameters
from .stack import BastionStack

__all__ = ["BastionConstruct", "BastionInputParameters", "BastionStack"]
