"""Shared network of a deployment stage."""

from .construct import NetworkConstruct, NetworkInputParameters
from .stack import NetworkStack

__all__ = ["NetworkConstruct", "NetworkInputParameters", "NetworkStack"]
