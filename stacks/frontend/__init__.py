from .construct import FrontendConstruct, FrontendInputParameters
from .stack import FrontendStack

__all__ = ["FrontendConstruct", "FrontendInputParameters", "FrontendStack"]
