from .stack import CognitoStack

__all__ = ["CognitoStack"]
