"""Certificates and DNS records of the public domains."""

from .backend import BackendDomainStack
from .certificate import CertificateStack
from .frontend import FrontendDomainStack
from .hosted_zone import resolve_hosted_zone

__all__ = [
    "BackendDomainStack",
    "CertificateStack",
    "FrontendDomainStack",
    "resolve_hosted_zone",
]
