"""Buraq: resource-scoped secret encryption and signing key issuance."""

__version__ = "0.1.0"
