"""Key issuance services built on the cryptographic core."""

from buraq.services.server_keys import AccessKey, ServerKeyIssuer, ServerKeyRecord

__all__ = ["AccessKey", "ServerKeyIssuer", "ServerKeyRecord"]
