"""
Credential providers for safe-sqlplus.

Providers are external programs that print a single credential on
standard output. CredentialProvider runs one of them and captures the
credential into a scrubbable buffer.
"""

from safe_sqlplus.providers.runner import CredentialProvider

__all__ = ["CredentialProvider"]
