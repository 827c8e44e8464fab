from .token_provider import RefreshTokenProvider, StaticTokenProvider, build_credential_provider
from .types import CredentialProvider

__all__ = [
    "CredentialProvider",
    "RefreshTokenProvider",
    "StaticTokenProvider",
    "build_credential_provider",
]
