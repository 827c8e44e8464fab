"""
Credential provider protocol for type hints.
"""

from __future__ import annotations

from typing import Protocol

from order_harvest.domain.models import Credential


class CredentialProvider(Protocol):
    async def acquire_token(self) -> Credential:
        ...
