"""Boundary Protocols — contracts between core/services and external collaborators.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - External collaborators (identity provider, email sender) accessed through Protocol types
    - Implementations provided by the shell via dependency injection (api/deps.py)

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - EmailSender.send never raises: failures come back as DeliveryReport(success=False)
    - IdentityProvider raises IdentityProviderError with the provider's own code
"""

from typing import Protocol

from tbi_portal.core.domain_types import (
    AccountId, DeliveryReport, IdentityClaims, IdentitySession, OutgoingEmail,
)


class EmailSender(Protocol):
    """Contract for the transactional email provider."""
    async def send(self, email: OutgoingEmail) -> DeliveryReport: ...


class IdentityProvider(Protocol):
    """Contract for the authoritative login system."""
    async def create_account(self, email: str, password: str) -> IdentitySession: ...
    async def sign_in(self, email: str, password: str) -> IdentitySession: ...
    async def sign_out(self, token: str) -> None: ...
    async def verify_session(self, token: str) -> IdentityClaims | None: ...
    async def change_password(
        self, account_id: AccountId, current_password: str, new_password: str,
    ) -> None: ...
    async def delete_account(self, account_id: AccountId) -> None: ...
    async def send_password_reset_email(self, email: str) -> DeliveryReport: ...
    async def reset_password(self, token: str, new_password: str) -> AccountId: ...
