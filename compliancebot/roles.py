"""
compliancebot - Role resolution from chat addresses.
"""

from typing import Optional

from .models import Role, canonical


class RoleResolver:
    """Maps a caller address to a role using two configured addresses.

    Both sides are lower-cased before comparison, so a checksummed address and
    its lower-case form resolve to the same role. Empty configured addresses
    never match.

    Example:
        ```python
        resolver = RoleResolver(officer_address="0xAbC...", manager_address="0xDeF...")
        resolver.resolve("0xabc...")  # Role.COMPLIANCE_OFFICER
        ```
    """

    def __init__(
        self,
        officer_address: Optional[str] = None,
        manager_address: Optional[str] = None,
    ):
        self._officer = canonical(officer_address)
        self._manager = canonical(manager_address)

    @property
    def officer_address(self) -> str:
        return self._officer

    @property
    def manager_address(self) -> str:
        return self._manager

    def resolve(self, address: Optional[str]) -> Role:
        address = canonical(address)
        if not address:
            return Role.CUSTOMER
        if address == self._officer:
            return Role.COMPLIANCE_OFFICER
        if address == self._manager:
            return Role.MANAGER
        return Role.CUSTOMER
