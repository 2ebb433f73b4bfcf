"""Tests for role resolution."""

from compliancebot.models import Role
from compliancebot.roles import RoleResolver

OFFICER = "0x" + "a1" * 20
MANAGER = "0x" + "b2" * 20


class TestRoleResolver:
    def test_officer(self):
        resolver = RoleResolver(officer_address=OFFICER, manager_address=MANAGER)
        assert resolver.resolve(OFFICER) == Role.COMPLIANCE_OFFICER

    def test_manager(self):
        resolver = RoleResolver(officer_address=OFFICER, manager_address=MANAGER)
        assert resolver.resolve(MANAGER) == Role.MANAGER

    def test_unknown_address_is_customer(self):
        resolver = RoleResolver(officer_address=OFFICER, manager_address=MANAGER)
        assert resolver.resolve("0x" + "c3" * 20) == Role.CUSTOMER

    def test_case_insensitive(self):
        resolver = RoleResolver(officer_address=OFFICER.upper(), manager_address=MANAGER)
        assert resolver.resolve(OFFICER) == Role.COMPLIANCE_OFFICER
        assert resolver.resolve(MANAGER.upper()) == Role.MANAGER

    def test_empty_address_is_customer(self):
        resolver = RoleResolver(officer_address=OFFICER, manager_address=MANAGER)
        assert resolver.resolve("") == Role.CUSTOMER
        assert resolver.resolve(None) == Role.CUSTOMER

    def test_unconfigured_roles_never_match(self):
        resolver = RoleResolver()
        assert resolver.resolve("") == Role.CUSTOMER
        assert resolver.resolve(OFFICER) == Role.CUSTOMER
        assert resolver.officer_address == ""
