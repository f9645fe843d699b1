"""
Role hierarchy tests.

Verifies:
1. Levels and scopes match the role table
2. The hierarchy check is monotonic in the actor's level
3. Creation rules are set membership, not level comparison
4. Unknown role strings get the lowest level and no privileges
"""

import itertools

import pytest

from app.rbac import (
    ADMIN,
    MANAGER,
    ROLE_CREATION_RULES,
    ROLE_HIERARCHY,
    SUPER_ADMIN,
    USER,
    VENDOR,
    RoleScope,
    all_roles,
    can_create_role,
    creatable_roles,
    get_role_definition,
    has_global_scope,
    has_required_role,
    is_valid_role,
    role_level,
    role_scope,
)


class TestRoleTable:

    def test_levels(self):
        assert dict(ROLE_HIERARCHY) == {
            SUPER_ADMIN: 5,
            ADMIN: 4,
            MANAGER: 3,
            VENDOR: 2,
            USER: 1,
        }

    def test_all_roles_most_privileged_first(self):
        assert all_roles() == [SUPER_ADMIN, ADMIN, MANAGER, VENDOR, USER]

    @pytest.mark.parametrize("role,scope", [
        (SUPER_ADMIN, RoleScope.GLOBAL),
        (ADMIN, RoleScope.GLOBAL),
        (MANAGER, RoleScope.SCOPED),
        (VENDOR, RoleScope.OWN),
        (USER, RoleScope.OWN),
    ])
    def test_scopes(self, role, scope):
        assert role_scope(role) == scope

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            ROLE_HIERARCHY["HACKER"] = 99


class TestHierarchyCheck:

    def test_no_requirement_admits_everyone(self):
        assert has_required_role(USER, [])
        assert has_required_role("NOT_A_ROLE", None)

    @pytest.mark.parametrize("actor,required", list(itertools.product(
        [SUPER_ADMIN, ADMIN, MANAGER, VENDOR, USER],
        [SUPER_ADMIN, ADMIN, MANAGER, VENDOR, USER],
    )))
    def test_level_comparison(self, actor, required):
        assert has_required_role(actor, [required]) is (role_level(actor) >= role_level(required))

    def test_monotonic(self):
        roles = all_roles()
        for required in roles:
            for lower, higher in itertools.combinations(reversed(roles), 2):
                if has_required_role(lower, [required]):
                    assert has_required_role(higher, [required])

    def test_any_of_several(self):
        assert has_required_role(VENDOR, [SUPER_ADMIN, ADMIN, VENDOR])
        assert not has_required_role(USER, [SUPER_ADMIN, ADMIN, VENDOR])


class TestCreationRules:

    @pytest.mark.parametrize("creator,allowed", [
        (SUPER_ADMIN, {ADMIN}),
        (ADMIN, {MANAGER}),
        (MANAGER, set()),
        (VENDOR, {ADMIN, MANAGER}),
        (USER, set()),
    ])
    def test_rule_table(self, creator, allowed):
        assert set(creatable_roles(creator)) == allowed
        assert ROLE_CREATION_RULES[creator] == frozenset(allowed)

    def test_vendor_creates_above_its_level(self):
        assert role_level(ADMIN) > role_level(VENDOR)
        assert can_create_role(VENDOR, ADMIN)

    def test_admin_cannot_create_admin(self):
        assert not can_create_role(ADMIN, ADMIN)

    def test_nobody_creates_super_admin(self):
        assert not any(can_create_role(role, SUPER_ADMIN) for role in all_roles())


class TestUnknownRole:

    @pytest.mark.parametrize("role", ["HACKER", "", None, "admin"])
    def test_unknown_role_has_nothing(self, role):
        assert not is_valid_role(role)
        assert role_level(role) == 0
        assert role_scope(role) == RoleScope.OWN
        assert creatable_roles(role) == frozenset()
        assert not has_global_scope(role)
        assert not has_required_role(role, [USER])
        assert get_role_definition(role) is None


class TestRoleDefinition:

    def test_vendor_definition(self):
        definition = get_role_definition(VENDOR)
        assert definition["code"] == VENDOR
        assert definition["level"] == 2
        assert definition["scope"] == RoleScope.OWN
        assert definition["can_create"] == [ADMIN, MANAGER]
        assert definition["description"]
