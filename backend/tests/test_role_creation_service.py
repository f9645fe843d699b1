"""
Delegated user creation tests.

Verifies:
1. Rule-table decisions for every creator role
2. VENDOR creators must name their own live vendor profile
3. MANAGER creators are denied before anything is written
4. Created users carry created_by and vendor scoping
"""

import pytest

from app.extensions import db
from app.models import User
from app.rbac import ADMIN, MANAGER, SUPER_ADMIN, USER, VENDOR
from app.services import role_creation_service
from app.services.role_creation_service import (
    RoleCreationDeniedError,
    RoleCreationValidationError,
    create_user_with_role,
    get_role_creation_rules,
    get_users_by_creator,
    validate_role_creation,
)

from conftest import PASSWORD


def _payload(email, role, **extra):
    data = {"email": email, "password": PASSWORD, "full_name": "New Staff", "role": role}
    data.update(extra)
    return data


class TestValidateRoleCreation:

    def test_super_admin_creates_admin(self, super_admin_user):
        assert validate_role_creation(super_admin_user, ADMIN) is None

    @pytest.mark.parametrize("target", [SUPER_ADMIN, MANAGER, VENDOR, USER])
    def test_super_admin_limited_to_admin(self, super_admin_user, target):
        with pytest.raises(RoleCreationDeniedError, match=f"You cannot create users with role: {target}"):
            validate_role_creation(super_admin_user, target)

    def test_admin_creates_manager(self, admin_user):
        assert validate_role_creation(admin_user, MANAGER) is None

    def test_admin_cannot_create_admin(self, admin_user):
        with pytest.raises(RoleCreationDeniedError):
            validate_role_creation(admin_user, ADMIN)

    def test_vendor_creates_admin_for_own_vendor(self, vendor_user, vendor_profile):
        vendor = validate_role_creation(vendor_user, ADMIN, vendor_profile.id)
        assert vendor.id == vendor_profile.id

    def test_vendor_id_may_be_a_string(self, vendor_user, vendor_profile):
        assert validate_role_creation(vendor_user, MANAGER, str(vendor_profile.id)).id == vendor_profile.id

    def test_vendor_must_name_vendor(self, vendor_user, vendor_profile):
        with pytest.raises(RoleCreationValidationError, match="Vendor must specify their vendor ID"):
            validate_role_creation(vendor_user, ADMIN)

    def test_vendor_bad_vendor_id(self, vendor_user, vendor_profile):
        with pytest.raises(RoleCreationValidationError):
            validate_role_creation(vendor_user, ADMIN, "abc")

    def test_vendor_cannot_use_foreign_vendor(self, vendor_user, vendor_profile, other_vendor_profile):
        with pytest.raises(RoleCreationDeniedError, match="your own vendor organization"):
            validate_role_creation(vendor_user, ADMIN, other_vendor_profile.id)

    def test_vendor_cannot_use_deleted_vendor(self, vendor_user, vendor_profile):
        vendor_profile.is_deleted = True
        vendor_profile.is_active = False
        db.session.commit()
        with pytest.raises(RoleCreationDeniedError):
            validate_role_creation(vendor_user, ADMIN, vendor_profile.id)

    def test_vendor_cannot_create_vendor(self, vendor_user, vendor_profile):
        with pytest.raises(RoleCreationDeniedError):
            validate_role_creation(vendor_user, VENDOR, vendor_profile.id)

    @pytest.mark.parametrize("target", [ADMIN, MANAGER, VENDOR, USER])
    def test_manager_always_denied(self, manager_user, target):
        with pytest.raises(RoleCreationDeniedError):
            validate_role_creation(manager_user, target)

    def test_user_denied(self, shopper_user):
        with pytest.raises(RoleCreationDeniedError):
            validate_role_creation(shopper_user, USER)


class TestCreateUserWithRole:

    def test_admin_creates_manager(self, admin_user):
        user = create_user_with_role(admin_user, _payload("staff@jewels.test", "manager"))

        assert user.role == MANAGER
        assert user.created_by == str(admin_user.id)
        assert user.vendor_id is None
        assert user.is_active is True
        assert user.is_deleted is False

    def test_vendor_scopes_new_user(self, vendor_user, vendor_profile):
        user = create_user_with_role(
            vendor_user,
            _payload("shopadmin@jewels.test", ADMIN, created_by_vendor_id=vendor_profile.id),
        )
        assert user.role == ADMIN
        assert user.vendor_id == vendor_profile.id
        assert user.created_by == str(vendor_user.id)

    def test_manager_denied_before_write(self, manager_user):
        before = db.session.query(User).count()
        with pytest.raises(RoleCreationDeniedError):
            create_user_with_role(manager_user, _payload("nope@jewels.test", USER))
        assert db.session.query(User).count() == before
        assert db.session.query(User).filter_by(email="nope@jewels.test").first() is None


class TestCreatorQueries:

    def test_users_by_creator(self, admin_user):
        for n in range(3):
            create_user_with_role(admin_user, _payload(f"m{n}@jewels.test", MANAGER))

        result = get_users_by_creator(admin_user, page=1, limit=2)
        assert result["total"] == 3
        assert len(result["users"]) == 2
        assert result["total_pages"] == 2

    def test_rules_for_vendor(self):
        rules = get_role_creation_rules(VENDOR)
        assert rules == {
            "creator_role": VENDOR,
            "allowed_roles": [ADMIN, MANAGER],
            "scope": "OWN",
            "can_create_users": True,
        }

    def test_rules_for_manager(self):
        assert role_creation_service.get_role_creation_rules(MANAGER)["can_create_users"] is False
