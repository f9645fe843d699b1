"""
Ownership check tests.

Verifies:
1. GLOBAL roles bypass every check, even for missing resources
2. VENDOR owns its products, its vendor profile and users it created
3. MANAGER and USER own nothing but themselves
4. Unknown entities and malformed ids are denied
"""

import pytest

from app.rbac import ADMIN, MANAGER
from app.services.ownership_service import OwnershipDeniedError, check_ownership, require_owner

from conftest import make_user


class TestGlobalBypass:

    @pytest.mark.parametrize("entity", ["product", "vendor", "user", "category"])
    def test_admin_passes(self, admin_user, entity):
        assert check_ownership(admin_user, entity, 999999)

    def test_super_admin_passes_unknown_entity(self, super_admin_user):
        assert check_ownership(super_admin_user, "spaceship", 1)


class TestVendorOwnership:

    def test_own_product(self, vendor_user, product):
        assert check_ownership(vendor_user, "product", product.id)

    def test_foreign_product(self, vendor_user, vendor_profile, other_product):
        assert not check_ownership(vendor_user, "product", other_product.id)

    def test_own_vendor_profile(self, vendor_user, vendor_profile):
        assert check_ownership(vendor_user, "vendor", vendor_profile.id)

    def test_foreign_vendor_profile(self, vendor_user, other_vendor_profile):
        assert not check_ownership(vendor_user, "vendor", other_vendor_profile.id)

    def test_self(self, vendor_user):
        assert check_ownership(vendor_user, "user", vendor_user.id)

    def test_created_user(self, vendor_user):
        staff = make_user("staff@jewels.test", MANAGER, created_by=str(vendor_user.id))
        assert check_ownership(vendor_user, "user", staff.id)

    def test_other_user(self, vendor_user, shopper_user):
        assert not check_ownership(vendor_user, "user", shopper_user.id)

    def test_category_denied(self, vendor_user, category):
        assert not check_ownership(vendor_user, "category", category.id)

    def test_missing_product(self, vendor_user):
        assert not check_ownership(vendor_user, "product", 424242)

    @pytest.mark.parametrize("entity_id", ["abc", None, ""])
    def test_malformed_id(self, vendor_user, product, entity_id):
        assert not check_ownership(vendor_user, "product", entity_id)

    def test_string_id_accepted(self, vendor_user, product):
        assert check_ownership(vendor_user, "product", str(product.id))

    def test_unknown_entity(self, vendor_user):
        assert not check_ownership(vendor_user, "spaceship", 1)


class TestScopedAndOwnRoles:

    def test_manager_owns_no_products(self, manager_user, product):
        assert not check_ownership(manager_user, "product", product.id)

    def test_manager_owns_self(self, manager_user):
        assert check_ownership(manager_user, "user", manager_user.id)

    def test_manager_does_not_own_created_users(self, manager_user):
        other = make_user("other@jewels.test", ADMIN, created_by=str(manager_user.id))
        assert not check_ownership(manager_user, "user", other.id)

    def test_shopper_owns_self_only(self, shopper_user, admin_user):
        assert check_ownership(shopper_user, "user", shopper_user.id)
        assert not check_ownership(shopper_user, "user", admin_user.id)

    def test_no_user(self, product):
        assert not check_ownership(None, "product", product.id)


class TestRequireOwner:

    def test_raises_when_not_owner(self, vendor_user, other_product):
        with pytest.raises(OwnershipDeniedError, match="only manage your own resources"):
            require_owner(vendor_user, "product", other_product.id)

    def test_silent_when_owner(self, vendor_user, product):
        require_owner(vendor_user, "product", product.id)
