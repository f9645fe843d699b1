# Overview: Shared pytest fixtures for the marketplace backend tests.

"""
Pytest configuration and fixtures.

Every test runs against an in-memory SQLite database with the soft-delete
bootstrap disabled at startup; bootstrap tests call it explicitly.
"""

import pytest

from app import create_app
from app.extensions import db
from app.models import Category, Product, Store, VendorProfile
from app.rbac import ADMIN, MANAGER, SUPER_ADMIN, USER, VENDOR
from app.services import auth_service


PASSWORD = "Password123!"

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    "SOFT_DELETE_BOOTSTRAP_ON_STARTUP": False,
    "BCRYPT_ROUNDS": 4,
}


@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Test client for making requests."""
    return app.test_client()


@pytest.fixture
def db_session(app):
    """Empty every table before the test and roll back anything left open after."""
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    db.session.rollback()
    db.session.remove()


# =============================================================================
# USERS
# =============================================================================


def make_user(email, role=USER, full_name=None, **kwargs):
    user = auth_service.create_user(
        email=email,
        password=PASSWORD,
        full_name=full_name,
        role=role,
        **kwargs,
    )
    db.session.commit()
    return user


@pytest.fixture
def super_admin_user(db_session):
    return make_user("root@jewels.test", SUPER_ADMIN, "Root Admin")


@pytest.fixture
def admin_user(db_session):
    return make_user("admin@jewels.test", ADMIN, "Ada Admin")


@pytest.fixture
def manager_user(db_session):
    return make_user("manager@jewels.test", MANAGER, "Mona Manager")


@pytest.fixture
def vendor_user(db_session):
    return make_user("vendor@jewels.test", VENDOR, "Vera Vendor")


@pytest.fixture
def other_vendor_user(db_session):
    return make_user("rival@jewels.test", VENDOR, "Rita Rival")


@pytest.fixture
def shopper_user(db_session):
    return make_user("shopper@jewels.test", USER, "Sam Shopper")


# =============================================================================
# CATALOG
# =============================================================================


def make_vendor(owner, business_name):
    vendor = VendorProfile(
        user_id=owner.id,
        business_name=business_name,
        slug=business_name.lower().replace(" ", "-"),
        is_active=True,
        is_deleted=False,
    )
    db.session.add(vendor)
    db.session.commit()
    return vendor


@pytest.fixture
def vendor_profile(vendor_user):
    return make_vendor(vendor_user, "Vera Gems")


@pytest.fixture
def other_vendor_profile(other_vendor_user):
    return make_vendor(other_vendor_user, "Rival Rings")


@pytest.fixture
def store(vendor_profile):
    store = Store(vendor_id=vendor_profile.id, name="Main Street", is_active=True, is_deleted=False)
    db.session.add(store)
    db.session.commit()
    return store


@pytest.fixture
def category(db_session):
    category = Category(name="Rings", slug="rings", is_active=True, is_deleted=False)
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture
def product(vendor_profile):
    product = Product(
        vendor_id=vendor_profile.id,
        name="Silver Band",
        sku="SB-001",
        price_cents=4500,
        is_active=True,
        is_deleted=False,
    )
    db.session.add(product)
    db.session.commit()
    return product


@pytest.fixture
def other_product(other_vendor_profile):
    product = Product(
        vendor_id=other_vendor_profile.id,
        name="Gold Hoop",
        sku="GH-001",
        price_cents=12000,
        is_active=True,
        is_deleted=False,
    )
    db.session.add(product)
    db.session.commit()
    return product


# =============================================================================
# AUTH HELPERS
# =============================================================================


def get_auth_token(client, email, password=PASSWORD):
    """Log in and return the bearer token."""
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["token"]


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def super_admin_headers(client, super_admin_user):
    return auth_headers(get_auth_token(client, super_admin_user.email))


@pytest.fixture
def admin_headers(client, admin_user):
    return auth_headers(get_auth_token(client, admin_user.email))


@pytest.fixture
def manager_headers(client, manager_user):
    return auth_headers(get_auth_token(client, manager_user.email))


@pytest.fixture
def vendor_headers(client, vendor_user):
    return auth_headers(get_auth_token(client, vendor_user.email))


@pytest.fixture
def shopper_headers(client, shopper_user):
    return auth_headers(get_auth_token(client, shopper_user.email))
