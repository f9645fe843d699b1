from .envelope import LifecycleMixin, soft_delete_check, soft_delete_check_name, SOFT_DELETE_CHECK_SQL
from .auth import User, SessionToken
from .security import SecurityEvent
from .vendors import VendorProfile, Store
from .catalog import Category, Product
from .audit import AuditLog

__all__ = [
    'LifecycleMixin', 'soft_delete_check', 'soft_delete_check_name', 'SOFT_DELETE_CHECK_SQL',
    'User', 'SessionToken', 'SecurityEvent',
    'VendorProfile', 'Store',
    'Category', 'Product',
    'AuditLog',
]
