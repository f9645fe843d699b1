# Overview: Service-layer operations for the product category tree.

from __future__ import annotations

from ..extensions import db
from ..models import Category, Product
from ..validation import ConflictError, ValidationError, slugify
from . import repository
from .soft_delete_service import Actor


class CategoryNotFoundError(Exception):
    """Raised when a category is not found."""
    pass


def get_category(category_id: int, include_deleted: bool = False) -> Category:
    category = db.session.get(Category, category_id)
    if category is None or (category.is_deleted and not include_deleted):
        raise CategoryNotFoundError("Category not found")
    return category


def list_categories(*, include_deleted: bool = False, parent_id: int | None = None) -> dict:
    query = repository.live_query(Category, include_deleted)
    if parent_id is not None:
        query = query.filter(Category.parent_id == parent_id)
    return repository.paginate(query.order_by(Category.name.asc(), Category.id.asc()))


def _prepare(patch: dict, category_id: int | None = None) -> dict:
    data = dict(patch)
    # Slug derives from the name on create only; renames keep the slug.
    source = data.get("slug") or (data.get("name") if category_id is None else None)
    if source:
        data["slug"] = slugify(source)
        clash = db.session.query(Category.id).filter(Category.slug == data["slug"])
        if category_id is not None:
            clash = clash.filter(Category.id != category_id)
        if clash.first():
            raise ConflictError(f"Category slug '{data['slug']}' already exists")

    parent_id = data.get("parent_id")
    if parent_id is not None:
        if category_id is not None and parent_id == category_id:
            raise ValidationError("A category cannot be its own parent")
        try:
            get_category(parent_id)
        except CategoryNotFoundError:
            raise ValidationError("Parent category not found")
    return data


def create_category(*, patch: dict, actor: Actor | None) -> Category:
    data = _prepare(patch)
    data["is_deleted"] = False
    category = repository.create_record(Category, data, actor)
    db.session.commit()
    return category


def update_category(category_id: int, patch: dict, actor: Actor | None) -> Category:
    category = get_category(category_id)
    repository.update_record(category, _prepare(patch, category.id), actor)
    db.session.commit()
    return category


def soft_delete_category(category_id: int, actor: Actor | None) -> Category:
    category = get_category(category_id)
    repository.soft_delete_record(category, actor)
    db.session.commit()
    return category


def restore_category(category_id: int, actor: Actor | None) -> Category:
    category = db.session.get(Category, category_id)
    if category is None or not category.is_deleted:
        raise CategoryNotFoundError("Deleted category not found")
    repository.restore_record(category, actor)
    db.session.commit()
    return category


def hard_delete_category(category_id: int) -> None:
    """Children are re-parented to the root and products lose the category."""
    category = db.session.get(Category, category_id)
    if category is None:
        raise CategoryNotFoundError("Category not found")
    db.session.query(Category).filter(Category.parent_id == category.id).update(
        {"parent_id": None}, synchronize_session="fetch"
    )
    db.session.query(Product).filter(Product.category_id == category.id).update(
        {"category_id": None}, synchronize_session="fetch"
    )
    repository.hard_delete_record(category)
    db.session.commit()
