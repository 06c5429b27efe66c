"""分类服务：分类 CRUD 与删除前置检查"""
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from opendraft.extensions import db
from opendraft.models.taxonomy import Category
from opendraft.models.content import Content
from opendraft.exceptions import (
    ValidationError, StorageError, HasContentReferences, HasChildCategories,
    translate_integrity_error,
)
from opendraft.utils.slug import generate_slug

DUPLICATE_CATEGORY_SLUG = "A category with this slug already exists"


def _to_parent_id(value):
    if value in (None, '', 'none', 0, '0'):
        return None
    return int(value)


class CategoryService:

    @staticmethod
    def find_all_categories():
        """内容表单的分类选择器"""
        return [
            {'id': c.id, 'name': c.name, 'slug': c.slug, 'parent_id': c.parent_id}
            for c in Category.query.order_by(Category.name).all()
        ]

    @staticmethod
    def get_categories_with_counts():
        """分类管理列表：内容数 + 上级分类 (统一为 {id, name} 或 None)"""
        counts = dict(
            db.session.query(Content.category_id, func.count(Content.id))
            .filter(Content.category_id.isnot(None))
            .group_by(Content.category_id)
            .all()
        )
        result = []
        for c in Category.query.order_by(Category.name).all():
            item = c.to_dict()
            item['parent'] = {'id': c.parent.id, 'name': c.parent.name} if c.parent else None
            item['_count'] = {'contents': counts.get(c.id, 0)}
            result.append(item)
        return result

    @staticmethod
    def create_category(name, slug=None, description=None, parent_id=None) -> Category:
        if not name or not name.strip():
            raise ValidationError("Name is required")
        category = Category(
            name=name.strip(),
            slug=generate_slug(name, slug),
            description=(description or '').strip() or None,
            parent_id=_to_parent_id(parent_id),
        )
        try:
            db.session.add(category)
            db.session.commit()
            return category
        except IntegrityError as e:
            db.session.rollback()
            raise translate_integrity_error(e, DUPLICATE_CATEGORY_SLUG) from e

    @staticmethod
    def update_category(category_id, name, slug=None, description=None, parent_id=None) -> None:
        """只禁止自己做自己的父级，不检查更深的环"""
        if not name or not name.strip():
            raise ValidationError("Name is required")
        parent_id = _to_parent_id(parent_id)
        if parent_id is not None and parent_id == category_id:
            raise ValidationError("Category cannot be its own parent")
        try:
            Category.query.filter_by(id=category_id).update({
                'name': name.strip(),
                'slug': generate_slug(name, slug),
                'description': (description or '').strip() or None,
                'parent_id': parent_id,
            }, synchronize_session=False)
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise translate_integrity_error(e, DUPLICATE_CATEGORY_SLUG) from e

    @staticmethod
    def delete_category(category_id) -> None:
        """
        删除分类
        :raises HasContentReferences: 仍有内容引用该分类 (优先检查)
        :raises HasChildCategories: 仍有子分类
        """
        content_count = Content.query.filter_by(category_id=category_id).count()
        if content_count > 0:
            raise HasContentReferences(content_count)

        child_count = Category.query.filter_by(parent_id=category_id).count()
        if child_count > 0:
            raise HasChildCategories(child_count)

        try:
            Category.query.filter_by(id=category_id).delete(synchronize_session=False)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StorageError(str(e)) from e
