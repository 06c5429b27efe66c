from opendraft.models.content import Content
from opendraft.models.taxonomy import Category, Tag


class DashboardService:
    """后台首页统计"""

    @staticmethod
    def get_stats():
        return {
            'totalPosts': Content.query.count(),
            'published': Content.query.filter_by(status='published').count(),
            'drafts': Content.query.filter_by(status='draft').count(),
            'scheduled': Content.query.filter_by(status='scheduled').count(),
            'categories': Category.query.count(),
            'tags': Tag.query.count(),
        }

    @staticmethod
    def get_recent_content(limit=5):
        rows = Content.query.order_by(Content.updated_at.desc(), Content.id.desc()).limit(limit).all()
        return [{
            'id': c.id,
            'title': c.title,
            'status': c.status,
            'type': c.type,
            'updated_at': c.updated_at.isoformat() if c.updated_at else None,
            'author': {'display_name': c.author.display_name} if c.author else None,
        } for c in rows]
