"""
Comment-count aggregation over the cached collections.
"""

from collections import Counter
from typing import Iterable, List

from shared.logging import get_logger
from service_posts.app.posts.collections import PostCollections
from service_posts.app.posts.models import Comment, Post, PostWithCommentCount


def order_by_comment_count(posts: Iterable[Post], comments: Iterable[Comment]) -> List[PostWithCommentCount]:
    """Attach comment totals to each post and order by total, highest first.

    The sort is stable: posts with equal totals keep their upstream order.
    """
    per_post = Counter(comment.post_id for comment in comments)
    counted = [PostWithCommentCount.from_post(post, per_post.get(post.id, 0)) for post in posts]
    return sorted(counted, key=lambda post: post.total_comment, reverse=True)


class PostAggregationService:
    """Serves posts ranked by how many comments they received."""

    def __init__(self, collections: PostCollections):
        self.collections = collections
        self.logger = get_logger("posts.aggregation")

    async def get_all_posts_ordered_by_comment_count(self) -> List[PostWithCommentCount]:
        comments = await self.collections.comments()
        posts = await self.collections.posts()
        ranked = order_by_comment_count(posts, comments)
        self.logger.debug("Ranked posts by comment count", posts=len(ranked), comments=len(comments))
        return ranked
