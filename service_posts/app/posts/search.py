"""
Criteria-driven comment search.
"""

from typing import Iterable, List

from shared.errors import CommentsNotFoundError
from shared.logging import get_logger
from service_posts.app.posts.collections import PostCollections
from service_posts.app.posts.models import Comment, CommentCriteria


def filter_comments(comments: Iterable[Comment], criteria: CommentCriteria) -> List[Comment]:
    """Return the comments matching every supplied criterion.

    ``post_id`` and ``id`` match exactly, ``name`` and ``body`` are
    case-sensitive substrings. The ``email`` criterion is lower-cased and
    compared to the stored address as-is.
    """
    email = criteria.email.lower() if criteria.email else None

    def matches(comment: Comment) -> bool:
        if criteria.post_id is not None and comment.post_id != criteria.post_id:
            return False
        if criteria.id is not None and comment.id != criteria.id:
            return False
        if criteria.name and criteria.name not in comment.name:
            return False
        if email and comment.email != email:
            return False
        if criteria.body and criteria.body not in comment.body:
            return False
        return True

    return [comment for comment in comments if matches(comment)]


class CommentSearchService:
    """Filters the cached comment collection."""

    def __init__(self, collections: PostCollections):
        self.collections = collections
        self.logger = get_logger("posts.search")

    async def search_comments(self, criteria: CommentCriteria) -> List[Comment]:
        """Search comments.

        An empty query returns ``[]`` without touching the cache so the
        whole dataset is never dumped. An empty dataset raises
        ``CommentsNotFoundError``; zero matches is a normal empty result.
        """
        if criteria.is_empty():
            return []

        comments = await self.collections.comments()
        if not comments:
            raise CommentsNotFoundError()

        matched = filter_comments(comments, criteria)
        self.logger.debug("Comment search completed", criteria=criteria, matched=len(matched))
        return matched
