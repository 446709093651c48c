"""
Posts domain: records, cached collections, aggregation and search.
"""

from .models import Comment, CommentCriteria, Post, PostWithCommentCount
from .collections import ALL_COMMENTS_KEY, ALL_POSTS_KEY, PostCollections
from .aggregation import PostAggregationService, order_by_comment_count
from .search import CommentSearchService, filter_comments

__all__ = [
    "Comment",
    "CommentCriteria",
    "Post",
    "PostWithCommentCount",
    "ALL_COMMENTS_KEY",
    "ALL_POSTS_KEY",
    "PostCollections",
    "PostAggregationService",
    "order_by_comment_count",
    "CommentSearchService",
    "filter_comments",
]
