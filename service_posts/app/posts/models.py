"""
Records served by the posts gateway.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Post:
    """A post as published by the upstream API."""

    id: int
    user_id: int
    title: str
    body: str

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Post":
        """Build a post from an upstream JSON object.

        Raises KeyError, TypeError or ValueError on malformed payloads.
        """
        return cls(
            id=_strict_int(payload["id"]),
            user_id=_strict_int(payload["userId"]),
            title=_strict_str(payload["title"]),
            body=_strict_str(payload["body"]),
        )


@dataclass(frozen=True)
class Comment:
    """A comment attached to a post."""

    id: int
    post_id: int
    name: str
    email: str
    body: str

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the upstream field names."""
        return {
            "id": self.id,
            "postId": self.post_id,
            "name": self.name,
            "email": self.email,
            "body": self.body,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Comment":
        """Build a comment from an upstream JSON object.

        Raises KeyError, TypeError or ValueError on malformed payloads.
        """
        return cls(
            id=_strict_int(payload["id"]),
            post_id=_strict_int(payload["postId"]),
            name=_strict_str(payload["name"]),
            email=_strict_str(payload["email"]),
            body=_strict_str(payload["body"]),
        )


@dataclass(frozen=True)
class PostWithCommentCount(Post):
    """A post annotated with the number of comments it received."""

    total_comment: int = 0

    @classmethod
    def from_post(cls, post: Post, total_comment: int) -> "PostWithCommentCount":
        values = {field.name: getattr(post, field.name) for field in fields(Post)}
        return cls(total_comment=total_comment, **values)


@dataclass(frozen=True)
class CommentCriteria:
    """Optional filters applied to the comment collection."""

    post_id: Optional[int] = None
    id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None
    body: Optional[str] = None

    def is_empty(self) -> bool:
        """True when no filter was supplied (empty strings count as absent)."""
        return all(value is None or value == "" for value in (self.post_id, self.id, self.name, self.email, self.body))


def _strict_int(value: Any) -> int:
    # bool is an int subclass but never a valid identifier
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected integer, got {type(value).__name__}")
    return value


def _strict_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected string, got {type(value).__name__}")
    return value
