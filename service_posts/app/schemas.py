"""
Response models for the posts gateway endpoints.
"""

from typing import Annotated

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel

from service_posts.app.posts.models import Comment, PostWithCommentCount


def _bare_email(value: str) -> str:
    """Accept only a plain address; display-name forms such as `Name <a@b.c>` are rejected."""
    if "<" in value or ">" in value:
        raise ValueError("value is not a bare email address")
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(str(exc)) from exc
    return value


BareEmail = Annotated[str, AfterValidator(_bare_email)]


class PostCommentCountResponse(BaseModel):
    """A post with its comment total, in the public response shape."""

    post_id: int
    post_title: str
    post_body: str
    total_number_of_comments: int

    @classmethod
    def from_post(cls, post: PostWithCommentCount) -> "PostCommentCountResponse":
        return cls(
            post_id=post.id,
            post_title=post.title,
            post_body=post.body,
            total_number_of_comments=post.total_comment,
        )


class CommentResponse(BaseModel):
    """A comment in the upstream shape."""

    id: int
    postId: int
    name: str
    email: str
    body: str

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(**comment.to_dict())
