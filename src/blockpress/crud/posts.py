"""Post persistence: validated upsert by post id, tier changes, reader listings"""

from datetime import datetime
from typing import Any, Optional, Union
from uuid import UUID

from sqlmodel import Session, select

from blockpress.core.errors import Forbidden, NotFound
from blockpress.core.models import AccessTier, Document
from blockpress.core.tiers import parse_tier
from blockpress.core.utils.hashing import content_hash
from blockpress.core.validation import coerce_document, validate_document, validate_title
from blockpress.crud.models import Post


def get_post(session: Session, post_id: UUID) -> Post | None:
    """Return the Post with the given id, or None if not found."""
    return session.get(Post, post_id)


def list_posts(session: Session, plan: AccessTier = AccessTier.free) -> list[Post]:
    """Return posts newest first; free readers only see free posts."""
    query = select(Post)
    if AccessTier(plan) == AccessTier.free:
        query = query.where(Post.tier == AccessTier.free)
    return list(session.exec(query.order_by(Post.created_at.desc())).all())


def list_by_author(session: Session, author_id: str) -> list[Post]:
    return list(session.exec(
        select(Post).where(Post.author_id == author_id).order_by(Post.created_at.desc())
    ).all())


def load_document(post: Post) -> Document:
    """Rebuild the stored Document exactly as it was saved."""
    return Document.model_validate(post.content or {})


def _owned(session: Session, post_id: UUID, author_id: str) -> Post:
    post = session.get(Post, post_id)
    if post is None:
        raise NotFound(f"Post {post_id} not found")
    if post.author_id != author_id:
        raise Forbidden(f"Post {post_id} belongs to another author")
    return post


def save_post(
    session: Session,
    author_id: str,
    title: str,
    tier: Union[AccessTier, str],
    document: Union[Document, dict[str, Any]],
    post_id: Optional[UUID] = None,
    ) -> tuple[Post, str]:
    """Validate and upsert a post, storing the document wholesale.

    Returns (post, status) where status is 'created', 'updated', or 'unchanged'.
    post_id None (or unknown) inserts; the generated id is reused on later saves.
    Flushes but does not commit; caller controls the transaction.
    """
    title = validate_title(title)
    tier = parse_tier(tier)
    doc = coerce_document(document)
    validate_document(doc)
    content = doc.dump()
    digest = content_hash(content)

    post = session.get(Post, post_id) if post_id is not None else None
    if post is not None:
        if post.author_id != author_id:
            raise Forbidden(f"Post {post_id} belongs to another author")
        if post.content_hash == digest and post.title == title and post.tier == tier:
            return post, 'unchanged'
        post.title = title
        post.tier = tier
        post.content = content
        post.content_hash = digest
        post.updated_at = datetime.now()
        session.add(post)
        session.flush()
        return post, 'updated'

    post = Post(title=title, author_id=author_id, tier=tier, content=content, content_hash=digest)
    if post_id is not None:
        post.id = post_id
    session.add(post)
    session.flush()
    return post, 'created'


def change_tier(session: Session, post_id: UUID, author_id: str, tier: Union[AccessTier, str]) -> Post:
    """Explicit author action. Only the tier moves; embedded media references stay as saved."""
    post = _owned(session, post_id, author_id)
    post.tier = parse_tier(tier)
    post.updated_at = datetime.now()
    session.add(post)
    session.flush()
    return post
