"""Unit tests for crud/posts.py"""

import copy
from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from blockpress.core.errors import Forbidden, InvalidDocument, NotFound
from blockpress.core.models import AccessTier, Document
from blockpress.crud.posts import (
    change_tier, get_post, list_by_author, list_posts, load_document, save_post,
)


def test_save_post_created(session, content):
    """First save inserts the post and reports 'created'."""
    post, status = save_post(session, "alice", "Hello", "paid", content)
    assert status == 'created'
    assert get_post(session, post.id) is post
    assert post.tier == AccessTier.paid
    assert len(post.content_hash) == 64


def test_save_post_unchanged(session, content):
    """Saving identical title, tier and content is a no-op."""
    post, _ = save_post(session, "alice", "Hello", "free", content)
    again, status = save_post(session, "alice", "Hello", "free", copy.deepcopy(content), post_id=post.id)
    assert status == 'unchanged'
    assert again.id == post.id


def test_save_post_updated(session, content):
    """Changed content updates the row in place and bumps updated_at."""
    post, _ = save_post(session, "alice", "Hello", "free", content)
    before = post.updated_at
    edited = copy.deepcopy(content)
    edited["blocks"][1]["data"]["text"] = "Edited"
    again, status = save_post(session, "alice", "Hello", "free", edited, post_id=post.id)
    assert status == 'updated'
    assert again.content["blocks"][1]["data"]["text"] == "Edited"
    assert again.updated_at >= before
    assert len(list_by_author(session, "alice")) == 1


def test_save_post_unknown_id_inserts_with_that_id(session, content):
    post_id = uuid4()
    post, status = save_post(session, "alice", "Hello", "free", content, post_id=post_id)
    assert status == 'created'
    assert post.id == post_id


def test_save_post_other_author_forbidden(session, content):
    """Only the author may overwrite a post."""
    post, _ = save_post(session, "alice", "Hello", "free", content)
    with pytest.raises(Forbidden):
        save_post(session, "bob", "Hijack", "free", content, post_id=post.id)


@pytest.mark.parametrize("title,tier,document,match", [
    ("", "free", None, "title"),
    ("Hello", "premium", None, "Invalid tier"),
    ("Hello", "free", {"blocks": []}, "Content empty"),
    ("Hello", "free", {"blocks": [{"type": "table", "data": {}}]}, "Block 0"),
])
def test_save_post_validation(session, content, title, tier, document, match):
    """Invalid input is rejected before anything is written."""
    with pytest.raises(InvalidDocument, match=match):
        save_post(session, "alice", title, tier, document if document is not None else content)
    assert list_by_author(session, "alice") == []


def test_load_document_round_trip(session, content):
    """The stored document comes back exactly as the editor sent it."""
    post, _ = save_post(session, "alice", "Hello", "free", content)
    session.expire_all()
    doc = load_document(get_post(session, post.id))
    assert isinstance(doc, Document)
    assert doc.dump() == content


def test_list_posts_filters_by_plan(session, content):
    """Free readers see free posts only; paid readers see everything, newest first."""
    old, _ = save_post(session, "alice", "Old free", "free", content)
    new, _ = save_post(session, "alice", "New paid", "paid", content)
    old.created_at = datetime.now() - timedelta(days=1)
    session.add(old)
    session.flush()

    assert [p.title for p in list_posts(session, AccessTier.free)] == ["Old free"]
    assert [p.title for p in list_posts(session, AccessTier.paid)] == ["New paid", "Old free"]


def test_list_by_author(session, content):
    save_post(session, "alice", "Mine", "free", content)
    save_post(session, "bob", "Theirs", "free", content)
    assert [p.title for p in list_by_author(session, "bob")] == ["Theirs"]


def test_change_tier_keeps_content(session, content):
    """Changing tier never rewrites embedded media references."""
    post, _ = save_post(session, "alice", "Hello", "paid", content)
    saved = copy.deepcopy(post.content)
    updated = change_tier(session, post.id, "alice", "free")
    assert updated.tier == AccessTier.free
    assert updated.content == saved
    assert updated.content["blocks"][2]["data"]["file"]["url"].startswith("/api/storage/proxy?")


def test_change_tier_errors(session, content):
    post, _ = save_post(session, "alice", "Hello", "free", content)
    with pytest.raises(Forbidden):
        change_tier(session, post.id, "bob", "paid")
    with pytest.raises(NotFound):
        change_tier(session, uuid4(), "alice", "paid")
    with pytest.raises(InvalidDocument):
        change_tier(session, post.id, "alice", "gold")
