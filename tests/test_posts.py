"""
tests/test_posts.py
"""
from __future__ import annotations

from datetime import date

import pytest

import posts
from errors import NotFound, ValidationError
from store import POSTS


def _form(**overrides):
    form = {
        "title": "Hello",
        "content": "Some content",
        "image": "",
        "author": "Alice",
    }
    form.update(overrides)
    return form


def test_create_assigns_fields(store):
    post = posts.create_post(store, _form(content="x" * 150))
    assert post["id"] == 1
    assert post["excerpt"] == "x" * 100 + "..."
    assert post["image"] == "/static/images/user.png"
    assert post["date"] == posts.format_date()
    assert store.load(POSTS) == [post]


def test_short_content_still_gets_ellipsis(store):
    post = posts.create_post(store, _form(content="short"))
    assert post["excerpt"] == "short..."


def test_format_date_is_us_locale():
    assert posts.format_date(date(2024, 3, 7)) == "3/7/2024"


@pytest.mark.parametrize("missing", ["title", "content", "author"])
def test_create_requires_fields(store, missing):
    with pytest.raises(ValidationError):
        posts.create_post(store, _form(**{missing: ""}))
    assert store.load(POSTS) == []


def test_create_image_is_optional(store):
    post = posts.create_post(store, _form(image="/static/images/cat.png"))
    assert post["image"] == "/static/images/cat.png"


def test_get_post(store):
    posts.create_post(store, _form(title="one"))
    posts.create_post(store, _form(title="two"))
    assert posts.get_post(store, 2)["title"] == "two"
    with pytest.raises(NotFound):
        posts.get_post(store, 3)


def test_list_home_splits_trending_and_recent(store):
    for n in range(10):
        posts.create_post(store, _form(title=f"post {n + 1}"))
    trending, recent = posts.list_home(store)
    assert [p["id"] for p in trending] == [1, 2, 3, 4, 5, 6, 7]
    assert [p["id"] for p in recent] == [10, 9, 8]


def test_list_home_with_few_posts(store):
    posts.create_post(store, _form())
    trending, recent = posts.list_home(store)
    assert len(trending) == 1
    assert recent == []


def test_update_replaces_record(store):
    posts.create_post(store, _form(image="/static/images/cat.png"))
    updated = posts.update_post(
        store, 1, {"title": "New", "content": "Fresh words", "author": "Bob"}
    )
    assert updated["id"] == 1
    assert updated["title"] == "New"
    assert updated["excerpt"] == "Fresh words..."
    # image omitted from the form falls back to the placeholder
    assert updated["image"] == "/static/images/user.png"
    assert store.load(POSTS) == [updated]


def test_update_validates_before_lookup(store):
    with pytest.raises(ValidationError):
        posts.update_post(store, 42, _form(title=""))


def test_update_missing_post(store):
    posts.create_post(store, _form())
    with pytest.raises(NotFound):
        posts.update_post(store, 42, _form())


def test_delete_removes_post(store):
    posts.create_post(store, _form(title="one"))
    posts.create_post(store, _form(title="two"))
    removed = posts.delete_post(store, 1)
    assert removed["title"] == "one"
    assert [p["title"] for p in store.load(POSTS)] == ["two"]


def test_delete_missing_post_keeps_collection(store):
    posts.create_post(store, _form())
    with pytest.raises(NotFound):
        posts.delete_post(store, 42)
    assert len(store.load(POSTS)) == 1


def test_count_based_ids_can_collide_after_delete(store):
    posts.create_post(store, _form(title="one"))
    posts.create_post(store, _form(title="two"))
    posts.delete_post(store, 1)
    third = posts.create_post(store, _form(title="three"))

    assert third["id"] == 2
    assert [p["id"] for p in store.load(POSTS)] == [2, 2]
    # lookups find the first match in storage order
    assert posts.get_post(store, 2)["title"] == "two"


def test_render_content_markdown():
    html = posts.render_content("# Title\n\n*hi*")
    assert "<h1>Title</h1>" in html
    assert "<em>hi</em>" in html
