from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Mapping, Optional, Tuple

import bleach
from markdown import markdown
from markupsafe import Markup

import config
from errors import NotFound, ValidationError
from store import POSTS, RecordStore

log = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "content", "author")


def format_date(day: Optional[date] = None) -> str:
    """Render a date the way a US-locale browser would: M/D/YYYY."""
    day = day or date.today()
    return f"{day.month}/{day.day}/{day.year}"


def build_excerpt(content: str, length: int = config.EXCERPT_LENGTH) -> str:
    return f"{content[:length]}..."


CONTENT_TAGS = bleach.sanitizer.ALLOWED_TAGS | {
    "p", "br", "hr", "h1", "h2", "h3", "h4", "h5", "h6", "pre", "img",
    "table", "thead", "tbody", "tr", "th", "td",
}
CONTENT_ATTRIBUTES = {
    **bleach.sanitizer.ALLOWED_ATTRIBUTES,
    "img": ["src", "alt", "title"],
    "code": ["class"],
    "th": ["align"],
    "td": ["align"],
}

# Disallowed tags are escaped, not stripped, so a pasted <script> shows as text
content_cleaner = bleach.Cleaner(
    tags=CONTENT_TAGS,
    attributes=CONTENT_ATTRIBUTES,
    strip_comments=True,
)


def render_content(content: str) -> Markup:
    html = markdown(
        content or "",
        extensions=["fenced_code", "tables", "sane_lists"],
        output_format="html5",
    )
    return Markup(content_cleaner.clean(html))


def _clean(form: Mapping) -> Dict:
    values = {
        field: (form.get(field) or "").strip()
        for field in ("title", "content", "image", "author")
    }
    if not all(values[field] for field in REQUIRED_FIELDS):
        raise ValidationError()
    return values


def _build_post(post_id: int, values: Dict) -> Dict:
    return {
        "id": post_id,
        "title": values["title"],
        "content": values["content"],
        "image": values["image"] or config.DEFAULT_POST_IMAGE,
        "author": values["author"],
        "excerpt": build_excerpt(values["content"]),
        "date": format_date(),
    }


def next_id(posts: List[Dict]) -> int:
    # Count-based: after a delete this can hand out an id that is still in use
    return len(posts) + 1


def create_post(store: RecordStore, form: Mapping) -> Dict:
    values = _clean(form)
    posts = store.load(POSTS)
    post = _build_post(next_id(posts), values)
    posts.append(post)
    store.save(POSTS, posts)
    log.info("Created post %s: %s", post["id"], post["title"])
    return post


def get_post(store: RecordStore, post_id: int) -> Dict:
    for post in store.load(POSTS):
        if post.get("id") == post_id:
            return post
    raise NotFound()


def list_home(store: RecordStore) -> Tuple[List[Dict], List[Dict]]:
    """Split posts into trending (storage order) and recent (newest first)."""
    posts = store.load(POSTS)
    trending = posts[: config.TRENDING_COUNT]
    recent = list(reversed(posts[config.TRENDING_COUNT :]))
    return trending, recent


def update_post(store: RecordStore, post_id: int, form: Mapping) -> Dict:
    values = _clean(form)
    posts = store.load(POSTS)
    for idx, post in enumerate(posts):
        if post.get("id") == post_id:
            posts[idx] = _build_post(post_id, values)
            store.save(POSTS, posts)
            log.info("Updated post %s", post_id)
            return posts[idx]
    raise NotFound()


def delete_post(store: RecordStore, post_id: int) -> Dict:
    posts = store.load(POSTS)
    remaining = [p for p in posts if p.get("id") != post_id]
    if len(remaining) == len(posts):
        raise NotFound()
    store.save(POSTS, remaining)
    log.info("Deleted post %s", post_id)
    return next(p for p in posts if p.get("id") == post_id)
