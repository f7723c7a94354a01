from __future__ import annotations

import logging
import os
import re
from dataclasses import asdict, dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

log = logging.getLogger(__name__)

BLOG_DIR = Path(os.getenv("BLOG_DIR", "content/blog"))

_SLUG_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_FRONT_MATTER_RE = re.compile(r"\A---\s*\n(.*?)\n---\s*(?:\n|\Z)", re.DOTALL)


@dataclass
class BlogPostMeta:
    slug: str
    title: str
    date: str
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class BlogPost(BlogPostMeta):
    content: str = ""


def split_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    """Return (front matter, body). Missing or broken front matter yields ``{}``."""
    m = _FRONT_MATTER_RE.match(text)
    if not m:
        return {}, text
    try:
        data = yaml.safe_load(m.group(1)) or {}
    except yaml.YAMLError as exc:
        log.warning("blog: invalid front matter: %s", exc)
        data = {}
    if not isinstance(data, dict):
        data = {}
    return data, text[m.end():]


def _date_str(value: Any) -> str:
    # YAML turns bare 2024-01-31 into a date object
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value) if value else "Unknown date"


def _sort_key(meta: BlogPostMeta) -> datetime:
    try:
        return datetime.fromisoformat(meta.date[:10])
    except ValueError:
        return datetime.min


def _read(path: Path) -> BlogPost:
    data, body = split_front_matter(path.read_text(encoding="utf-8"))
    slug = path.stem
    return BlogPost(
        slug=slug,
        title=str(data.get("title") or slug),
        date=_date_str(data.get("date")),
        description=data.get("description"),
        content=body,
    )


def get_all_slugs() -> List[str]:
    if not BLOG_DIR.is_dir():
        return []
    return sorted(p.stem for p in BLOG_DIR.glob("*.md") if _SLUG_RE.match(p.stem))


def get_all_posts() -> List[BlogPostMeta]:
    """Metadata for every post, newest first."""
    posts: List[BlogPostMeta] = []
    for slug in get_all_slugs():
        post = _read(BLOG_DIR / f"{slug}.md")
        posts.append(BlogPostMeta(slug=post.slug, title=post.title, date=post.date, description=post.description))
    posts.sort(key=_sort_key, reverse=True)
    return posts


def get_post(slug: str) -> Optional[BlogPost]:
    if not _SLUG_RE.match(slug or ""):
        return None
    path = BLOG_DIR / f"{slug}.md"
    if not path.is_file():
        return None
    return _read(path)
