from __future__ import annotations
from typing import List
import os
import re
from pathlib import Path
from jinja2 import Environment, FileSystemLoader, select_autoescape

from arte.blog import BlogPost, BlogPostMeta

TEMPLATES_DIR = os.getenv("TEMPLATES_DIR") or str(Path(__file__).resolve().parent.parent / "templates")

_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html", "xml"]),
    enable_async=False,
)

_BLANK_LINES = re.compile(r"\n\s*\n")


def paragraphs(body: str) -> List[str]:
    """Split markdown body into paragraphs; the template escapes each one."""
    return [p.strip() for p in _BLANK_LINES.split(body or "") if p.strip()]


def render_blog_index(posts: List[BlogPostMeta]) -> str:
    return _env.get_template("blog_index.html").render(posts=posts)


def render_blog_post(post: BlogPost) -> str:
    return _env.get_template("blog_post.html").render(post=post, paragraphs=paragraphs(post.content))
