"""Blog post record."""

from __future__ import annotations

import re

from pydantic import Field, model_validator

from .base import RecordModel

EXCERPT_LENGTH = 150


def slugify(title: str) -> str:
    """Lowercase, hyphen-separated slug suitable for /blogs/slug/<slug>."""
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or "post"


class Blog(RecordModel):
    title: str = "Untitled Post"
    content: str = ""
    excerpt: str | None = None
    category: str = "Tips & Advice"
    tags: list[str] = Field(default_factory=list)
    status: str = "published"
    slug: str | None = None
    image: str | None = None
    author: dict | str | None = None
    published_at: str | None = None

    @model_validator(mode="after")
    def _fill_derived(self) -> Blog:
        if self.excerpt is None:
            self.excerpt = self.content[:EXCERPT_LENGTH]
        if self.slug is None:
            self.slug = slugify(self.title)
        if self.published_at is None and self.status == "published":
            self.published_at = self.created_at
        return self
