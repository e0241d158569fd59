"""Seed sample posts into the configured database.

Posts go through the normal store functions, so each row gets a real
rendered ``content_html``.

Usage:
    python -m scripts.seed_posts
"""

import asyncio
import logging

from blog_api.config import get_settings
from blog_api.db import dispose_engine, get_session_factory, init_db
from blog_api.models.post import PostInput
from blog_api.services.post_store import create_post

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

SEED_POSTS = [
    {
        "title": "Welcome to the blog",
        "content": (
            "Hello and welcome!\n\n"
            "Posts here are written in **Markdown** and rendered once, "
            "when they are saved.\n"
            "A single newline like this one becomes a line break."
        ),
    },
    {
        "title": "Markdown tips",
        "content": (
            "## Formatting\n\n"
            "| Syntax | Effect |\n"
            "| --- | --- |\n"
            "| `**text**` | **bold** |\n"
            "| `*text*` | *italic* |\n"
            "| `~~text~~` | ~~strikethrough~~ |\n"
            "| `[link text](url)` | [Example Link](https://example.com) |\n"
            "| `` `inline code` `` | `const x = 1;` |\n\n"
            "## Lists\n\n"
            "- List item 1\n"
            "- List item 2\n\n"
            "## Code blocks\n\n"
            "```js\n"
            'console.log("Hello");\n'
            "```\n\n"
            "Bare URLs such as https://example.com are linked automatically."
        ),
    },
    {
        "title": "Raw HTML is sanitized",
        "content": (
            "Embedded HTML is allowed, but only safe tags survive:\n\n"
            '<img src="https://example.com/cat.png" alt="a cat" onerror="alert(1)">\n\n'
            "<script>alert('this never runs')</script>"
        ),
    },
]


async def main() -> None:
    settings = get_settings()
    print(f"Seeding {len(SEED_POSTS)} posts to {settings.database_url}...")

    await init_db()
    async with get_session_factory()() as session:
        for post in SEED_POSTS:
            record = await create_post(session, PostInput(**post))
            print(f"  Created #{record.id}: {record.title[:60]}")
    await dispose_engine()
    print("Done!")


if __name__ == "__main__":
    asyncio.run(main())
