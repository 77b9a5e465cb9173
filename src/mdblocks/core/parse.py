"""Content source: page discovery, frontmatter splitting, and page loading"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from mdblocks.core.utils.slug import slugify


FRONTMATTER_FENCE = '---'
PAGE_SUFFIXES = ('.md', '.mdx')


@dataclass
class LoadedPage:
    """Raw page text split from its frontmatter; blocks are segmented from body."""
    path:        Path
    slug:        str
    frontmatter: dict[str, Any]
    body:        str


def _closing_fence(lines: list[str]) -> int | None:
    """Index of the line closing a frontmatter header opened on line 0."""
    if not lines or lines[0].strip() != FRONTMATTER_FENCE:
        return None
    for i in range(1, len(lines)):
        if lines[i].strip() == FRONTMATTER_FENCE:
            return i
    return None


def strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split a leading '---' YAML header off the page body.

    A header that is never closed stays in the body, where the segmenter
    reads the opening '---' as a thematic break.
    """
    lines = text.splitlines(keepends=True)
    end = _closing_fence(lines)
    if end is None:
        return {}, text

    try:
        header = yaml.safe_load(''.join(lines[1:end]))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML frontmatter: {e}") from e
    if header is None:
        header = {}
    if not isinstance(header, dict):
        raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(header).__name__}")
    return header, ''.join(lines[end + 1:])


def _is_page(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in PAGE_SUFFIXES


def discover_files(path: Path) -> list[Path]:
    """Pages under path ordered by relative path; hidden directories are skipped.

    A single file is returned on its own when it is a page.
    """
    if not path.is_dir():
        return [path] if _is_page(path) else []

    pages = []
    for candidate in path.rglob('*'):
        parents = candidate.relative_to(path).parts[:-1]
        if any(part.startswith('.') for part in parents):
            continue
        if _is_page(candidate):
            pages.append(candidate)
    return sorted(pages, key=lambda p: p.relative_to(path).as_posix())


def load_page(path: Path) -> LoadedPage:
    """Read a page from disk; slug comes from frontmatter or the file stem."""
    frontmatter, body = strip_frontmatter(path.read_text(encoding='utf-8'))
    return LoadedPage(
        path=path,
        slug=frontmatter.get('slug') or slugify(path.stem),
        frontmatter=frontmatter,
        body=body,
    )
