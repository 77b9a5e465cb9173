"""Export: reassembled MDX with frontmatter plus a JSON sidecar of block records"""

import json
from pathlib import Path
from typing import Any

import yaml

from mdblocks.core.models import Block
from mdblocks.core.reassemble import reassemble


def build_mdx(frontmatter: dict[str, Any], body: str) -> str:
    """Return body with a YAML frontmatter block prepended when frontmatter is non-empty."""
    if not frontmatter:
        return body.strip() + "\n"
    header = yaml.dump(dict(frontmatter), default_flow_style=False, allow_unicode=True, sort_keys=False)
    return f"---\n{header}---\n\n{body.strip()}\n"


def build_sidecar(slug: str, blocks: list[Block]) -> dict:
    """Sidecar dict: slug plus ordered block records (render artifacts excluded)."""
    return {
        "slug": slug,
        "blocks": [
            b.model_dump(mode="json", exclude={"rendered"}, exclude_none=True)
            for b in blocks
        ],
    }


def read_sidecar(path: Path) -> tuple[str, list[Block]]:
    """Load (slug, blocks) from a sidecar JSON file written by write_page."""
    data = json.loads(path.read_text(encoding='utf-8'))
    return data.get("slug", path.stem), [Block.model_validate(b) for b in data.get("blocks", [])]


def write_page(
    slug: str,
    frontmatter: dict[str, Any],
    blocks: list[Block],
    output_dir: Path,
    fmt: str = 'mdx',
    ) -> tuple[Path, Path]:
    """Write <slug>.<fmt> and <slug>.json under output_dir. Returns (page_path, json_path)."""
    output_dir.mkdir(parents=True, exist_ok=True)
    page_path = output_dir / f"{slug}.{fmt}"
    json_path = output_dir / f"{slug}.json"

    page_path.write_text(build_mdx(frontmatter, reassemble(blocks)), encoding='utf-8')
    json_path.write_text(json.dumps(build_sidecar(slug, blocks), indent=2), encoding='utf-8')
    return page_path, json_path
