"""Pipeline step functions: round-trip checking, rendering, and export orchestration"""

from dataclasses import dataclass, field
from pathlib import Path

from mdblocks.core.export import write_page
from mdblocks.core.models import Block, ComponentCatalog
from mdblocks.core.parse import discover_files, load_page
from mdblocks.core.reassemble import reassemble
from mdblocks.core.render import BlockRenderer
from mdblocks.core.segment import segment
from mdblocks.core.utils.diff import diff_summary, unified_diff


@dataclass
class RoundTrip:
    """Result of segment -> reassemble -> segment on one text."""
    blocks:      list[Block]
    output:      str
    stable:      bool
    first_mismatch: int | None = None         # index of the first differing block
    summary:     dict[str, int] = field(default_factory=dict)
    diff:        list[str] = field(default_factory=list)


def check_roundtrip(text: str, catalog: ComponentCatalog | None = None) -> RoundTrip:
    """Verify that re-segmenting the reassembled text reproduces the same blocks."""
    blocks = segment(text, catalog)
    output = reassemble(blocks)
    again = segment(output, catalog)

    mismatch = None
    for i, (a, b) in enumerate(zip(blocks, again)):
        if not a.same_content(b):
            mismatch = i
            break
    if mismatch is None and len(blocks) != len(again):
        mismatch = min(len(blocks), len(again))

    return RoundTrip(
        blocks=blocks,
        output=output,
        stable=mismatch is None,
        first_mismatch=mismatch,
        summary=diff_summary(text.strip(), output),
        diff=unified_diff(text.strip(), output, "source", "reassembled"),
    )


def render_page(text: str, renderer: BlockRenderer, catalog: ComponentCatalog | None = None) -> str:
    """Segment text and join every block's HTML; failing blocks become placeholders."""
    blocks = renderer.render_all(segment(text, catalog))
    return "\n".join(
        f'<section class="block block-{b.kind.value}" data-block-id="{b.id}">\n{b.rendered.strip()}\n</section>'
        for b in blocks
    )


def run_export(
    path: str,
    output_dir: Path,
    fmt: str = 'mdx',
    catalog: ComponentCatalog | None = None,
    ) -> list[tuple[Path, Path]]:
    """Segment each .md/.mdx file under path and write page + sidecar. Returns (source, page_path) pairs."""
    results = []
    for p in discover_files(Path(path)):
        try:
            page = load_page(p)
            blocks = segment(page.body, catalog)
            page_path, _ = write_page(page.slug, page.frontmatter, blocks, output_dir, fmt)
            results.append((p, page_path))
        except Exception as e:
            raise RuntimeError(f"Failed to export {p}: {e}") from e
    return results
