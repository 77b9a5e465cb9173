"""Per-block HTML rendering with isolated failures and stale-result guarding"""

import asyncio
import html
import json
import logging
import re
from typing import Any, Callable, Optional

from markdown_it import MarkdownIt

from mdblocks.core.models import Block, BlockKind, ComponentCatalog
from mdblocks.core.segment import tag_name


logger = logging.getLogger(__name__)

ComponentFn = Callable[[dict[str, Any], str], str]

ATTR_RE = re.compile(
    r'([A-Za-z_][\w:-]*)'
    r'(?:\s*=\s*(?:"([^"]*)"|\'([^\']*)\'|\{(.*?)\}(?=\s|/?$)))?',
    re.DOTALL,
)


class RenderError(Exception):
    """A single block could not be rendered."""

    def __init__(self, block_id: str, message: str):
        super().__init__(f"Block {block_id}: {message}")
        self.block_id = block_id
        self.message = message


def make_parser(preset: str = 'gfm-like') -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name with raw HTML passthrough."""
    return MarkdownIt(preset, options_update={"linkify": False, "html": True})


def split_open_tag(text: str) -> tuple[str, str, bool]:
    """Split '<Name attrs>rest' into (attrs, rest, self_closing).

    The tag ends at the first '>' outside quotes and braces.
    """
    quote = None
    depth = 0
    start = text.find('<')
    for i in range(start + 1, len(text)):
        ch = text[i]
        if quote:
            if ch == quote:
                quote = None
        elif ch in ('"', "'"):
            quote = ch
        elif ch == '{':
            depth += 1
        elif ch == '}':
            depth = max(depth - 1, 0)
        elif ch == '>' and depth == 0:
            head = text[start + 1:i]
            self_closing = head.rstrip().endswith('/')
            head = head.rstrip().rstrip('/')
            name = tag_name('<' + head) or ''
            return head[head.find(name) + len(name):].strip(), text[i + 1:], self_closing
    return '', '', False


def _prop_value(expr: str) -> Any:
    try:
        return json.loads(expr)
    except ValueError:
        return expr.strip()


def parse_props(attrs: str) -> dict[str, Any]:
    """Parse JSX-style attributes: name="v", name='v', name={expr} and bare flags."""
    props: dict[str, Any] = {}
    for m in ATTR_RE.finditer(attrs):
        name, dq, sq, expr = m.groups()
        if dq is not None:
            props[name] = dq
        elif sq is not None:
            props[name] = sq
        elif expr is not None:
            props[name] = _prop_value(expr)
        else:
            props[name] = True
    return props


def error_placeholder(block: Block, message: str) -> str:
    return (
        f'<div class="block-error" data-block-id="{html.escape(block.id)}">'
        f'Could not render block: {html.escape(message)}</div>'
    )


def _data_attr(name: str, value: Any) -> str:
    if value is True:
        return f' data-{name.lower()}'
    if not isinstance(value, str):
        value = json.dumps(value)
    return f' data-{name.lower()}="{html.escape(value)}"'


def catalog_component(name: str) -> ComponentFn:
    """Generic renderer for a known tag: a wrapper div with props as data attributes."""
    def render(props: dict[str, Any], children: str) -> str:
        attrs = ''.join(_data_attr(k, v) for k, v in props.items())
        return f'<div class="mdx-component" data-component="{html.escape(name)}"{attrs}>{children}</div>'
    return render


class BlockRenderer:
    """Compiles one block's raw_text into an HTML render artifact.

    Every name in the catalog is registered with a generic renderer; entries in
    components (or later register() calls) replace those defaults.
    """

    def __init__(
        self,
        components: Optional[dict[str, ComponentFn]] = None,
        preset: str = 'gfm-like',
        catalog: Optional[ComponentCatalog] = None,
        ):
        catalog = catalog or ComponentCatalog()
        self.components: dict[str, ComponentFn] = {
            name: catalog_component(name) for name in [*catalog.large, *catalog.self_closing]
        }
        self.components.update(components or {})
        self.md = make_parser(preset)

    def register(self, name: str, fn: ComponentFn) -> None:
        self.components[name] = fn

    def render_markdown(self, text: str) -> str:
        return self.md.render(text)

    def _render_text(self, block: Block, text: str) -> str:
        try:
            return self.render_markdown(text)
        except Exception as e:
            raise RenderError(block.id, str(e)) from e

    def _render_component(self, block: Block) -> str:
        name = block.component_name or ''
        fn = self.components.get(name)
        if fn is None:
            # lowercase names are plain HTML elements
            if name[:1].islower():
                return self._render_text(block, block.raw_text)
            raise RenderError(block.id, f"unknown component <{name}>")

        attrs, rest, self_closing = split_open_tag(block.raw_text)
        children = ''
        if not self_closing:
            closing = f'</{name}>'
            inner = rest.rsplit(closing, 1)[0] if closing in rest else rest
            children = self._render_text(block, inner.strip()) if inner.strip() else ''
        try:
            return fn(parse_props(attrs), children)
        except Exception as e:
            raise RenderError(block.id, f"<{name}> failed: {e}") from e

    def render_block(self, block: Block) -> str:
        """Render a block to HTML. Raises RenderError."""
        if block.kind == BlockKind.component:
            return self._render_component(block)
        return self._render_text(block, block.raw_text)

    def render_safe(self, block: Block) -> str:
        """Render a block, substituting an inline placeholder on failure."""
        try:
            return self.render_block(block)
        except RenderError as e:
            logger.warning("Render failed for block %s: %s", block.id, e.message)
            return error_placeholder(block, e.message)

    def render_all(self, blocks: list[Block]) -> list[Block]:
        """Set rendered on every block; a failing block never affects the others."""
        for block in blocks:
            block.rendered = self.render_safe(block)
        return blocks

    async def render_job(self, block: Block) -> tuple[str, int, str]:
        """Render a snapshot of block off the event loop; returns (id, version, html)."""
        snapshot = block.model_copy()
        rendered = await asyncio.to_thread(self.render_safe, snapshot)
        return snapshot.id, snapshot.version, rendered


def apply_rendered(blocks: list[Block], block_id: str, version: int, rendered: str) -> bool:
    """Store a render result only if its block still exists at the same version."""
    for block in blocks:
        if block.id == block_id:
            if block.version != version:
                logger.debug("Discarding stale render for block %s (v%d != v%d)", block_id, version, block.version)
                return False
            block.rendered = rendered
            return True
    logger.debug("Discarding render for removed block %s", block_id)
    return False


async def _render_concurrently(
    renderer: BlockRenderer,
    blocks: list[Block],
    current: Callable[[], list[Block]],
    ) -> int:
    jobs = [asyncio.ensure_future(renderer.render_job(b)) for b in blocks]
    applied = 0
    try:
        for next_done in asyncio.as_completed(jobs):
            block_id, version, rendered = await next_done
            if apply_rendered(current(), block_id, version, rendered):
                applied += 1
    finally:
        for job in jobs:
            job.cancel()
    return applied


async def render_blocks_async(renderer: BlockRenderer, blocks: list[Block]) -> int:
    """Render every block in its own task and apply results as they finish.

    The list may be mutated while tasks are pending; results for removed or
    re-edited blocks are dropped. Returns the number of results applied.
    """
    return await _render_concurrently(renderer, list(blocks), lambda: blocks)


async def render_session_async(renderer: BlockRenderer, session) -> int:
    """Like render_blocks_async, checked against session.blocks as it stands when each task ends."""
    return await _render_concurrently(renderer, list(session.blocks), lambda: session.blocks)
