"""Rebuild a single document string from an ordered block list"""

from typing import Iterable

from mdblocks.core.models import Block, BlockKind


COMPONENT_SEPARATOR = "\n\n"
BLOCK_SEPARATOR = "\n"


def separator_for(block: Block) -> str:
    """Spacing placed before a non-first block; components need a blank line for MDX."""
    return COMPONENT_SEPARATOR if block.kind == BlockKind.component else BLOCK_SEPARATOR


def reassemble(blocks: Iterable[Block]) -> str:
    """Concatenate raw_text in order using the kind-keyed separator rule."""
    parts: list[str] = []
    for index, block in enumerate(blocks):
        if index > 0:
            parts.append(separator_for(block))
        parts.append(block.raw_text)
    return "".join(parts)
