"""Editing session over a segmented page: Segmented <-> RawEdit state machine

Blocks are authoritative while the session is Segmented; the page text is
derived from them with reassemble(). Entering RawEdit holds a draft for one
block. Committing re-parses only that draft, splices the result back at the
block's position and hands the reassembled page to the on_change callback.
The whole page is re-segmented only by load().
"""

import logging
from enum import Enum
from typing import Callable, Optional

from mdblocks.core.models import Block, ComponentCatalog
from mdblocks.core.reassemble import reassemble
from mdblocks.core.segment import segment


logger = logging.getLogger(__name__)

NEW_BLOCK_TEXT = "New paragraph..."


class EditState(str, Enum):
    segmented = "segmented"
    raw_edit = "raw_edit"


class EditStateError(RuntimeError):
    """Raised when an edit operation is not valid in the current state."""


class BlockNotFoundError(KeyError):
    """Raised when a block id is not part of the session."""


class EditSession:
    """Ordered blocks of one page plus at most one in-progress raw edit."""

    def __init__(
        self,
        text: str = "",
        catalog: Optional[ComponentCatalog] = None,
        on_change: Optional[Callable[[str], None]] = None,
        ):
        self.catalog = catalog or ComponentCatalog()
        self.on_change = on_change
        self.blocks: list[Block] = []
        self.state = EditState.segmented
        self.editing_id: str | None = None
        self.draft = ""
        if text:
            self.load(text)

    @property
    def content(self) -> str:
        return reassemble(self.blocks)

    def load(self, text: str) -> list[Block]:
        """Replace all blocks by segmenting text from scratch; drops any pending edit."""
        if self.state == EditState.raw_edit:
            logger.debug("Discarding draft for block %s on reload", self.editing_id)
        self._reset_edit()
        self.blocks = segment(text, self.catalog)
        return self.blocks

    def index_of(self, block_id: str) -> int:
        for i, block in enumerate(self.blocks):
            if block.id == block_id:
                return i
        raise BlockNotFoundError(block_id)

    def get(self, block_id: str) -> Block:
        return self.blocks[self.index_of(block_id)]

    # --- RawEdit transitions ---

    def begin_edit(self, block_id: str) -> str:
        """Enter RawEdit for block_id and return its draft text."""
        if self.state == EditState.raw_edit and self.editing_id != block_id:
            raise EditStateError(f"Block {self.editing_id} is already being edited")
        block = self.get(block_id)
        self.state = EditState.raw_edit
        self.editing_id = block.id
        self.draft = block.raw_text
        return self.draft

    def update_draft(self, text: str) -> None:
        if self.state != EditState.raw_edit:
            raise EditStateError("No block is being edited")
        self.draft = text

    def cancel_edit(self) -> None:
        self._reset_edit()

    def commit_edit(self) -> str:
        """Splice the re-parsed draft back into place and return the new page content.

        The draft is segmented as its own document: a single block keeps the
        edited block's id (its kind may change), several blocks are all spliced
        in with the first keeping the id, and a blank draft removes the block.
        """
        if self.state != EditState.raw_edit:
            raise EditStateError("No block is being edited")

        index = self.index_of(self.editing_id)
        original = self.blocks[index]
        parsed = segment(self.draft, self.catalog)

        if not parsed:
            logger.debug("Blank draft removed block %s", original.id)
        elif len(parsed) == 1 and parsed[0].same_content(original):
            parsed = [original]
        else:
            head = parsed[0].model_copy(update={"id": original.id, "version": original.version + 1})
            parsed = [head, *parsed[1:]]
            if head.kind != original.kind:
                logger.debug("Block %s reclassified %s -> %s", original.id, original.kind.value, head.kind.value)

        self.blocks[index:index + 1] = parsed
        self._reset_edit()
        return self._changed()

    # --- structural edits ---

    def insert_after(self, block_id: str | None, text: str = NEW_BLOCK_TEXT) -> list[Block]:
        """Insert the blocks parsed from text after block_id (None inserts at the start)."""
        index = 0 if block_id is None else self.index_of(block_id) + 1
        new_blocks = segment(text, self.catalog)
        if not new_blocks:
            return []
        self.blocks[index:index] = new_blocks
        self._changed()
        return new_blocks

    def delete(self, *block_ids: str) -> str:
        """Remove blocks by id and return the new page content."""
        doomed = set(block_ids)
        for block_id in doomed:
            self.index_of(block_id)
        if self.editing_id in doomed:
            self._reset_edit()
        self.blocks = [b for b in self.blocks if b.id not in doomed]
        return self._changed()

    def _reset_edit(self) -> None:
        self.state = EditState.segmented
        self.editing_id = None
        self.draft = ""

    def _changed(self) -> str:
        content = self.content
        if self.on_change is not None:
            self.on_change(content)
        return content
