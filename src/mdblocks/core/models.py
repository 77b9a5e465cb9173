"""Block records and the component catalog consumed by the segmenter"""

from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field


DEFAULT_LARGE_COMPONENTS = [
    'ImageGallery', 'ArrowDiagram', 'PyramidDiagram',
    'MatrixDiagram', 'LoopDiagram', 'Toggle',
]
DEFAULT_SELF_CLOSING_COMPONENTS = [
    'PageCard', 'CoverImage', 'DiagramCard', 'Callout', 'ImageChild',
]


class BlockKind(str, Enum):
    """Restrict blocks to the element kinds the segmenter can emit"""
    paragraph = "paragraph"
    heading = "heading"
    code = "code"
    component = "component"
    list = "list"
    blockquote = "blockquote"
    hr = "hr"
    table = "table"


def new_block_id() -> str:
    return uuid4().hex


class Block(BaseModel):
    """The smallest independently editable unit of page content."""
    id: str = Field(default_factory=new_block_id)
    kind: BlockKind
    raw_text: str
    level: Optional[int] = None             # heading level (1-6)
    language: Optional[str] = None          # code fence tag, "text" when absent
    component_name: Optional[str] = None    # opening tag name for components
    version: int = 0                        # bumped on every raw_text mutation
    rendered: Optional[str] = None          # cached render artifact; never authoritative

    def same_content(self, other: "Block") -> bool:
        """True when both blocks would reassemble and render identically (ids ignored)."""
        return (
            self.kind == other.kind
            and self.raw_text == other.raw_text
            and self.level == other.level
            and self.language == other.language
            and self.component_name == other.component_name
        )


class ComponentCatalog(BaseModel):
    """Custom tag names split by how their instances are delimited."""
    large: list[str] = Field(default_factory=lambda: list(DEFAULT_LARGE_COMPONENTS))
    self_closing: list[str] = Field(default_factory=lambda: list(DEFAULT_SELF_CLOSING_COMPONENTS))

    def is_large(self, name: str | None) -> bool:
        return name is not None and name in self.large

    def is_self_closing(self, name: str | None) -> bool:
        return name is not None and name in self.self_closing
