"""Line-scan segmentation of MDX/Markdown text into typed blocks

The scan walks physical lines with a cursor. At each non-blank line the rules
in RULES are tried in priority order; the first rule whose classifier accepts
the line and whose extractor returns an end index produces one block spanning
lines [start, end]. Blank lines between blocks are separators and emit nothing.
"""

import logging
import re
from typing import Callable, NamedTuple, Optional

from mdblocks.core.models import Block, BlockKind, ComponentCatalog


logger = logging.getLogger(__name__)

TAG_NAME_RE = re.compile(r'^<\s*/?\s*([A-Za-z][\w.]*)')
OPEN_TAG_RE = re.compile(r'^<([A-Za-z][\w.]*)')
HEADING_RE = re.compile(r'^(#{1,6})\s')
FENCE = '```'
FENCE_LANG_RE = re.compile(r'^```(\w+)?')
LIST_ITEM_RE = re.compile(r'^(?:[*+-]|\d+\.)\s')
TABLE_BORDERED_RE = re.compile(r'^\s*\|.*\|\s*$')
TABLE_SEPARATOR_RE = re.compile(r'^[|\s]*[-:]+[|\s\-:]*$')
HR_RE = re.compile(r'^[*\-_]{3,}$')

DEFAULT_LANGUAGE = 'text'
DEFAULT_COMPONENT = 'div'

Classifier = Callable[[list[str], int, ComponentCatalog], bool]
Extractor = Callable[[list[str], int, ComponentCatalog], Optional[int]]


class Rule(NamedTuple):
    """One dispatch table entry: a line classifier and its span extractor."""
    kind: BlockKind
    matches: Classifier
    extract: Extractor


def tag_name(trimmed: str) -> str | None:
    """Return the tag name of an opening or closing tag line, else None."""
    m = TAG_NAME_RE.match(trimmed)
    return m.group(1) if m else None


def _open_tag_name(trimmed: str) -> str | None:
    m = OPEN_TAG_RE.match(trimmed)
    return m.group(1) if m else None


def _is_list_item(trimmed: str) -> bool:
    return LIST_ITEM_RE.match(trimmed) is not None


def _is_separator(trimmed: str) -> bool:
    return TABLE_SEPARATOR_RE.match(trimmed) is not None


# --- classifiers ---

def _is_large_component(lines: list[str], i: int, catalog: ComponentCatalog) -> bool:
    return catalog.is_large(_open_tag_name(lines[i].strip()))


def _is_self_closing_component(lines: list[str], i: int, catalog: ComponentCatalog) -> bool:
    return catalog.is_self_closing(_open_tag_name(lines[i].strip()))


def _is_complete_tag(lines: list[str], i: int, catalog: ComponentCatalog) -> bool:
    trimmed = lines[i].strip()
    return trimmed.startswith('<') and (trimmed.endswith('/>') or '</' in trimmed)


def _is_fence(lines: list[str], i: int, catalog: ComponentCatalog) -> bool:
    return lines[i].strip().startswith(FENCE)


def _is_heading(lines: list[str], i: int, catalog: ComponentCatalog) -> bool:
    return HEADING_RE.match(lines[i].strip()) is not None


def _is_blockquote(lines: list[str], i: int, catalog: ComponentCatalog) -> bool:
    return lines[i].strip().startswith('>')


def _is_list(lines: list[str], i: int, catalog: ComponentCatalog) -> bool:
    return _is_list_item(lines[i].strip())


def _is_table_row(lines: list[str], i: int, catalog: ComponentCatalog) -> bool:
    """A pipe line with 3+ fields, a bordered row, or a row followed by a piped separator."""
    trimmed = lines[i].strip()
    if '|' not in trimmed:
        return False
    if len(trimmed.split('|')) >= 3 or TABLE_BORDERED_RE.match(trimmed):
        return True
    if i + 1 < len(lines):
        nxt = lines[i + 1].strip()
        return '|' in nxt and _is_separator(nxt)
    return False


def _is_hr(lines: list[str], i: int, catalog: ComponentCatalog) -> bool:
    return HR_RE.match(lines[i].strip()) is not None


def _always(lines: list[str], i: int, catalog: ComponentCatalog) -> bool:
    return True


# --- extractors: return the inclusive end line index, or None to fall through ---

def _single_line(lines: list[str], start: int, catalog: ComponentCatalog) -> int:
    return start


def _extract_large_component(lines: list[str], start: int, catalog: ComponentCatalog) -> int:
    """Scan to the first line holding the literal closing tag; no nesting depth is tracked."""
    trimmed = lines[start].strip()
    if trimmed.endswith('/>'):
        return start
    name = _open_tag_name(trimmed)
    closing = f'</{name}>'
    for j in range(start, len(lines)):
        if closing in lines[j]:
            return j
    logger.debug("No %s found after line %d; block runs to end of input", closing, start + 1)
    return len(lines) - 1


def _extract_self_closing_component(lines: list[str], start: int, catalog: ComponentCatalog) -> int:
    """Accumulate wrapped attribute lines until one ends with '/>'.

    A line opening a differently named tag stops the scan before that line so a
    missing terminator cannot swallow the following component.
    """
    trimmed = lines[start].strip()
    if trimmed.endswith('/>'):
        return start
    name = _open_tag_name(trimmed)
    for j in range(start + 1, len(lines)):
        t = lines[j].strip()
        if t.startswith('<') and tag_name(t) != name:
            return j - 1
        if t.endswith('/>'):
            return j
    logger.debug("<%s> opened on line %d is never closed with '/>'", name, start + 1)
    return len(lines) - 1


def _extract_fence(lines: list[str], start: int, catalog: ComponentCatalog) -> int:
    for j in range(start + 1, len(lines)):
        if lines[j].strip().startswith(FENCE):
            return j
    logger.debug("Code fence opened on line %d is never closed", start + 1)
    return len(lines) - 1


def _extract_blockquote(lines: list[str], start: int, catalog: ComponentCatalog) -> int:
    end = start
    for j in range(start + 1, len(lines)):
        t = lines[j].strip()
        if t.startswith('>'):
            end = j
        elif t:
            break
    return end


def _extract_list(lines: list[str], start: int, catalog: ComponentCatalog) -> int:
    end = start
    for j in range(start + 1, len(lines)):
        line = lines[j]
        t = line.strip()
        if not t:
            continue
        if _is_list_item(t) or line.startswith('  ') or line.startswith('\t'):
            end = j
        else:
            break
    return end


def _extract_table(lines: list[str], start: int, catalog: ComponentCatalog) -> int | None:
    """Collect piped separator rows, piped rows and single blank rows; None unless confirmed."""
    end = start
    has_separator = False
    rows = 0
    j = start + 1
    while j < len(lines):
        t = lines[j].strip()
        if '|' in t and _is_separator(t):
            has_separator = True
            end = j
        elif '|' in t:
            rows += 1
            end = j
        elif not t and j + 1 < len(lines) and '|' in lines[j + 1]:
            pass
        else:
            break
        j += 1

    if has_separator or rows >= 1:
        return end
    return None


RULES: tuple[Rule, ...] = (
    Rule(BlockKind.component,  _is_large_component,        _extract_large_component),
    Rule(BlockKind.component,  _is_self_closing_component, _extract_self_closing_component),
    Rule(BlockKind.component,  _is_complete_tag,           _single_line),
    Rule(BlockKind.code,       _is_fence,                  _extract_fence),
    Rule(BlockKind.heading,    _is_heading,                _single_line),
    Rule(BlockKind.blockquote, _is_blockquote,             _extract_blockquote),
    Rule(BlockKind.list,       _is_list,                   _extract_list),
    Rule(BlockKind.table,      _is_table_row,              _extract_table),
    Rule(BlockKind.hr,         _is_hr,                     _single_line),
    Rule(BlockKind.paragraph,  _always,                    _single_line),
)


def make_block(kind: BlockKind, text: str) -> Block | None:
    """Build a Block from source text with kind-specific metadata; None when text is blank."""
    content = text.strip()
    if not content:
        return None

    fields: dict = {"kind": kind, "raw_text": content}
    if kind == BlockKind.heading:
        m = HEADING_RE.match(content)
        fields["level"] = len(m.group(1)) if m else 1
    elif kind == BlockKind.code:
        m = FENCE_LANG_RE.match(content)
        fields["language"] = (m.group(1) if m else None) or DEFAULT_LANGUAGE
    elif kind == BlockKind.component:
        fields["component_name"] = tag_name(content) or DEFAULT_COMPONENT
    return Block(**fields)


def _dispatch(lines: list[str], i: int, catalog: ComponentCatalog) -> tuple[BlockKind, int]:
    """Return (kind, end index) from the first rule that claims line i."""
    for rule in RULES:
        if not rule.matches(lines, i, catalog):
            continue
        end = rule.extract(lines, i, catalog)
        if end is not None:
            return rule.kind, end
    return BlockKind.paragraph, i


def segment(text: str, catalog: ComponentCatalog | None = None) -> list[Block]:
    """Split text into an ordered list of blocks. Never raises; blank input yields []."""
    catalog = catalog or ComponentCatalog()
    lines = text.split('\n')
    blocks: list[Block] = []
    i = 0

    while i < len(lines):
        if not lines[i].strip():
            i += 1
            continue
        kind, end = _dispatch(lines, i, catalog)
        block = make_block(kind, '\n'.join(lines[i:end + 1]))
        if block is not None:
            blocks.append(block)
        i = end + 1

    return blocks
