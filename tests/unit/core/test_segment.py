"""Unit tests for core/segment.py"""

import pytest

from mdblocks.core.models import BlockKind, ComponentCatalog
from mdblocks.core.segment import make_block, segment


def _kinds(blocks):
    return [b.kind.value for b in blocks]


def _content_lines(text: str) -> list[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


# --- whole-page dispatch ---

def test_sample_page_kinds(sample_page, sample_kinds, catalog):
    """Each construct in the sample page becomes its own block, in order."""
    blocks = segment(sample_page, catalog)
    assert _kinds(blocks) == sample_kinds


def test_sample_page_metadata(sample_page, catalog):
    """Kind-specific metadata is extracted for headings, code and components."""
    blocks = segment(sample_page, catalog)
    assert blocks[0].level == 1
    assert blocks[4].level == 2
    assert blocks[7].language == "rust"
    assert [b.component_name for b in blocks if b.kind == BlockKind.component] == [
        "CoverImage", "PageCard", "Toggle",
    ]


def test_block_ids_unique(sample_page):
    blocks = segment(sample_page)
    assert len({b.id for b in blocks}) == len(blocks)


def test_resegmenting_assigns_new_ids(sample_page):
    """A full re-segmentation reassigns ids."""
    first, second = segment(sample_page), segment(sample_page)
    assert not {b.id for b in first} & {b.id for b in second}


@pytest.mark.parametrize("text", ["", "   ", "\n\n\n", " \t \n  \n"])
def test_blank_input_yields_no_blocks(text):
    assert segment(text) == []


@pytest.mark.parametrize("text", [
    "<", "```", "|", ">", "<Toggle", "<PageCard", "| a", "#", "1.", "<<>>",
    "</Toggle>\n</Toggle>", "```\n```\n```", "<Callout\n<Callout\n<Callout",
])
def test_malformed_input_never_raises(text):
    """Degenerate input still produces blocks that cover every line."""
    blocks = segment(text)
    lines = [line.strip() for b in blocks for line in b.raw_text.split("\n") if line.strip()]
    assert lines == _content_lines(text)


def test_coverage_every_line_in_exactly_one_block(sample_page):
    """Concatenating the blocks' non-blank lines reproduces the input's non-blank lines."""
    blocks = segment(sample_page)
    lines = [line.strip() for b in blocks for line in b.raw_text.split("\n") if line.strip()]
    assert lines == _content_lines(sample_page)


def test_raw_text_is_trimmed():
    blocks = segment("   indented paragraph   \n")
    assert blocks[0].raw_text == "indented paragraph"


def test_crlf_line_endings():
    blocks = segment("# Title\r\nBody line\r\n")
    assert _kinds(blocks) == ["heading", "paragraph"]
    assert blocks[0].raw_text == "# Title"


# --- paragraphs and headings ---

def test_each_plain_line_is_its_own_paragraph():
    blocks = segment("First line.\nSecond line.\n\nThird line.")
    assert _kinds(blocks) == ["paragraph"] * 3


def test_heading_not_merged_with_following_paragraph():
    blocks = segment("## Title\nA paragraph right below.")
    assert _kinds(blocks) == ["heading", "paragraph"]
    assert blocks[0].raw_text == "## Title"
    assert blocks[0].level == 2


@pytest.mark.parametrize("line,kind", [
    ("###### Six", "heading"),
    ("####### Seven", "paragraph"),
    ("#NoSpace", "paragraph"),
])
def test_heading_level_bounds(line, kind):
    assert _kinds(segment(line)) == [kind]


# --- fenced code ---

def test_code_without_language_uses_default():
    blocks = segment("```\nplain\n```")
    assert blocks[0].kind == BlockKind.code
    assert blocks[0].language == "text"


def test_code_keeps_internal_blank_lines_and_markup():
    text = "```python\n# not a heading\n\n- not a list\n```\nAfter"
    blocks = segment(text)
    assert _kinds(blocks) == ["code", "paragraph"]
    assert blocks[0].raw_text == "```python\n# not a heading\n\n- not a list\n```"


def test_unterminated_code_runs_to_end():
    blocks = segment("```py\nx = 1\n\ny = 2")
    assert _kinds(blocks) == ["code"]
    assert blocks[0].raw_text.endswith("y = 2")


# --- blockquotes and lists ---

def test_blockquote_absorbs_blank_separated_quote_lines():
    blocks = segment("> a\n\n> b\nAfter")
    assert _kinds(blocks) == ["blockquote", "paragraph"]
    assert blocks[0].raw_text == "> a\n\n> b"


def test_blockquote_trailing_blank_lines_excluded():
    blocks = segment("> quoted\n\n\nNext")
    assert blocks[0].raw_text == "> quoted"
    assert blocks[1].raw_text == "Next"


def test_ordered_list_stops_at_unindented_text():
    blocks = segment("1. one\n2. two\n\nAfter the list")
    assert _kinds(blocks) == ["list", "paragraph"]
    assert blocks[0].raw_text == "1. one\n2. two"


def test_list_includes_indented_continuations():
    text = "- a\n  - nested\n\tdetail\n\n- b"
    blocks = segment(text)
    assert _kinds(blocks) == ["list"]
    assert blocks[0].raw_text == text


# --- tables ---

def test_table_with_separator_spans_all_rows():
    blocks = segment("A | B\n---|---\n1 | 2")
    assert _kinds(blocks) == ["table"]
    assert blocks[0].raw_text == "A | B\n---|---\n1 | 2"


def test_lone_pipe_line_is_paragraph():
    blocks = segment("just | text")
    assert _kinds(blocks) == ["paragraph"]


def test_table_tolerates_single_blank_row():
    text = "| a | b |\n|---|---|\n| 1 | 2 |\n\n| 3 | 4 |"
    blocks = segment(text)
    assert _kinds(blocks) == ["table"]
    assert blocks[0].raw_text == text


def test_table_ends_at_blank_then_text():
    blocks = segment("| a | b |\n|---|---|\n\nAfter")
    assert _kinds(blocks) == ["table", "paragraph"]


def test_table_accepted_by_extra_rows_without_separator():
    blocks = segment("a | b | c\nd | e | f")
    assert _kinds(blocks) == ["table"]


def test_unconfirmed_table_falls_through_to_paragraph():
    blocks = segment("a | b | c\nplain")
    assert _kinds(blocks) == ["paragraph", "paragraph"]


def test_rule_after_table_is_not_a_separator():
    blocks = segment("| a | b |\n|---|---|\n---")
    assert _kinds(blocks) == ["table", "hr"]


# --- horizontal rules ---

@pytest.mark.parametrize("line", ["---", "***", "___", "-----"])
def test_horizontal_rules(line):
    assert _kinds(segment(line)) == ["hr"]


# --- components ---

def test_large_component_spans_to_closing_tag():
    blocks = segment('<Toggle label="A">\ninner\n</Toggle>')
    assert len(blocks) == 1
    assert blocks[0].kind == BlockKind.component
    assert blocks[0].component_name == "Toggle"
    assert blocks[0].raw_text == '<Toggle label="A">\ninner\n</Toggle>'


def test_large_component_keeps_nested_markdown():
    text = "<ImageGallery>\n# Not a heading block\n\n- nor a list\n</ImageGallery>\nAfter"
    blocks = segment(text)
    assert _kinds(blocks) == ["component", "paragraph"]
    assert blocks[0].component_name == "ImageGallery"


def test_large_component_closed_on_opening_line():
    blocks = segment('<Toggle label="A">inline</Toggle>\nAfter')
    assert _kinds(blocks) == ["component", "paragraph"]


def test_large_component_self_closed():
    blocks = segment("<ImageGallery images={[]} />\nAfter")
    assert _kinds(blocks) == ["component", "paragraph"]


def test_unclosed_large_component_absorbs_rest():
    blocks = segment("<Toggle>\nline one\n\nline two")
    assert len(blocks) == 1
    assert blocks[0].raw_text.endswith("line two")


def test_nested_same_name_component_stops_at_first_close():
    """No depth counting: the first closing tag ends the outer block."""
    text = '<Toggle label="outer">\n<Toggle label="inner">\nx\n</Toggle>\n</Toggle>'
    blocks = segment(text)
    assert len(blocks) == 2
    assert blocks[0].raw_text.endswith("x\n</Toggle>")
    assert blocks[1].raw_text == "</Toggle>"


def test_self_closing_component_wraps_attributes():
    text = '<PageCard\n  title="x"\n  description="y"\n/>\nAfter'
    blocks = segment(text)
    assert _kinds(blocks) == ["component", "paragraph"]
    assert blocks[0].raw_text == '<PageCard\n  title="x"\n  description="y"\n/>'


@pytest.mark.parametrize("callout", [
    '<Callout type="info">Note</Callout>',
    '<Callout type="info" />',
])
def test_self_closing_scan_stops_before_other_tag(callout):
    """A missing '/>' must not swallow the next component."""
    blocks = segment(f'<PageCard title="x"\n{callout}')
    assert len(blocks) == 2
    assert blocks[0].raw_text == '<PageCard title="x"'
    assert blocks[0].component_name == "PageCard"
    assert blocks[1].component_name == "Callout"


def test_complete_single_line_tag_outside_catalog():
    blocks = segment('<Unknown prop="1" />\n<span>hi</span>')
    assert _kinds(blocks) == ["component", "component"]
    assert [b.component_name for b in blocks] == ["Unknown", "span"]


def test_catalog_is_injected():
    """Names outside the catalog are not treated as multi-line components."""
    text = "<Steps>\none\n</Steps>"
    assert _kinds(segment(text)) == ["paragraph", "paragraph", "component"]
    custom = ComponentCatalog(large=["Steps"], self_closing=[])
    blocks = segment(text, custom)
    assert _kinds(blocks) == ["component"]
    assert blocks[0].component_name == "Steps"


def test_catalog_matches_whole_tag_name():
    """<ToggleGroup> is not a Toggle."""
    blocks = segment("<ToggleGroup>\nbody")
    assert _kinds(blocks) == ["paragraph", "paragraph"]


# --- make_block ---

def test_make_block_blank_is_none():
    assert make_block(BlockKind.paragraph, "   \n ") is None


def test_make_block_component_without_name_uses_default():
    block = make_block(BlockKind.component, "<>")
    assert block.component_name == "div"
