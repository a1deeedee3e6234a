"""Tests for markdown shopping list categorization."""

from __future__ import annotations

from weekplate.parsing.shopping_list import (
    DEFAULT_CATEGORY,
    parse_shopping_list,
    render_shopping_list,
)

SAMPLE = "## Produce\n- 1 head broccoli\n- 2 peppers\n## Dairy\n- 500ml milk"


def test_parses_headings_and_bullets_in_order():
    parsed = parse_shopping_list(SAMPLE)
    assert parsed == {"Produce": ["1 head broccoli", "2 peppers"], "Dairy": ["500ml milk"]}
    assert list(parsed) == ["Produce", "Dairy"]


def test_items_before_any_heading_are_miscellaneous():
    parsed = parse_shopping_list("- salt\n## Bakery\n- 1 loaf bread")
    assert parsed == {DEFAULT_CATEGORY: ["salt"], "Bakery": ["1 loaf bread"]}


def test_plain_lines_become_items_of_current_category():
    parsed = parse_shopping_list("## Pantry\n2 cans chickpeas\n- 1 jar tahini")
    assert parsed == {"Pantry": ["2 cans chickpeas", "1 jar tahini"]}


def test_empty_categories_are_dropped():
    parsed = parse_shopping_list("## Frozen\n## Produce\n- 3 onions\n## Drinks\n")
    assert parsed == {"Produce": ["3 onions"]}


def test_code_fence_and_markdown_wrappers_are_stripped():
    fenced = "```markdown\n" + SAMPLE + "\n```"
    assert parse_shopping_list(fenced) == parse_shopping_list(SAMPLE)
    quoted = '"markdown\n' + SAMPLE + '\nmarkdown"'
    assert parse_shopping_list(quoted) == parse_shopping_list(SAMPLE)


def test_duplicate_items_are_kept_verbatim():
    parsed = parse_shopping_list("## Produce\n- 2 lemons\n- 2 lemons")
    assert parsed == {"Produce": ["2 lemons", "2 lemons"]}


def test_blank_input_yields_no_categories():
    assert parse_shopping_list("") == {}
    assert parse_shopping_list("   \n\n") == {}


def test_render_then_parse_is_stable():
    parsed = parse_shopping_list("- salt\n## Produce\n- 1 head broccoli\n\n## Dairy\n- 500ml milk")
    rendered = render_shopping_list(parsed)

    assert parse_shopping_list(rendered) == parsed
    assert render_shopping_list(parse_shopping_list(rendered)) == rendered
    assert rendered == (
        "## Miscellaneous\n- salt\n\n## Produce\n- 1 head broccoli\n\n## Dairy\n- 500ml milk"
    )


def test_untagged_fence_keeps_text_on_opening_line():
    parsed = parse_shopping_list("```Produce\n- 1 onion\n```")
    assert parsed == {DEFAULT_CATEGORY: ["Produce", "1 onion"]}


def test_json_tagged_fence_is_stripped():
    parsed = parse_shopping_list("```json\n## Bakery\n- 1 loaf bread\n```")
    assert parsed == {"Bakery": ["1 loaf bread"]}
