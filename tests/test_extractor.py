"""HTML extraction tests."""

from bs4 import BeautifulSoup

from src.scraper.extractor import MAX_HEADINGS, apply_rule, extract, run_rules
from src.scraper.rules import SCHEDULE_RULES, ExtractionRule


def _paragraphs(count: int, text: str = "Paragraph with enough words to qualify") -> str:
    return "".join(f"<p>{text} #{i}</p>" for i in range(count))


# --- title / headings ---


def test_demo_page():
    html = '<title>Demo</title><h1>Welcome</h1><a href="/a">x</a><a href="/a">y</a>'
    result = extract(html)
    assert result.title == "Demo"
    assert result.headings == ["Welcome"]
    assert result.links == ["/a"]
    assert result.links_count == 1


def test_missing_title_is_empty():
    result = extract("<h1>No title here</h1>")
    assert result.title == ""


def test_title_is_stripped():
    assert extract("<title>\n  Event Schedule  \n</title>").title == "Event Schedule"


def test_headings_levels_one_to_three_in_document_order():
    html = "<h3>third</h3><h4>ignored</h4><h1>first</h1><h2>second</h2><h5>no</h5>"
    assert extract(html).headings == ["third", "first", "second"]


def test_headings_capped_and_empty_skipped():
    html = "<h1>   </h1>" + "".join(f"<h2>Heading {i}</h2>" for i in range(12))
    headings = extract(html).headings
    assert len(headings) == MAX_HEADINGS
    assert headings[0] == "Heading 0"
    assert headings[-1] == "Heading 7"


# --- links / images ---


def test_duplicate_links_collapse():
    html = "".join('<a href="https://example.com/x">link</a>' for _ in range(5))
    result = extract(html)
    assert result.links == ["https://example.com/x"]
    assert result.links_count == 1


def test_links_keep_first_seen_order_and_skip_empty():
    html = '<a href=" /b ">b</a><a href="">e</a><a>none</a><a href="/a">a</a><a href="/b">b</a>'
    result = extract(html)
    assert result.links == ["/b", "/a"]
    assert result.links_count == 2


def test_links_capped_but_count_is_document_total():
    html = "".join(f'<a href="/page/{i}">p</a>' for i in range(45))
    result = extract(html)
    assert len(result.links) == 30
    assert result.links[0] == "/page/0"
    assert result.links[-1] == "/page/29"
    assert result.links_count == 45


def test_images_unique_and_capped():
    html = '<img src="/logo.png"><img src="/logo.png"><img alt="no src">' + "".join(
        f'<img src="/img/{i}.jpg">' for i in range(40)
    )
    result = extract(html)
    assert result.images[0] == "/logo.png"
    assert len(result.images) == 30
    assert result.images_count == 41


# --- schedule items ---


def test_schedule_classes_primary_rule():
    html = (
        '<div class="event-card">Hunt the Rathalos before Sunday</div>'
        '<li class="quest">  Slay   the\n Arkveld   now  </li>'
        '<span class="schedule">short</span>'
        + _paragraphs(3)
    )
    items = extract(html).schedule_items
    assert items == ["Hunt the Rathalos before Sunday", "Slay the Arkveld now"]


def test_schedule_class_match_is_case_sensitive():
    html = '<div class="Event">Capitalised class does not match</div>' + _paragraphs(2)
    items = extract(html).schedule_items
    assert len(items) == 2
    assert all(item.startswith("Paragraph") for item in items)


def test_schedule_items_truncated_to_400():
    html = f'<div class="schedule">{"x" * 1000}</div>'
    items = extract(html).schedule_items
    assert len(items) == 1
    assert len(items[0]) == 400


def test_schedule_items_capped_at_ten():
    html = "".join(f'<div class="event">Event number {i} is live</div>' for i in range(15))
    items = extract(html).schedule_items
    assert len(items) == 10
    assert items[0] == "Event number 0 is live"


def test_schedule_item_requires_more_than_ten_characters():
    html = '<div class="event">0123456789</div><div class="event">0123456789A</div>'
    assert extract(html).schedule_items == ["0123456789A"]


def test_fallback_to_paragraphs():
    html = "<p>too short</p>" + _paragraphs(8)
    items = extract(html).schedule_items
    assert len(items) == 6
    assert items[0] == "Paragraph with enough words to qualify #0"


def test_fallback_not_used_when_primary_matches():
    html = '<section class="quest-list">Weekly quest rotation begins</section>' + _paragraphs(8)
    assert extract(html).schedule_items == ["Weekly quest rotation begins"]


def test_no_candidates_yields_empty_items():
    assert extract("<div>nothing</div>").schedule_items == []


def test_run_rules_uses_first_rule_with_items():
    soup = BeautifulSoup("<p>alpha beta gamma delta epsilon</p><b>bold text block</b>", "html.parser")
    rules = (
        ExtractionRule(name="none", selector="table", cap=5, min_length=0),
        ExtractionRule(name="bold", selector="b", cap=5, min_length=5),
        ExtractionRule(name="para", selector="p", cap=5, min_length=5),
    )
    assert run_rules(soup, rules) == ["bold text block"]


def test_apply_rule_respects_max_length():
    soup = BeautifulSoup("<p>abcdefghijklmnop</p>", "html.parser")
    rule = ExtractionRule(name="p", selector="p", cap=1, min_length=0, max_length=5)
    assert apply_rule(soup, rule) == ["abcde"]


def test_default_rules_are_primary_then_fallback():
    assert [rule.name for rule in SCHEDULE_RULES] == ["schedule-classes", "paragraphs"]


# --- robustness and shape ---


def test_bounds_hold_for_large_document():
    html = (
        "".join(f"<h1>H{i}</h1>" for i in range(50))
        + "".join(f'<a href="/{i}">a</a><img src="/{i}.png">' for i in range(200))
        + "".join(f'<div class="event">{"long text " * 100}{i}</div>' for i in range(50))
    )
    result = extract(html)
    assert len(result.headings) <= 8
    assert len(result.links) <= 30
    assert len(result.images) <= 30
    assert len(result.schedule_items) <= 10
    assert all(len(item) <= 400 for item in result.schedule_items)
    assert result.links_count >= len(result.links)
    assert result.images_count >= len(result.images)


def test_malformed_html_degrades_gracefully():
    result = extract("<<div class=<p>>unclosed <a href='/x'")
    assert result.title == ""
    assert result.headings == []


def test_empty_html():
    result = extract("", url="https://example.com")
    assert result.url == "https://example.com"
    assert result.title == ""
    assert result.links == []
    assert result.links_count == 0
    assert result.schedule_items == []


def test_extract_is_idempotent():
    html = '<title>T</title><h2>H</h2><a href="/1">1</a><p>' + "words " * 10 + "</p>"
    assert extract(html).model_dump_json() == extract(html).model_dump_json()


def test_result_serializes_with_camel_case_fields():
    dumped = extract("<title>x</title>", url="https://example.com").model_dump(by_alias=True)
    assert list(dumped) == [
        "url",
        "title",
        "headings",
        "linksCount",
        "imagesCount",
        "links",
        "images",
        "scheduleItems",
    ]
