import io

from rich.console import Console

from rssterm.events import SCROLL_BOTTOM, SCROLL_TOP
from rssterm.expanded import ExpandedEntryViewer


def _long_entry(make_entry, count=30):
    return make_entry("Long read", body=tuple(f"line {index}" for index in range(count)))


def test_empty_body_never_scrolls(make_entry):
    entry = make_entry("Empty", body=None, summary=None)
    viewer = ExpandedEntryViewer()
    viewer.open(entry.id)
    viewer.sync(entry, 40, 10)

    viewer.scroll(SCROLL_BOTTOM)
    assert viewer.scroll_offset == 0
    viewer.scroll(5)
    assert viewer.scroll_offset == 0
    assert viewer.visible_lines() == ()


def test_scroll_offset_is_clamped(make_entry):
    entry = _long_entry(make_entry)
    viewer = ExpandedEntryViewer()
    viewer.open(entry.id)
    viewer.sync(entry, 40, 10)

    viewer.scroll(SCROLL_BOTTOM)
    assert viewer.scroll_offset == 20
    viewer.scroll(5)
    assert viewer.scroll_offset == 20
    assert viewer.visible_lines()[-1] == "line 29"

    viewer.scroll(-100)
    assert viewer.scroll_offset == 0
    viewer.scroll(3)
    viewer.scroll(SCROLL_TOP)
    assert viewer.scroll_offset == 0


def test_taller_viewport_reclamps_offset(make_entry):
    entry = _long_entry(make_entry)
    viewer = ExpandedEntryViewer()
    viewer.open(entry.id)
    viewer.sync(entry, 40, 10)
    viewer.scroll(SCROLL_BOTTOM)
    lines = viewer.cached_lines

    viewer.sync(entry, 40, 25)

    assert viewer.scroll_offset == 5
    assert viewer.cached_lines is lines


def test_width_change_rewraps(make_entry):
    entry = make_entry("Wide", body=("alpha beta gamma delta",))
    viewer = ExpandedEntryViewer()
    viewer.open(entry.id)

    assert viewer.sync(entry, 40, 10) == ("alpha beta gamma delta",)
    assert viewer.sync(entry, 11, 10) == ("alpha beta", "gamma delta")


def test_summary_is_used_without_body(make_entry):
    entry = make_entry("Summary only", summary=("short summary",))
    viewer = ExpandedEntryViewer()
    viewer.open(entry.id)
    assert viewer.sync(entry, 40, 10) == ("short summary",)


def test_collapse_and_reexpand_gives_same_lines(make_entry):
    entry = _long_entry(make_entry)
    viewer = ExpandedEntryViewer()
    viewer.open(entry.id)
    before = viewer.sync(entry, 40, 10)
    viewer.scroll(4)

    viewer.close()
    assert not viewer.is_open
    assert viewer.cached_lines is None
    assert viewer.scroll_offset == 0
    assert viewer.render_width is None

    viewer.open(entry.id)
    assert viewer.sync(entry, 40, 10) == before
    assert viewer.scroll_offset == 0


def test_render_shows_title_authors_and_body(make_entry):
    entry = make_entry(
        "Expanded title",
        authors=("Ada", "Grace"),
        body=("The body text",),
    )
    viewer = ExpandedEntryViewer()
    viewer.open(entry.id)
    console = Console(width=80, file=io.StringIO(), record=True, color_system=None)

    console.print(viewer.render(entry, 80, 20))
    output = console.export_text()

    assert "Expanded title" in output
    assert "by Ada, Grace" in output
    assert "The body text" in output
