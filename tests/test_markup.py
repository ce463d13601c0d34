from __future__ import annotations

from collections import Counter
import json
import logging
import re

from bs4 import BeautifulSoup
import pytest

from termcast.catalog import CatalogAdapter, EntryKind, InMemoryCatalog
from termcast.markup import EmbedMarkupBuilder, coerce_attributes, split_subs
from termcast.options import EmbedOptions
from termcast.publisher import RecordingPublisher


HELLO_TOKEN = "b1946ac92492d2347c6235b4d2611184"
CREATE_RE = re.compile(
    r"AsciinemaPlayer\.create\((?P<url>\"[^\"]*\"), "
    r"document\.getElementById\((?P<id>\"[^\"]*\")\), (?P<options>\{.*\})\)"
)


@pytest.fixture
def builder(adapter: CatalogAdapter) -> EmbedMarkupBuilder:
    return EmbedMarkupBuilder(RecordingPublisher(adapter))


def _bootstrap(html: str) -> tuple[str, str, dict[str, object]]:
    script = BeautifulSoup(html, "html.parser").find("script")
    assert script is not None
    match = CREATE_RE.search(script.string or "")
    assert match is not None
    return (
        json.loads(match.group("url")),
        json.loads(match.group("id")),
        json.loads(match.group("options")),
    )


def test_plain_block_references_token_and_empty_options(
    builder: EmbedMarkupBuilder, catalog: InMemoryCatalog
) -> None:
    rendered = builder.build({}, "hello\n", EmbedOptions())

    assert rendered.token == HELLO_TOKEN
    assert catalog.find(f"_asciinema/{HELLO_TOKEN}.cast", EntryKind.ASSET) is not None
    url, element_id, options = _bootstrap(rendered.html)
    assert url == f"_asciinema/{HELLO_TOKEN}.cast"
    assert element_id == HELLO_TOKEN
    assert options == {}
    assert "{})</script>" in rendered.html


def test_container_markup_layout(builder: EmbedMarkupBuilder) -> None:
    rendered = builder.build(
        {"id": "demo", "role": "wide", "width": "640", "height": 480},
        "recording",
        EmbedOptions(),
    )
    soup = BeautifulSoup(rendered.html, "html.parser")

    container = soup.find("div", class_="videoblock")
    assert container["id"] == "demo"
    assert container["class"] == ["wide", "videoblock"]
    holder = container.find("div", class_="content").find("div")
    assert holder["id"] == rendered.token
    assert holder["style"] == "width: 640px; height: 480px;"
    assert soup.find("div", class_="title") is None


def test_options_follow_precedence(builder: EmbedMarkupBuilder) -> None:
    rendered = builder.build({"cols": "80"}, "precedence", EmbedOptions(rows=24))

    assert rendered.options == {"rows": 24, "cols": 80}
    assert _bootstrap(rendered.html)[2] == {"rows": 24, "cols": 80}


def test_title_gets_figure_caption(builder: EmbedMarkupBuilder) -> None:
    rendered = builder.build({"title": "Install"}, "titled", EmbedOptions(), figure_number=3)

    title = BeautifulSoup(rendered.html, "html.parser").find("div", class_="title")
    assert title.get_text() == "Figure 3. Install"
    assert rendered.numbered is True


def test_explicit_caption_is_consumed(builder: EmbedMarkupBuilder) -> None:
    attrs = {"title": "Install", "caption": "Demo A. "}

    rendered = builder.build(attrs, "captioned", EmbedOptions(), figure_number=1)

    title = BeautifulSoup(rendered.html, "html.parser").find("div", class_="title")
    assert title.get_text() == "Demo A. Install"
    assert rendered.numbered is False
    assert rendered.html.count("Demo A.") == 1


def test_title_is_escaped(builder: EmbedMarkupBuilder) -> None:
    rendered = builder.build({"title": "<b>x</b>"}, "escaped", EmbedOptions())

    assert "&lt;b&gt;x&lt;/b&gt;" in rendered.html


def test_repeated_recording_gets_distinct_element_ids(
    builder: EmbedMarkupBuilder, catalog: InMemoryCatalog
) -> None:
    seen: Counter[str] = Counter()

    first = builder.build({}, "same", EmbedOptions(), seen=seen)
    second = builder.build({}, "same", EmbedOptions(), seen=seen)

    assert first.token == second.token
    assert first.element_id == first.token
    assert second.element_id == f"{first.token}-2"
    assert len(catalog) == 1


def test_url_resolver_is_applied(adapter: CatalogAdapter) -> None:
    builder = EmbedMarkupBuilder(
        RecordingPublisher(adapter), url_for=lambda path: f"../{path}"
    )

    rendered = builder.build({}, "nested page", EmbedOptions())

    assert _bootstrap(rendered.html)[0] == f"../_asciinema/{rendered.token}.cast"


def test_subs_are_forwarded_to_substitution_engine(adapter: CatalogAdapter) -> None:
    calls: list[tuple[str, list[str]]] = []

    def substitute(text: str, subs: list[str]) -> str:
        calls.append((text, list(subs)))
        return text.replace("NAME", "world")

    builder = EmbedMarkupBuilder(RecordingPublisher(adapter), substitute=substitute)
    rendered = builder.build({"subs": "attributes,+quotes"}, "hello NAME", EmbedOptions())

    assert calls == [("hello NAME", ["attributes", "+quotes"])]
    assert adapter.catalog.find(rendered.asset_path, EntryKind.ASSET).read() == b"hello world"


def test_subs_without_engine_are_ignored(
    builder: EmbedMarkupBuilder, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING):
        rendered = builder.build({"subs": "attributes"}, "untouched", EmbedOptions())

    assert builder.publisher.catalog.catalog.find(
        rendered.asset_path, EntryKind.ASSET
    ).read() == b"untouched"
    assert "subs=attributes" in caplog.text


class _LazyAttributes:
    def __init__(self, values: dict[str, object]) -> None:
        self._values = values

    def to_dict(self) -> dict[str, object]:
        return dict(self._values)


def test_lazy_attribute_bags_are_coerced(builder: EmbedMarkupBuilder) -> None:
    rendered = builder.build(_LazyAttributes({"id": "lazy", "rows": 5}), "lazy", EmbedOptions())

    assert 'id="lazy"' in rendered.html
    assert rendered.options == {"rows": 5}


def test_coerce_attributes_shapes() -> None:
    assert coerce_attributes(None) == {}
    assert coerce_attributes([("id", "x")]) == {"id": "x"}
    with pytest.raises(TypeError):
        coerce_attributes(42)


def test_split_subs() -> None:
    assert split_subs("attributes, quotes") == ["attributes", "quotes"]
    assert split_subs(None) == []
    assert split_subs(["a", " "]) == ["a"]
