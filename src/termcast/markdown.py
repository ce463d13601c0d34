"""Markdown extension rendering ``/// asciinema`` blocks as embedded players."""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping, Sequence
import logging
import re
import shlex
from typing import Any

from markdown import Markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor

from .catalog import CatalogAdapter, InMemoryCatalog
from .exceptions import InvalidOptionError
from .markup import EmbedMarkupBuilder, UrlFor
from .options import EmbedOptions, validate_options
from .publisher import RecordingPublisher


logger = logging.getLogger(__name__)

BLOCK_NAME = "asciinema"
POSITIONAL_ATTRIBUTES = ("target", "format")
NAMED_ATTRIBUTES = (
    "id",
    "role",
    "title",
    "caption",
    "subs",
    "rows",
    "cols",
    "autoPlay",
    "width",
    "height",
)

_MUSTACHE_RE = re.compile(r"\{\{\s*([^\}\s][^\}]*)\s*\}\}")
_MISSING = object()


def _lookup(context: Mapping[str, Any] | None, path: str) -> Any:
    current: Any = context
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return _MISSING
        current = current.get(part)
    return current


class MustacheSubstituter:
    """Resolve ``{{ name }}`` attribute references inside block bodies.

    Only the ``attributes`` substitution (also implied by ``normal``) changes the
    text; ``none`` and ``verbatim`` leave it untouched.
    """

    APPLIES = {"attributes", "normal"}
    INERT = {"none", "verbatim"}

    def __init__(self, *contexts: Mapping[str, Any] | None) -> None:
        self.contexts: list[Mapping[str, Any] | None] = list(contexts)

    def __call__(self, text: str, subs: Sequence[str]) -> str:
        names = {name.strip("+-") for name in subs}
        unknown = sorted(names - self.APPLIES - self.INERT)
        if unknown:
            logger.warning("Unsupported substitution(s) ignored: %s", ", ".join(unknown))
        if not names & self.APPLIES:
            return text
        return _MUSTACHE_RE.sub(self._replacement, text)

    def _replacement(self, match: re.Match[str]) -> str:
        raw_path = match.group(1).strip()
        for context in self.contexts:
            value = _lookup(context, raw_path)
            if value is not _MISSING and value is not None:
                return str(value)
        logger.warning(
            "Unresolved attribute '{{%s}}' in asciinema block; leaving placeholder as-is.",
            raw_path,
        )
        return match.group(0)


def _tokenize(text: str) -> list[str]:
    lexer = shlex.shlex(text, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    try:
        return list(lexer)
    except ValueError as exc:
        logger.warning(
            "Malformed asciinema block header '%s' (%s); splitting on whitespace.", text, exc
        )
        return text.split()


def parse_block_attributes(positional: str | None, braces: str | None) -> dict[str, Any]:
    """Parse the header of a block into an attribute mapping."""
    attributes: dict[str, Any] = {}
    if positional:
        values = _tokenize(positional)
        if len(values) > len(POSITIONAL_ATTRIBUTES):
            logger.warning(
                "Ignoring extra positional asciinema attributes: %s",
                " ".join(values[len(POSITIONAL_ATTRIBUTES) :]),
            )
        attributes.update(zip(POSITIONAL_ATTRIBUTES, values, strict=False))

    if not braces:
        return attributes
    body = braces.strip()
    if body.startswith("{") and body.endswith("}"):
        body = body[1:-1].strip()
    if body.startswith(":"):
        body = body[1:].strip()

    roles: list[str] = []
    for token in _tokenize(body):
        if not token:
            continue
        if token.startswith("."):
            roles.append(token[1:])
        elif token.startswith("#"):
            attributes["id"] = token[1:] or attributes.get("id")
        elif "=" in token:
            key, value = token.split("=", 1)
            if key not in NAMED_ATTRIBUTES:
                logger.debug("Passing through unrecognised asciinema attribute '%s'.", key)
            attributes[key] = value
        else:
            attributes[token] = True
    if roles:
        attributes["role"] = " ".join(roles)
    return attributes


class _AsciinemaBlockPreprocessor(Preprocessor):
    """Replace ``/// asciinema`` blocks with stashed player markup."""

    _START_RE = re.compile(
        r"^\s*///\s+asciinema(?:\s+(?P<positional>[^{]*?))?\s*(?P<attrs>\{.*\})?\s*$"
    )
    _END_RE = re.compile(r"^\s*///\s*$")
    _FENCE_RE = re.compile(r"^\s{0,3}(`{3,}|~{3,})(.*)$")
    _FENCE_CLOSE_RE = re.compile(r"^\s{0,3}(`{3,}|~{3,})\s*$")

    def __init__(self, md: Markdown, extension: AsciinemaExtension) -> None:
        super().__init__(md)
        self._extension = extension

    def run(self, lines: list[str]) -> list[str]:
        result: list[str] = []
        index = 0
        total = len(lines)
        in_fence = False
        fence_char: str | None = None
        fence_len = 0
        figures = 0
        seen: Counter[str] = Counter()

        while index < total:
            line = lines[index]

            if in_fence:
                # Closing fences carry no info string.
                closing = self._FENCE_CLOSE_RE.match(line)
                if closing:
                    fence_token = closing.group(1)
                    if fence_token[0] == fence_char and len(fence_token) >= fence_len:
                        in_fence = False
                        fence_char = None
                        fence_len = 0
                result.append(line)
                index += 1
                continue

            fence_match = self._FENCE_RE.match(line)
            if fence_match:
                fence_token = fence_match.group(1)
                in_fence = True
                fence_char = fence_token[0]
                fence_len = len(fence_token)
                result.append(line)
                index += 1
                continue

            header = self._START_RE.match(line)
            if not header:
                result.append(line)
                index += 1
                continue

            start_index = index
            index += 1
            contents: list[str] = []
            while index < total and not self._END_RE.match(lines[index]):
                contents.append(lines[index])
                index += 1

            if index >= total:
                # No closing marker; keep the raw lines
                result.extend(lines[start_index:])
                break

            attributes = parse_block_attributes(header.group("positional"), header.group("attrs"))
            rendered = self._extension.builder.build(
                attributes,
                "\n".join(contents),
                self._extension.defaults,
                figure_number=figures + 1,
                seen=seen,
            )
            if rendered.numbered:
                figures += 1
            placeholder = self.md.htmlStash.store(rendered.html)
            result.extend(["", placeholder, ""])
            index += 1  # Skip closing marker

        return result


class AsciinemaExtension(Extension):
    """Register the ``/// asciinema`` block processor.

    Keyword options ``rows``, ``cols`` and ``autoPlay`` are site-wide player
    defaults. ``catalog`` receives the published recordings; a private in-memory
    catalog is used when none is given.
    """

    def __init__(
        self,
        *,
        catalog: CatalogAdapter | None = None,
        url_for: UrlFor | None = None,
        attributes: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        # Empty strings stand for "unset": Markdown coerces ``None`` defaults to bools.
        self.config = {
            "rows": ["", "Default terminal rows."],
            "cols": ["", "Default terminal columns."],
            "autoPlay": [None, "Start playback automatically."],
        }
        validate_options(kwargs)
        EmbedOptions.from_mapping(kwargs)
        try:
            super().__init__(**kwargs)
        except ValueError as exc:
            raise InvalidOptionError(f"Invalid asciinema option: {exc}") from exc
        self.defaults = self._resolve_defaults()
        self.catalog = catalog or CatalogAdapter(InMemoryCatalog())
        self.site_attributes: Mapping[str, Any] = dict(attributes or {})
        self.substituter = MustacheSubstituter({}, self.site_attributes)
        self.builder = EmbedMarkupBuilder(
            RecordingPublisher(self.catalog),
            substitute=self.substituter,
            url_for=url_for,
        )

    def bind_page(
        self,
        *,
        url_for: UrlFor | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> None:
        """Point URL resolution and substitutions at the page being rendered."""
        self.builder.url_for = url_for
        self.substituter.contexts = [attributes or {}, self.site_attributes]

    def _resolve_defaults(self) -> EmbedOptions:
        return EmbedOptions.from_mapping(self.getConfigs())

    def extendMarkdown(self, md: Markdown) -> None:  # noqa: N802
        self.defaults = self._resolve_defaults()
        md.preprocessors.register(
            _AsciinemaBlockPreprocessor(md, self), "termcast_asciinema", priority=28
        )


def makeExtension(**kwargs: Any) -> AsciinemaExtension:  # noqa: N802 - Markdown API hook
    return AsciinemaExtension(**kwargs)


__all__ = [
    "BLOCK_NAME",
    "NAMED_ATTRIBUTES",
    "POSITIONAL_ATTRIBUTES",
    "AsciinemaExtension",
    "MustacheSubstituter",
    "makeExtension",
    "parse_block_attributes",
]
