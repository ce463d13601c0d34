"""Turn an embed block into the markup that boots the player."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from html import escape
import json
import logging
from typing import Any

from .options import EmbedOptions, resolve_options
from .publisher import RecordingPublisher, recording_path


logger = logging.getLogger(__name__)

Substitute = Callable[[str, Sequence[str]], str]
UrlFor = Callable[[str], str]

PLAYER_FACTORY = "AsciinemaPlayer.create"
FIGURE_CAPTION = "Figure"


def coerce_attributes(attrs: Any) -> dict[str, Any]:
    """Return a plain ``dict`` for an attribute container of unknown shape."""
    if attrs is None:
        return {}
    if isinstance(attrs, dict):
        return dict(attrs)
    if isinstance(attrs, Mapping):
        return {str(key): value for key, value in attrs.items()}
    for converter in ("to_dict", "as_dict"):
        method = getattr(attrs, converter, None)
        if callable(method):
            return coerce_attributes(method())
    items = getattr(attrs, "items", None)
    if callable(items):
        return {str(key): value for key, value in items()}
    if isinstance(attrs, Iterable) and not isinstance(attrs, (str, bytes)):
        return {str(key): value for key, value in attrs}
    raise TypeError(f"Cannot read block attributes from {type(attrs).__name__}.")


def split_subs(value: Any) -> list[str]:
    """Split a ``subs`` directive into substitution names."""
    if value is None:
        return []
    if isinstance(value, str):
        parts = value.split(",")
    else:
        parts = [str(part) for part in value]
    return [part.strip() for part in parts if part.strip()]


@dataclass(slots=True)
class RenderedBlock:
    """Markup produced for a single embed block."""

    token: str
    asset_path: str
    element_id: str
    options: dict[str, Any] = field(default_factory=dict)
    html: str = ""
    numbered: bool = False


class EmbedMarkupBuilder:
    """Publish a block's recording and compose its player markup."""

    def __init__(
        self,
        publisher: RecordingPublisher,
        *,
        substitute: Substitute | None = None,
        url_for: UrlFor | None = None,
    ) -> None:
        self._publisher = publisher
        self.substitute = substitute
        self.url_for = url_for

    @property
    def publisher(self) -> RecordingPublisher:
        return self._publisher

    def build(
        self,
        attrs: Any,
        raw_text: str,
        defaults: EmbedOptions,
        *,
        figure_number: int | None = None,
        seen: Counter[str] | None = None,
    ) -> RenderedBlock:
        """Render ``raw_text`` as a player embed.

        ``figure_number`` is used for the caption prefix of titled blocks without
        an explicit ``caption``. ``seen`` counts tokens already embedded in the
        current document so a repeated recording gets a distinct DOM id.
        """
        attributes = coerce_attributes(attrs)

        subs = split_subs(attributes.get("subs"))
        if subs:
            if self.substitute is None:
                logger.warning(
                    "No substitution engine available; ignoring subs=%s.", ",".join(subs)
                )
            else:
                raw_text = self.substitute(raw_text, subs)

        token = self._publisher.publish(raw_text)
        asset_path = recording_path(token)
        options = resolve_options(attributes, defaults)
        occurrence = 1
        if seen is not None:
            seen[token] += 1
            occurrence = seen[token]
        element_id = token if occurrence == 1 else f"{token}-{occurrence}"

        title = attributes.get("title")
        caption = ""
        numbered = False
        if title:
            if "caption" in attributes:
                caption = str(attributes.pop("caption") or "")
            elif figure_number is not None:
                caption = f"{FIGURE_CAPTION} {figure_number}. "
                numbered = True

        url = self.url_for(asset_path) if self.url_for else asset_path
        html = "\n".join(
            [
                f"<div{_id_attribute(attributes.get('id'))} class=\"{_classes(attributes.get('role'))}\">",
                f'<div class="content"><div id="{element_id}"{_style_attribute(attributes)}></div></div>',
                f'{_title_element(title, caption)}</div>',
                f"<script>{PLAYER_FACTORY}({json.dumps(url)}, "
                f"document.getElementById({json.dumps(element_id)}), "
                f"{json.dumps(options, separators=(',', ':'))})</script>",
            ]
        )
        return RenderedBlock(
            token=token,
            asset_path=asset_path,
            element_id=element_id,
            options=options,
            html=html,
            numbered=numbered,
        )


def _id_attribute(value: Any) -> str:
    if not value:
        return ""
    return f' id="{escape(str(value))}"'


def _classes(role: Any) -> str:
    if role:
        return f"{escape(str(role))} videoblock"
    return "videoblock"


def _style_attribute(attributes: Mapping[str, Any]) -> str:
    rules = [
        f"{name}: {escape(str(attributes[name]))}px;"
        for name in ("width", "height")
        if attributes.get(name) not in (None, "")
    ]
    if not rules:
        return ""
    return f' style="{" ".join(rules)}"'


def _title_element(title: Any, caption: str) -> str:
    if not title:
        return ""
    return f'<div class="title">{escape(caption)}{escape(str(title))}</div>'


__all__ = [
    "FIGURE_CAPTION",
    "PLAYER_FACTORY",
    "EmbedMarkupBuilder",
    "RenderedBlock",
    "Substitute",
    "UrlFor",
    "coerce_attributes",
    "split_subs",
]
