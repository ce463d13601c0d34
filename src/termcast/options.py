"""Player options shared between site-wide defaults and individual blocks.

`rows` (`int | None`)
: Terminal height handed to the player. Must be positive.

`cols` (`int | None`)
: Terminal width handed to the player. Must be positive.

`autoPlay` (`bool | None`)
: Start playback as soon as the player is loaded.

Unset values stay ``None`` and are left out of the player options.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError, field_validator

from .exceptions import InvalidOptionError, UnknownOptionError


logger = logging.getLogger(__name__)

RECOGNISED_OPTIONS = ("rows", "cols", "autoPlay")


class EmbedOptions(BaseModel):
    """Player options; ``None`` means the value was not provided."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    rows: PositiveInt | None = None
    cols: PositiveInt | None = None
    auto_play: bool | None = Field(default=None, alias="autoPlay")

    @field_validator("rows", "cols", "auto_play", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("rows", "cols", mode="before")
    @classmethod
    def _reject_booleans(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("expected an integer, not a boolean")
        return value

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any], *, strict: bool = True) -> EmbedOptions:
        """Build options from a mapping keyed by player option names.

        Unrelated keys are ignored. In lenient mode an invalid value is logged and
        treated as absent instead of raising.
        """
        payload = {key: values[key] for key in RECOGNISED_OPTIONS if key in values}
        if strict:
            try:
                return cls.model_validate(payload)
            except ValidationError as exc:
                raise InvalidOptionError(_describe(exc)) from exc

        accepted: dict[str, Any] = {}
        for key, value in payload.items():
            try:
                cls.model_validate({key: value})
            except ValidationError as exc:
                logger.warning("Ignoring invalid asciinema attribute: %s", _describe(exc))
                continue
            accepted[key] = value
        return cls.model_validate(accepted)

    def override(self, defaults: EmbedOptions) -> EmbedOptions:
        """Return these options with gaps filled from ``defaults``."""
        return defaults.model_copy(update=self.model_dump(exclude_none=True))

    def as_player_options(self) -> dict[str, Any]:
        """Return the option object passed to ``AsciinemaPlayer.create``."""
        return self.model_dump(by_alias=True, exclude_none=True)


def _describe(error: ValidationError) -> str:
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "options"
        messages.append(f"Option '{location}' {item['msg'].lower()}, got {item['input']!r}.")
    return " ".join(messages)


def validate_options(options: Mapping[str, Any], *, owner: str = "termcast") -> None:
    """Raise :class:`UnknownOptionError` listing every unrecognised key.

    Values are not checked here; :meth:`EmbedOptions.from_mapping` reports them.
    """
    try:
        EmbedOptions.model_validate(dict(options))
    except ValidationError as exc:
        unknown = [
            str(item["loc"][0]) for item in exc.errors() if item["type"] == "extra_forbidden"
        ]
        if unknown:
            raise UnknownOptionError(unknown, owner=owner) from exc


def resolve_options(attrs: Mapping[str, Any], defaults: EmbedOptions) -> dict[str, Any]:
    """Resolve block attributes over ``defaults`` into player options."""
    block = EmbedOptions.from_mapping(attrs, strict=False)
    return block.override(defaults).as_player_options()


__all__ = [
    "RECOGNISED_OPTIONS",
    "EmbedOptions",
    "resolve_options",
    "validate_options",
]
