from __future__ import annotations

from pydantic import ValidationError
import pytest

import termcast
from termcast.exceptions import InvalidOptionError, UnknownOptionError
from termcast.options import EmbedOptions, resolve_options, validate_options


def test_block_attributes_fill_in_over_defaults() -> None:
    options = resolve_options({"cols": 80}, EmbedOptions(rows=24))

    assert options == {"rows": 24, "cols": 80}
    assert "autoPlay" not in options


def test_block_attribute_wins_over_default() -> None:
    defaults = EmbedOptions(rows=24, cols=80, autoPlay=True)

    options = resolve_options({"rows": "10", "autoPlay": "false"}, defaults)

    assert options == {"rows": 10, "cols": 80, "autoPlay": False}


def test_absent_values_are_omitted() -> None:
    assert resolve_options({}, EmbedOptions()) == {}


def test_invalid_block_value_is_dropped_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    options = resolve_options({"rows": "many"}, EmbedOptions(rows=24))

    assert options == {"rows": 24}
    assert "rows" in caplog.text


def test_strict_mapping_rejects_invalid_values() -> None:
    with pytest.raises(InvalidOptionError, match="cols"):
        EmbedOptions.from_mapping({"cols": 0})
    with pytest.raises(InvalidOptionError, match="autoPlay"):
        EmbedOptions.from_mapping({"autoPlay": "sometimes"})
    with pytest.raises(InvalidOptionError, match="rows"):
        EmbedOptions.from_mapping({"rows": True})


def test_validate_options_names_every_unknown_key() -> None:
    with pytest.raises(UnknownOptionError) as excinfo:
        validate_options({"rows": 1, "foo": 2, "bar": 3})

    assert excinfo.value.keys == ["bar", "foo"]
    assert str(excinfo.value) == "Unrecognized options specified for termcast: bar, foo"


def test_validate_options_singular_message() -> None:
    with pytest.raises(UnknownOptionError, match=r"^Unrecognized option specified for termcast: foo$"):
        validate_options({"foo": 1})


def test_setup_returns_defaults() -> None:
    assert termcast.setup({"rows": 24, "autoPlay": True}) == EmbedOptions(rows=24, autoPlay=True)
    assert termcast.setup() == EmbedOptions()


def test_setup_rejects_unknown_keys() -> None:
    with pytest.raises(UnknownOptionError, match="foo"):
        termcast.setup({"foo": True})


def test_field_name_is_not_an_option_key() -> None:
    with pytest.raises(UnknownOptionError, match="auto_play"):
        validate_options({"auto_play": True})


def test_validate_options_leaves_values_to_from_mapping() -> None:
    validate_options({"rows": "many"})

    with pytest.raises(InvalidOptionError, match="rows"):
        EmbedOptions.from_mapping({"rows": "many"})


def test_string_values_are_coerced() -> None:
    options = EmbedOptions.from_mapping({"rows": " 12 ", "cols": "", "autoPlay": "yes"})

    assert options.as_player_options() == {"rows": 12, "autoPlay": True}


def test_options_are_immutable() -> None:
    options = EmbedOptions(rows=3)

    with pytest.raises(ValidationError):
        options.rows = 4
