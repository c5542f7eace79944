from snippext.attributes import parse_attributes, split_header


def test_attr_001_parses_key_value_pairs() -> None:
    assert parse_attributes("[title=Demo, template = raw]") == {
        "title": "Demo",
        "template": "raw",
    }


def test_attr_002_drops_malformed_pieces() -> None:
    assert parse_attributes("[flag, key=value, a=b=c]") == {"key": "value", "a": "b=c"}


def test_attr_003_returns_empty_without_complete_group() -> None:
    assert parse_attributes("no brackets") == {}
    assert parse_attributes("[unterminated=yes") == {}


def test_attr_004_uses_first_bracket_group_only() -> None:
    assert parse_attributes("[a=1] [b=2]") == {"a": "1"}


def test_attr_005_split_header_separates_trailing_group() -> None:
    assert split_header(" demo [lang=py] ") == ("demo", {"lang": "py"})
    assert split_header("plain") == ("plain", {})
