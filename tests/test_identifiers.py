import pytest

from core.domain.identifiers import InvalidIdentifier, compact_uuid, parse_identifier


def test_plain_name():
    parsed = parse_identifier("  Notch ")
    assert parsed.handle == "Notch"
    assert parsed.name == "Notch"
    assert parsed.discriminator is None
    assert parsed.battletag() == "Notch"


@pytest.mark.parametrize("raw", ["Cats#11481", "Cats-11481"])
def test_battletag_forms_normalize_to_the_same_structure(raw):
    parsed = parse_identifier(raw)
    assert parsed.name == "Cats"
    assert parsed.discriminator == "11481"
    assert parsed.battletag("-") == "Cats-11481"
    assert parsed.battletag("#") == "Cats#11481"
    assert parsed.handle == raw


def test_dash_with_non_numeric_suffix_is_part_of_the_name():
    parsed = parse_identifier("some-vanity")
    assert parsed.name == "some-vanity"
    assert parsed.discriminator is None


def test_trailing_hash_keeps_the_name():
    parsed = parse_identifier("Cats#")
    assert parsed.name == "Cats"
    assert parsed.discriminator is None


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_empty_identifier_is_rejected(raw):
    with pytest.raises(InvalidIdentifier):
        parse_identifier(raw)


def test_compact_uuid():
    assert compact_uuid("069A79F4-44E9-4726-A5BE-FCA90E38AAF5") == "069a79f444e94726a5befca90e38aaf5"
    assert compact_uuid("069a79f444e94726a5befca90e38aaf5") == "069a79f444e94726a5befca90e38aaf5"
    assert compact_uuid("Notch") is None
