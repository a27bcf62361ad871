import pytest

from aws_resources.utils.exceptions import ResourceIdFormatError
from aws_resources.utils.resource_id import create_resource_id, parse_resource_id


@pytest.mark.parametrize(
    "part_a, part_b, expected",
    [
        ("123456789012", "SECURITY", "123456789012/SECURITY"),
        ("", "BILLING", "/BILLING"),
    ],
)
def test_create_resource_id(part_a: str, part_b: str, expected: str) -> None:
    assert create_resource_id(part_a, part_b) == expected


@pytest.mark.parametrize(
    "resource_id, expected",
    [
        ("SECURITY", ("", "SECURITY")),
        ("/SECURITY", ("", "SECURITY")),
        ("123456789012/OPERATIONS", ("123456789012", "OPERATIONS")),
    ],
)
def test_parse_resource_id(resource_id: str, expected: tuple[str, str]) -> None:
    assert parse_resource_id(resource_id) == expected


@pytest.mark.parametrize("resource_id", ["a/b/c", "//", "1/2/3/4"])
def test_parse_resource_id_invalid(resource_id: str) -> None:
    with pytest.raises(ResourceIdFormatError) as e:
        parse_resource_id(resource_id)
    assert resource_id in str(e.value)
    assert isinstance(e.value, ValueError)


@pytest.mark.parametrize(
    "part_a, part_b",
    [("123456789012", "SECURITY"), ("", "BILLING"), ("acct", "x")],
)
def test_resource_id_parse_created(part_a: str, part_b: str) -> None:
    assert parse_resource_id(create_resource_id(part_a, part_b)) == (part_a, part_b)


def test_resource_id_custom_separator() -> None:
    assert create_resource_id("a", "b", separator=":") == "a:b"
    assert parse_resource_id("a:b", separator=":") == ("a", "b")
