import pytest

from response_builder.normalizer import normalize_data


def test_none_becomes_empty_object_when_always_object() -> None:
    result = normalize_data(None, always_object=True)
    assert result == {}
    assert isinstance(result, dict)


def test_none_stays_none_without_always_object() -> None:
    assert normalize_data(None, always_object=False) is None


@pytest.mark.parametrize("always_object", [True, False])
@pytest.mark.parametrize(
    "data",
    [[], [1, 2], {}, {"a": 1}, "text", 0, False],
    ids=["empty_list", "list", "empty_dict", "dict", "str", "zero", "false"],
)
def test_non_none_is_returned_unchanged(data: object, always_object: bool) -> None:
    assert normalize_data(data, always_object) is data
