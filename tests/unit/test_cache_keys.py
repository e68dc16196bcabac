"""Tests for cache key builders."""

import pytest

from recordstore.infrastructure.cache.keys import is_record_id, record_key


def test_record_key_format() -> None:
    assert record_key(1) == "record:info:1"
    assert record_key(9000000001) == "record:info:9000000001"


@pytest.mark.parametrize("bad", [0, -5])
def test_record_key_rejects_non_positive(bad: int) -> None:
    with pytest.raises(ValueError, match="must be positive"):
        record_key(bad)


@pytest.mark.parametrize("bad", ["1", 1.0, True, None])
def test_record_key_rejects_non_int(bad) -> None:
    with pytest.raises(ValueError, match="must be int"):
        record_key(bad)


@pytest.mark.parametrize(
    ("value", "expected"),
    [(1, True), (42, True), (0, False), (-1, False), (True, False), ("1", False), (1.0, False), (None, False)],
)
def test_is_record_id(value, expected: bool) -> None:
    assert is_record_id(value) is expected
