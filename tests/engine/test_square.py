from __future__ import annotations

import pytest

from xchess.engine.square import Square, parse_square, square_name


def test_offset_and_equality() -> None:
    e2 = Square(1, 4)
    assert e2.offset(2, 0) == Square(3, 4)
    assert e2.offset(-5, -5) == Square(-4, -1)  # no bounds checking
    assert {Square(0, 0), Square(0, 0)} == {Square(0, 0)}


def test_names_round_trip() -> None:
    assert parse_square("a1") == Square(0, 0)
    assert parse_square("h8") == Square(7, 7)
    assert Square(3, 4).name == "e4"


@pytest.mark.parametrize("text", ["", "e", "i1", "a0", "a9", "e44"])
def test_parse_square_rejects_invalid(text: str) -> None:
    with pytest.raises(ValueError):
        parse_square(text)


def test_square_name_rejects_off_board() -> None:
    with pytest.raises(ValueError):
        square_name(Square(8, 0))
