from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Square:
    """A (rank, file) coordinate on the board.

    Ranks and files are 0-based from white's perspective, so ``a1`` is
    ``Square(0, 0)`` and ``h8`` is ``Square(7, 7)``. No bounds are enforced
    here; the board decides which squares exist.
    """

    rank: int
    file: int

    def offset(self, dr: int, df: int) -> "Square":
        return Square(self.rank + dr, self.file + df)

    @property
    def name(self) -> str:
        return square_name(self)


def parse_square(s: str) -> Square:
    """Convert algebraic notation into a square.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        Square: Parsed square.

    Raises:
        ValueError: If ``s`` is not a valid square on an 8x8 board.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    return Square(int(s[1]) - 1, ord(s[0]) - ord("a"))


def square_name(square: Square) -> str:
    """Convert a square into algebraic notation.

    Raises:
        ValueError: If the square lies outside an 8x8 board.
    """
    if not (0 <= square.rank < 8 and 0 <= square.file < 8):
        raise ValueError(f"invalid square: {square!r}")
    return chr(ord("a") + square.file) + str(square.rank + 1)
