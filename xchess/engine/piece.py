from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Final


WHITE: Final = 0
BLACK: Final = 1


def opponent(player: int) -> int:
    return 1 - player


class PieceKind(Enum):
    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"


# Material values. The king carries a finite placeholder used only for the
# mobility bonus; mate is scored separately.
PIECE_VALUES: Final[Dict[PieceKind, float]] = {
    PieceKind.PAWN: 1.0,
    PieceKind.KNIGHT: 3.0,
    PieceKind.BISHOP: 3.0,
    PieceKind.ROOK: 5.0,
    PieceKind.QUEEN: 9.0,
    PieceKind.KING: 5.0,
}

DISPLAY_MESHES: Final[Dict[PieceKind, str]] = {
    PieceKind.PAWN: "Pawn.obj",
    PieceKind.KNIGHT: "Knight.obj",
    PieceKind.BISHOP: "Bishop.obj",
    PieceKind.ROOK: "Rook.obj",
    PieceKind.QUEEN: "Queen.obj",
    PieceKind.KING: "King.obj",
}

# Order in which a pawn reaching the last rank is expanded into moves.
PROMOTION_KINDS: Final = (PieceKind.QUEEN, PieceKind.ROOK, PieceKind.KNIGHT, PieceKind.BISHOP)


@dataclass(frozen=True)
class Piece:
    """State of one occupied square.

    Pieces are values: two pieces with the same kind, owner and flags are
    interchangeable. State changes always produce a new piece.

    Attributes:
        kind (PieceKind): Piece kind.
        owner (int): ``WHITE`` (0) or ``BLACK`` (1).
        can_double_step (bool): Pawn only; the pawn has not moved yet.
        just_double_stepped (bool): Pawn only; capturable en passant this ply.
        can_castle (bool): Rook/king only; the piece has never moved.
    """

    kind: PieceKind
    owner: int
    can_double_step: bool = False
    just_double_stepped: bool = False
    can_castle: bool = False

    @classmethod
    def pawn(cls, owner: int) -> "Piece":
        return cls(PieceKind.PAWN, owner, can_double_step=True)

    @classmethod
    def knight(cls, owner: int) -> "Piece":
        return cls(PieceKind.KNIGHT, owner)

    @classmethod
    def bishop(cls, owner: int) -> "Piece":
        return cls(PieceKind.BISHOP, owner)

    @classmethod
    def rook(cls, owner: int) -> "Piece":
        return cls(PieceKind.ROOK, owner, can_castle=True)

    @classmethod
    def queen(cls, owner: int) -> "Piece":
        return cls(PieceKind.QUEEN, owner)

    @classmethod
    def king(cls, owner: int) -> "Piece":
        return cls(PieceKind.KING, owner, can_castle=True)

    @classmethod
    def from_symbol(cls, ch: str) -> "Piece":
        """Build the default-state piece for a FEN symbol (``"P"``, ``"k"``, ...).

        Raises:
            ValueError: If ``ch`` is not a piece symbol.
        """
        try:
            kind = PieceKind(ch.lower())
        except ValueError as e:
            raise ValueError(f"invalid piece symbol: {ch!r}") from e
        owner = WHITE if ch.isupper() else BLACK
        return _DEFAULTS[kind](owner)

    def next_idle_state(self) -> "Piece":
        """State of this piece after a ply in which it did not move."""
        if self.just_double_stepped:
            return replace(self, just_double_stepped=False)
        return self

    def after_move(self) -> "Piece":
        """State of this piece after it made an ordinary move."""
        if self.kind is PieceKind.PAWN:
            return replace(self, can_double_step=False, just_double_stepped=False)
        if self.kind in (PieceKind.ROOK, PieceKind.KING):
            return replace(self, can_castle=False)
        return self

    def promoted(self, kind: PieceKind) -> "Piece":
        return Piece(kind, self.owner)

    @property
    def value(self) -> float:
        return PIECE_VALUES[self.kind]

    @property
    def symbol(self) -> str:
        return self.kind.value.upper() if self.owner == WHITE else self.kind.value

    @property
    def display_mesh(self) -> str:
        """Mesh resource used to render this piece."""
        return DISPLAY_MESHES[self.kind]

    @property
    def display_color(self) -> str:
        return "white" if self.owner == WHITE else "black"


_DEFAULTS = {
    PieceKind.PAWN: Piece.pawn,
    PieceKind.KNIGHT: Piece.knight,
    PieceKind.BISHOP: Piece.bishop,
    PieceKind.ROOK: Piece.rook,
    PieceKind.QUEEN: Piece.queen,
    PieceKind.KING: Piece.king,
}
