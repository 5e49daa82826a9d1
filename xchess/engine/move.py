from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .piece import Piece
from .square import Square


@dataclass(frozen=True)
class SimpleMove:
    """A single piece moving from ``source`` to ``destination``.

    Attributes:
        source (Square): Square the piece leaves.
        destination (Square): Square the piece lands on (captures included).
        resulting_piece (Piece): State of the piece on ``destination``
            afterwards; differs from the moving piece for promotions and
            flag changes.
    """

    source: Square
    destination: Square
    resulting_piece: Piece

    def to_uci(self) -> str:
        """Serialize the move into long algebraic form without promotion suffix.

        ``Board.uci`` adds the suffix since only the board knows whether the
        moving piece was a pawn.
        """
        return self.source.name + self.destination.name


@dataclass(frozen=True)
class EnPassantMove(SimpleMove):
    """A pawn capture where the captured pawn sits beside the source square."""

    captured: Square


@dataclass(frozen=True)
class CastleMove:
    """King and rook moving together."""

    king_source: Square
    king_destination: Square
    rook_source: Square
    rook_destination: Square
    resulting_king: Piece
    resulting_rook: Piece

    def to_uci(self) -> str:
        return self.king_source.name + self.king_destination.name


Move = Union[SimpleMove, EnPassantMove, CastleMove]
