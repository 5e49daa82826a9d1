"""Per-piece threat and move generation.

Generation is pseudo-legal: moves that leave the mover's own king attacked
are filtered by ``Board.moves``. Results are ordered lists; the order is the
tie-break order used by the search.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, List, Tuple

from .move import CastleMove, EnPassantMove, Move, SimpleMove
from .piece import PROMOTION_KINDS, WHITE, Piece, PieceKind, opponent
from .square import Square

if TYPE_CHECKING:
    from .board import Board


KNIGHT_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
)
KING_OFFSETS: Tuple[Tuple[int, int], ...] = tuple(
    (dr, df) for dr in (-1, 0, 1) for df in (-1, 0, 1) if dr or df
)
ROOK_RAYS: Tuple[Tuple[int, int], ...] = ((1, 0), (0, -1), (-1, 0), (0, 1))
BISHOP_RAYS: Tuple[Tuple[int, int], ...] = ((-1, -1), (-1, 1), (1, -1), (1, 1))
QUEEN_RAYS: Tuple[Tuple[int, int], ...] = KING_OFFSETS


def pawn_direction(owner: int) -> int:
    return 1 if owner == WHITE else -1


def ray_threats(board: "Board", position: Square, dr: int, df: int) -> List[Square]:
    """Walk from ``position`` along (dr, df) until the edge or the first occupied square.

    The blocking square is included whoever owns it.
    """
    out: List[Square] = []
    pos = position.offset(dr, df)
    while board.in_board(pos):
        out.append(pos)
        if board.piece_at(pos) is not None:
            break
        pos = pos.offset(dr, df)
    return out


def threats(board: "Board", position: Square, piece: Piece) -> List[Square]:
    """Squares ``piece`` on ``position`` would capture on.

    Knight, king and pawn results are not filtered by board bounds.
    """
    kind = piece.kind
    if kind is PieceKind.PAWN:
        d = pawn_direction(piece.owner)
        return [position.offset(d, 1), position.offset(d, -1)]
    if kind is PieceKind.KNIGHT:
        return [position.offset(dr, df) for dr, df in KNIGHT_OFFSETS]
    if kind is PieceKind.KING:
        return [position.offset(dr, df) for dr, df in KING_OFFSETS]
    if kind is PieceKind.ROOK:
        rays = ROOK_RAYS
    elif kind is PieceKind.BISHOP:
        rays = BISHOP_RAYS
    elif kind is PieceKind.QUEEN:
        rays = QUEEN_RAYS
    else:
        raise ValueError(f"unknown piece kind: {kind!r}")
    out: List[Square] = []
    for dr, df in rays:
        out.extend(ray_threats(board, position, dr, df))
    return out


def can_move(board: "Board", piece: Piece, target: Square) -> bool:
    """True if ``target`` exists and is empty or holds an enemy piece."""
    if not board.in_board(target):
        return False
    other = board.piece_at(target)
    return other is None or other.owner != piece.owner


def pseudo_moves(board: "Board", position: Square, piece: Piece) -> List[Move]:
    """Moves ``piece`` on ``position`` could make, ignoring king safety."""
    if piece.kind is PieceKind.PAWN:
        return _pawn_moves(board, position, piece)
    moved = piece.after_move()
    moves: List[Move] = [
        SimpleMove(position, target, moved)
        for target in threats(board, position, piece)
        if can_move(board, piece, target)
    ]
    if piece.kind is PieceKind.KING:
        moves.extend(_castle_moves(board, position, piece))
    return moves


def _pawn_moves(board: "Board", position: Square, piece: Piece) -> List[Move]:
    d = pawn_direction(piece.owner)
    last_rank = board.ranks - 1 if piece.owner == WHITE else 0
    moved = piece.after_move()
    moves: List[Move] = []

    def add(destination: Square, state: Piece) -> None:
        if destination.rank == last_rank:
            for kind in PROMOTION_KINDS:
                moves.append(SimpleMove(position, destination, piece.promoted(kind)))
        else:
            moves.append(SimpleMove(position, destination, state))

    # Push
    front = position.offset(d, 0)
    front_clear = board.in_board(front) and board.piece_at(front) is None
    if front_clear:
        add(front, moved)

    # Captures, including en passant onto an empty diagonal
    for target in threats(board, position, piece):
        if not board.in_board(target):
            continue
        occupant = board.piece_at(target)
        if occupant is not None:
            if occupant.owner != piece.owner:
                add(target, moved)
            continue
        beside = target.offset(-d, 0)
        victim = board.piece_at(beside)
        if (
            victim is not None
            and victim.kind is PieceKind.PAWN
            and victim.owner != piece.owner
            and victim.just_double_stepped
        ):
            moves.append(EnPassantMove(position, target, moved, beside))

    # Double step
    if piece.can_double_step and front_clear:
        jump = position.offset(2 * d, 0)
        if board.in_board(jump) and board.piece_at(jump) is None:
            add(jump, replace(moved, just_double_stepped=True))
    return moves


def _castle_moves(board: "Board", position: Square, king: Piece) -> List[Move]:
    if not king.can_castle:
        return []
    enemy = opponent(king.owner)
    if board.has_threat(enemy, position):
        return []
    moves: List[Move] = []
    for df in (1, -1):
        transit = position.offset(0, df)
        if not board.in_board(transit) or board.piece_at(transit) is not None:
            continue
        if board.has_threat(enemy, transit):
            continue
        pos = transit.offset(0, df)
        while board.in_board(pos):
            other = board.piece_at(pos)
            if other is None:
                pos = pos.offset(0, df)
                continue
            if other.kind is PieceKind.ROOK and other.owner == king.owner and other.can_castle:
                moves.append(
                    CastleMove(
                        king_source=position,
                        king_destination=position.offset(0, 2 * df),
                        rook_source=pos,
                        rook_destination=transit,
                        resulting_king=king.after_move(),
                        resulting_rook=other.after_move(),
                    )
                )
            break
    return moves
