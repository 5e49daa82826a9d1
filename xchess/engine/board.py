from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, List, Optional, Tuple

from .move import CastleMove, EnPassantMove, Move, SimpleMove
from .movegen import pawn_direction, pseudo_moves, threats
from .piece import BLACK, WHITE, Piece, PieceKind, opponent
from .square import Square, parse_square


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

Grid = Tuple[Tuple[Optional[Piece], ...], ...]

# Corner squares tied to each FEN castling right
CASTLING_CORNERS = {
    "K": Square(0, 7),
    "Q": Square(0, 0),
    "k": Square(7, 7),
    "q": Square(7, 0),
}


@dataclass(frozen=True)
class Board:
    """Immutable piece placement plus side to move.

    Notes:
    - ``grid[rank][file]`` holds an optional piece; rank 0 is white's back rank.
    - Boards never change after construction; ``get_next`` and the
      ``with_*`` helpers return new boards.
    """

    grid: Grid
    player_to_move: int = WHITE

    @classmethod
    def empty(cls, ranks: int = 8, files: int = 8, player_to_move: int = WHITE) -> "Board":
        return cls(tuple((None,) * files for _ in range(ranks)), player_to_move)

    @classmethod
    def initial(cls) -> "Board":
        """Create a board initialized to the standard chess starting position."""
        back = (
            PieceKind.ROOK,
            PieceKind.KNIGHT,
            PieceKind.BISHOP,
            PieceKind.QUEEN,
            PieceKind.KING,
            PieceKind.BISHOP,
            PieceKind.KNIGHT,
            PieceKind.ROOK,
        )
        white_back = tuple(Piece.from_symbol(k.value.upper()) for k in back)
        black_back = tuple(Piece.from_symbol(k.value) for k in back)
        empty = (None,) * 8
        grid = (
            white_back,
            (Piece.pawn(WHITE),) * 8,
            empty,
            empty,
            empty,
            empty,
            (Piece.pawn(BLACK),) * 8,
            black_back,
        )
        return cls(grid, WHITE)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """Create a board from a Forsyth–Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string describing the position to load.

        Returns:
            Board: Board with piece flags derived from the FEN fields.

        Raises:
            ValueError: If ``fen`` is empty, has the wrong number of fields, or
                contains invalid piece placement, castling rights, en passant
                square, or move counters.

        Notes:
            Castling rights set ``can_castle`` on the king and on the rook in
            the matching corner. Pawns on their start rank may double step. The
            en passant target marks the pawn in front of it as having just
            double-stepped. Move counters are validated but not stored.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")
        if castling != "-":
            for ch in castling:
                if ch not in "KQkq":
                    raise ValueError("invalid castling rights")
        else:
            castling = ""

        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        rows: List[List[Optional[Piece]]] = []
        for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
            row: List[Optional[Piece]] = []
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    row.extend([None] * n)
                else:
                    if len(row) >= 8:
                        raise ValueError("too many squares in FEN rank")
                    piece = Piece.from_symbol(ch)
                    row.append(_fen_piece_state(piece, Square(rank_idx, len(row)), castling))
            if len(row) != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")
            rows.append(row)

        if ep != "-":
            try:
                target = parse_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            if target.rank not in (2, 5):
                raise ValueError("invalid en passant square rank")
            pawn_sq = target.offset(1, 0) if target.rank == 2 else target.offset(-1, 0)
            pawn = rows[pawn_sq.rank][pawn_sq.file]
            if pawn is None or pawn.kind is not PieceKind.PAWN:
                raise ValueError("en passant square has no pawn in front of it")
            rows[pawn_sq.rank][pawn_sq.file] = replace(pawn, just_double_stepped=True)

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise ValueError("invalid move counters in FEN")

        return cls(tuple(tuple(row) for row in rows), WHITE if stm == "w" else BLACK)

    def to_fen(self) -> str:
        """Serialize the position into FEN; move counters are written as ``0 1``."""
        ranks_str: List[str] = []
        for rank_idx in range(self.ranks - 1, -1, -1):
            run = 0
            row = []
            for piece in self.grid[rank_idx]:
                if piece is None:
                    run += 1
                    continue
                if run > 0:
                    row.append(str(run))
                    run = 0
                row.append(piece.symbol)
            if run > 0:
                row.append(str(run))
            ranks_str.append("".join(row))
        placement = "/".join(ranks_str)
        stm = "w" if self.player_to_move == WHITE else "b"
        castling = self._castling_rights() or "-"
        ep = "-"
        for square, piece in self.pieces():
            if piece.kind is PieceKind.PAWN and piece.just_double_stepped:
                ep = square.offset(-pawn_direction(piece.owner), 0).name
        return f"{placement} {stm} {castling} {ep} 0 1"

    def _castling_rights(self) -> str:
        rights = ""
        for player, short, long in ((WHITE, "K", "Q"), (BLACK, "k", "q")):
            king_sq = self.king_square(player)
            if king_sq is None or not self.piece_at(king_sq).can_castle:  # type: ignore[union-attr]
                continue
            files = [
                f
                for f, p in enumerate(self.grid[king_sq.rank])
                if p is not None and p.kind is PieceKind.ROOK and p.owner == player and p.can_castle
            ]
            if any(f > king_sq.file for f in files):
                rights += short
            if any(f < king_sq.file for f in files):
                rights += long
        return rights

    # --- Geometry and lookup ---
    @property
    def ranks(self) -> int:
        return len(self.grid)

    @property
    def files(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    def in_board(self, square: Square) -> bool:
        return 0 <= square.rank < self.ranks and 0 <= square.file < self.files

    def piece_at(self, square: Square) -> Optional[Piece]:
        if not self.in_board(square):
            raise IndexError(f"square outside the board: {square!r}")
        return self.grid[square.rank][square.file]

    def pieces(self) -> Iterator[Tuple[Square, Piece]]:
        """Occupied squares in rank-major order (a1, b1, ..., h8)."""
        for r, row in enumerate(self.grid):
            for f, piece in enumerate(row):
                if piece is not None:
                    yield Square(r, f), piece

    def with_piece(self, square: Square, piece: Optional[Piece]) -> "Board":
        rows = [list(row) for row in self.grid]
        rows[square.rank][square.file] = piece
        return Board(tuple(tuple(row) for row in rows), self.player_to_move)

    def with_player(self, player: int) -> "Board":
        return Board(self.grid, player)

    # --- Attacks ---
    def has_threat(self, player: int, position: Square) -> bool:
        """True if any piece of ``player`` threatens ``position``."""
        for square, piece in self.pieces():
            if piece.owner == player and position in threats(self, square, piece):
                return True
        return False

    def king_square(self, player: int) -> Optional[Square]:
        for square, piece in self.pieces():
            if piece.kind is PieceKind.KING and piece.owner == player:
                return square
        return None

    @property
    def check(self) -> bool:
        """True if the side to move's king is attacked."""
        return self._king_attacked(self.player_to_move)

    def _king_attacked(self, player: int) -> bool:
        king = self.king_square(player)
        return king is not None and self.has_threat(opponent(player), king)

    # --- Moves ---
    def moves(self) -> List[Tuple[Move, "Board"]]:
        """Legal moves paired with the board each one produces.

        Returns:
            List[Tuple[Move, Board]]: Ordered by source square (rank-major),
                then by each piece's own generation order.
        """
        return list(self._iter_moves())

    def has_legal_moves(self) -> bool:
        return next(self._iter_moves(), None) is not None

    def _iter_moves(self) -> Iterator[Tuple[Move, "Board"]]:
        mover = self.player_to_move
        for square, piece in self.pieces():
            if piece.owner != mover:
                continue
            for move in pseudo_moves(self, square, piece):
                nxt = self.get_next(move)
                if not nxt._king_attacked(mover):
                    yield move, nxt

    def get_next(self, move: Move) -> "Board":
        """Board after ``move`` (assumed legal) is played.

        Every piece first advances to its idle state, which closes any en
        passant window, then the move's own squares are rewritten.
        """
        rows = [
            [p.next_idle_state() if p is not None else None for p in row] for row in self.grid
        ]
        if isinstance(move, CastleMove):
            rows[move.king_source.rank][move.king_source.file] = None
            rows[move.rook_source.rank][move.rook_source.file] = None
            rows[move.king_destination.rank][move.king_destination.file] = move.resulting_king
            rows[move.rook_destination.rank][move.rook_destination.file] = move.resulting_rook
        else:
            rows[move.source.rank][move.source.file] = None
            rows[move.destination.rank][move.destination.file] = move.resulting_piece
            if isinstance(move, EnPassantMove):
                rows[move.captured.rank][move.captured.file] = None
        return Board(tuple(tuple(row) for row in rows), opponent(self.player_to_move))

    def uci(self, move: Move) -> str:
        """Long algebraic form of ``move``, with a promotion suffix when a pawn changes kind."""
        text = move.to_uci()
        if isinstance(move, SimpleMove):
            mover = self.piece_at(move.source)
            if (
                mover is not None
                and mover.kind is PieceKind.PAWN
                and move.resulting_piece.kind is not PieceKind.PAWN
            ):
                text += move.resulting_piece.kind.value
        return text

    def find_move(self, uci: str) -> Optional[Tuple[Move, "Board"]]:
        """Legal move whose long algebraic form is ``uci``, if any."""
        for move, nxt in self._iter_moves():
            if self.uci(move) == uci:
                return move, nxt
        return None

    def render(self) -> str:
        lines = []
        for rank_idx in range(self.ranks - 1, -1, -1):
            cells = [p.symbol if p is not None else "." for p in self.grid[rank_idx]]
            lines.append(f"{rank_idx + 1} " + " ".join(cells))
        lines.append("  " + " ".join(chr(ord("a") + f) for f in range(self.files)))
        return "\n".join(lines)


def _fen_piece_state(piece: Piece, square: Square, castling: str) -> Piece:
    if piece.kind is PieceKind.PAWN:
        start_rank = 1 if piece.owner == WHITE else 6
        return replace(piece, can_double_step=square.rank == start_rank)
    if piece.kind is PieceKind.KING:
        rights = "KQ" if piece.owner == WHITE else "kq"
        home = Square(0, 4) if piece.owner == WHITE else Square(7, 4)
        allowed = square == home and any(ch in castling for ch in rights)
        return replace(piece, can_castle=allowed)
    if piece.kind is PieceKind.ROOK:
        allowed = any(
            CASTLING_CORNERS[ch] == square and ch.isupper() == (piece.owner == WHITE)
            for ch in castling
        )
        return replace(piece, can_castle=allowed)
    return piece
