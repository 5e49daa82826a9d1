from __future__ import annotations

import pytest

from xchess.engine.board import Board, STARTPOS_FEN
from xchess.engine.perft import divide, perft


def test_perft_startpos_depths_1_3() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    assert perft(b, 0) == 1
    assert perft(b, 1) == 20
    assert perft(b, 2) == 400
    assert perft(b, 3) == 8902


def test_perft_kiwipete_depth_2() -> None:
    fen = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
    b = Board.from_fen(fen)
    assert perft(b, 1) == 48
    assert perft(b, 2) == 2039


def test_perft_rook_endgame_depth_2() -> None:
    b = Board.from_fen("8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1")
    assert perft(b, 1) == 14
    assert perft(b, 2) == 191


def test_divide_sums_to_perft() -> None:
    b = Board.initial()
    counts = divide(b, 2)
    assert len(counts) == 20
    assert counts["e2e4"] == 20
    assert sum(counts.values()) == 400


def test_perft_rejects_negative_depth() -> None:
    with pytest.raises(ValueError):
        perft(Board.initial(), -1)
