#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import logging
import os
import sys

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from xchess.engine.board import Board, STARTPOS_FEN
from xchess.engine.game import LocalGame
from xchess.search.service import SearchService


def main() -> None:
    parser = argparse.ArgumentParser(description="Let the search play both sides")
    parser.add_argument("--fen", type=str, default=STARTPOS_FEN, help="Starting FEN")
    parser.add_argument("--budget", type=int, default=50, help="Expansions per move")
    parser.add_argument("--plies", type=int, default=20, help="Maximum plies to play")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    game = LocalGame(Board.from_fen(args.fen))
    service = SearchService()
    for _ in range(args.plies):
        res = service.search(game.board, budget=args.budget)
        if res.best_move is None:
            break
        print(f"{game.board.uci(res.best_move)} score={res.score} nodes={res.nodes}")
        game.move(res.best_move)
    print(game.board.render())
    if game.checkmate():
        print("checkmate")
    elif game.stalemate():
        print("stalemate")


if __name__ == "__main__":
    main()
