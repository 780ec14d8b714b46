from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import List, Optional, Sequence, TextIO, Tuple

from game_of_life import (
    DEAD_CELL_CHAR,
    LIVE_CELL_CHAR,
    Generation,
    InvalidPattern,
    generations,
)

logger = logging.getLogger(__name__)

SINGLE_STEP = "s"
CONSTANT = "c"
QUIT = "q"


# Eingabe: Zeilen bis zur ersten Leerzeile (oder EOF)
def read_pattern(stdin: TextIO) -> List[str]:
    lines: List[str] = []
    for raw in stdin:
        line = raw.strip()
        if not line:
            break
        lines.append(line)
    return lines


def prompt_generation(stdin: TextIO, stdout: TextIO, **seed_options) -> Optional[Tuple[Generation, int, int]]:
    """
    Fragt so lange nach einem Muster, bis es gültig ist.
    Liefert (Generation, rows, cols), leere Eingabe beendet (None).
    """
    while True:
        print("Enter pattern (one row per line, each row equal length, empty line to stop):", file=stdout)
        lines = read_pattern(stdin)
        if not lines:
            return None
        try:
            start = Generation.from_lines(lines, **seed_options)
        except InvalidPattern as exc:
            logger.error("invalid pattern: %s", exc)
            print(f"Invalid pattern: {exc}", file=stdout)
            continue
        return start, len(lines), len(lines[0])


def run(
    start: Generation,
    rows: int,
    cols: int,
    mode: str,
    stdin: TextIO,
    stdout: TextIO,
    limit: Optional[int] = None,
    delay: float = 0.0,
    workers: Optional[int] = None,
) -> int:
    if mode == SINGLE_STEP:
        print(f"Hit enter to update the game grid or {QUIT} to quit...", file=stdout)

    shown = 0
    for count, gen in enumerate(generations(start, limit=limit, workers=workers)):
        print(f"\nGeneration: {count}\n", file=stdout)
        print(gen.render(rows, cols), file=stdout)
        shown += 1

        if mode == SINGLE_STEP:
            answer = stdin.readline()
            if not answer or answer.strip().lower() == QUIT:
                break
        elif delay:
            time.sleep(delay)

    logger.info("shown %d generations", shown)
    return shown


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Conway's Game of Life on an unbounded grid")
    parser.add_argument("--mode", choices=[SINGLE_STEP, CONSTANT], default=SINGLE_STEP,
                        help="s = single step per input line, c = constant simulation")
    parser.add_argument("-n", "--generations", type=int, default=None,
                        help="number of generations to show (unbounded when omitted)")
    parser.add_argument("--delay", type=float, default=0.5,
                        help="seconds between generations in constant mode")
    parser.add_argument("--live-char", default=LIVE_CELL_CHAR)
    parser.add_argument("--dead-char", default=DEAD_CELL_CHAR)
    parser.add_argument("--case-sensitive", action="store_true")
    parser.add_argument("--workers", type=int, default=None,
                        help="threads for neighbour counting")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout

    print("Welcome to GameOfLife", file=stdout)
    seeded = prompt_generation(
        stdin,
        stdout,
        live_char=args.live_char,
        dead_char=args.dead_char,
        case_sensitive=args.case_sensitive,
    )
    if seeded is None:
        return 0
    start, rows, cols = seeded

    try:
        run(start, rows, cols, args.mode, stdin, stdout,
            limit=args.generations, delay=args.delay, workers=args.workers)
    except KeyboardInterrupt:
        logger.info("interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
