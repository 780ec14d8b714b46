from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

# Regel-Parameter (Conway B3/S23)
TOO_FEW_LIMIT = 2
TOO_MANY_LIMIT = 3
PERFECT_AMOUNT = 3

# Textformat
LIVE_CELL_CHAR = "X"
DEAD_CELL_CHAR = "-"

NEIGH: Tuple[Tuple[int, int], ...] = tuple(
    (dx, dy)
    for dx in (-1, 0, 1)
    for dy in (-1, 0, 1)
    if (dx, dy) != (0, 0)
)


# Exceptions
class LifeError(Exception):
    """Allgemeiner Fehler der Simulation."""


class InvalidPattern(LifeError, ValueError):
    """Textmuster passt nicht zu rows x cols."""


class UnsupportedCellState(LifeError):
    """Zellzustand hat keine Textdarstellung."""


@dataclass(frozen=True, order=True)
class Coordinate:
    # Feldreihenfolge = Sortierung: erst x, dann y
    x: int
    y: int

    def neighbours(self) -> Iterator[Coordinate]:
        return (Coordinate(self.x + dx, self.y + dy) for dx, dy in NEIGH)

    def __iter__(self) -> Iterator[int]:
        yield self.x
        yield self.y


CoordinateLike = Union[Coordinate, Tuple[int, int]]


def as_coordinate(c: CoordinateLike) -> Coordinate:
    if isinstance(c, Coordinate):
        return c
    if isinstance(c, tuple) and len(c) == 2 and all(isinstance(v, int) for v in c):
        return Coordinate(*c)
    raise TypeError(f"Keine Koordinate: {c!r}")


class CellState(Enum):
    # tote Zellen werden nie gespeichert, daher nur ALIVE
    ALIVE = "alive"


@dataclass(frozen=True)
class Cell:
    state: CellState = CellState.ALIVE

    def render(self, live_char: str = LIVE_CELL_CHAR) -> str:
        if self.state is CellState.ALIVE:
            return live_char
        raise UnsupportedCellState(f"Keine Darstellung für Zustand {self.state!r}")

    def __str__(self) -> str:
        return self.render()


ALIVE_CELL = Cell(CellState.ALIVE)


class Generation:
    """
    Unveränderlicher Schnappschuss einer unendlichen Welt.
    Gespeichert werden nur lebende Zellen, sortiert nach Coordinate.
    tick() liefert immer eine neue Generation.
    """

    def __init__(
        self,
        *coordinates: CoordinateLike,
        live_char: str = LIVE_CELL_CHAR,
        dead_char: str = DEAD_CELL_CHAR,
    ):
        self._live_char = live_char
        self._dead_char = dead_char
        # Duplikate fallen über das Set weg
        self._coords: Tuple[Coordinate, ...] = tuple(sorted({as_coordinate(c) for c in coordinates}))
        self._cells: Mapping[Coordinate, Cell] = MappingProxyType({c: ALIVE_CELL for c in self._coords})

    @classmethod
    def from_coordinates(cls, coordinates: Iterable[CoordinateLike], **kwargs) -> Generation:
        return cls(*coordinates, **kwargs)

    # Konstruktion aus Text
    @classmethod
    def from_string(
        cls,
        pattern: str,
        rows: int,
        cols: int,
        live_char: str = LIVE_CELL_CHAR,
        dead_char: str = DEAD_CELL_CHAR,
        case_sensitive: bool = False,
    ) -> Generation:
        pattern = pattern.strip()
        if len(pattern) != rows * cols:
            raise InvalidPattern(
                f"Muster hat {len(pattern)} Zeichen, erwartet {rows} x {cols} = {rows * cols}"
            )

        if case_sensitive:
            def is_live(ch: str) -> bool:
                return ch == live_char
        else:
            live_folded = live_char.casefold()

            def is_live(ch: str) -> bool:
                return ch.casefold() == live_folded

        alive = [
            Coordinate(col, row)
            for row in range(rows)
            for col in range(cols)
            if is_live(pattern[row * cols + col])
        ]
        logger.debug("seeded %d live cells from %dx%d pattern", len(alive), rows, cols)
        return cls(*alive, live_char=live_char, dead_char=dead_char)

    @classmethod
    def from_lines(cls, lines: Sequence[str], **kwargs) -> Generation:
        rows = [line.strip() for line in lines]
        cols = len(rows[0]) if rows else 0
        for i, row in enumerate(rows):
            if len(row) != cols:
                raise InvalidPattern(f"Zeile {i} hat {len(row)} Zeichen, erwartet {cols}")
        return cls.from_string("".join(rows), len(rows), cols, **kwargs)

    # Eigenschaften, nur lesend
    @property
    def cells(self) -> Mapping[Coordinate, Cell]:
        return self._cells

    @property
    def coordinates(self) -> Tuple[Coordinate, ...]:
        return self._coords

    @property
    def total_alive(self) -> int:
        return len(self._coords)

    @property
    def live_char(self) -> str:
        return self._live_char

    @property
    def dead_char(self) -> str:
        return self._dead_char

    # Abfragen
    def is_alive(self, x: int, y: int) -> bool:
        return Coordinate(x, y) in self._cells

    def live_neighbours_count(self, x: int, y: int) -> int:
        return self._count(Coordinate(x, y))

    def _count(self, c: Coordinate) -> int:
        return sum((n in self._cells) for n in c.neighbours())

    def _counts(self, coords: List[Coordinate], workers: Optional[int]) -> List[int]:
        if not workers or workers < 2 or len(coords) < 2:
            return [self._count(c) for c in coords]

        # Zählungen sind unabhängig, jeder Worker liest denselben Schnappschuss
        size = -(-len(coords) // workers)
        chunks = [coords[i:i + size] for i in range(0, len(coords), size)]
        with ThreadPoolExecutor(max_workers=workers) as pool:
            parts = pool.map(lambda chunk: [self._count(c) for c in chunk], chunks)
            return [n for part in parts for n in part]

    # Kernlogik
    def tick(self, workers: Optional[int] = None) -> Generation:
        alive = list(self._coords)
        candidates = list({
            n
            for c in alive
            for n in c.neighbours()
            if n not in self._cells
        })

        counts = self._counts(alive + candidates, workers)
        survivors = [c for c, n in zip(alive, counts) if TOO_FEW_LIMIT <= n <= TOO_MANY_LIMIT]
        born = [c for c, n in zip(candidates, counts[len(alive):]) if n == PERFECT_AMOUNT]

        logger.debug(
            "tick: %d alive, %d candidates -> %d survive, %d born",
            len(alive), len(candidates), len(survivors), len(born),
        )
        return Generation(
            *survivors, *born,
            live_char=self._live_char,
            dead_char=self._dead_char,
        )

    # Anzeige
    def render(self, min_rows: int = 0, min_cols: int = 0) -> str:
        if not self._coords:
            return ""

        # Ausschnitt beginnt spätestens bei 0, ist mindestens min_rows x min_cols gross
        xs = [c.x for c in self._coords]
        ys = [c.y for c in self._coords]
        top, bottom = min(0, min(ys)), max(min_rows - 1, max(ys))
        left, right = min(0, min(xs)), max(min_cols - 1, max(xs))

        return "\n".join(
            "".join(self._char_at(Coordinate(x, y)) for x in range(left, right + 1))
            for y in range(top, bottom + 1)
        ).rstrip()

    def _char_at(self, c: Coordinate) -> str:
        cell = self._cells.get(c)
        return cell.render(self._live_char) if cell is not None else self._dead_char

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Generation({', '.join(f'({c.x}, {c.y})' for c in self._coords)})"

    def __len__(self) -> int:
        return len(self._coords)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self._coords)

    def __contains__(self, c: object) -> bool:
        if isinstance(c, tuple) and len(c) == 2:
            c = Coordinate(*c)
        return c in self._cells

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Generation):
            return NotImplemented
        return self._coords == other._coords

    def __hash__(self) -> int:
        return hash(self._coords)


# Generator, unendliche (oder begrenzte) Generationen
def generations(start: Generation, limit: Optional[int] = None, workers: Optional[int] = None) -> Iterator[Generation]:
    gen = start
    count = 0
    while limit is None or count < limit:
        yield gen
        gen = gen.tick(workers=workers)
        count += 1
