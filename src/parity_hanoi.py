import argparse
import logging
import sys
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from inspect_ai.util import Store, StoreModel
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_DISKS = 3
SLOW_DISKS = 25

SOURCE, AUXILIARY, DESTINATION = 0, 1, 2

# (source, dest) pairs in the order they are attempted. A candidate is only
# tried when its source peg is not the peg touched by the previous move.
EVEN_PRIORITY: Tuple[Tuple[int, int], ...] = ((0, 1), (0, 2), (1, 2))
ODD_PRIORITY: Tuple[Tuple[int, int], ...] = ((0, 2), (0, 1), (1, 2))
FALLBACK_PRIORITY: Tuple[Tuple[int, int], ...] = ((2, 0), (2, 1), (1, 0))

Observer = Callable[["Towers", int, int], None]


def render_pegs(pegs: Sequence[Sequence[int]]) -> str:
    """Return formatted state string, each disk tagged o (odd) or e (even).

    Returns:
        String representation in format:
        "peg 0: 3o (bottom), 2e, 1o (top)\npeg 1: (empty)\npeg 2: (empty)"
    """
    lines = []

    for peg_idx, peg_disks in enumerate(pegs):
        disks = [f"{disk}{'o' if disk % 2 else 'e'}" for disk in peg_disks]
        if not disks:
            lines.append(f"peg {peg_idx}: (empty)")
        elif len(disks) == 1:
            lines.append(f"peg {peg_idx}: {disks[0]}")
        else:
            disk_parts = [f"{disks[0]} (bottom)"]
            disk_parts.extend(disks[1:-1])
            disk_parts.append(f"{disks[-1]} (top)")
            lines.append(f"peg {peg_idx}: {', '.join(disk_parts)}")

    return "\n".join(lines)


@dataclass
class Towers:
    """Working copy of the pegs the solver mutates move by move.

    Attributes:
        pegs: Three bottom-first lists, the top disk at the end
        previous: Peg touched by the last successful transfer
        moves: Number of successful transfers so far
    """

    pegs: List[List[int]]
    previous: int = DESTINATION
    moves: int = 0

    def get_state(self) -> str:
        return render_pegs(self.pegs)

    def can_move(self, source: int, dest: int) -> Tuple[bool, str]:
        """Check if a transfer is legal without executing it.

        A disk may only land on an empty peg, or on a larger disk of the
        opposite parity.

        Args:
            source: Source peg index (0, 1, or 2)
            dest: Destination peg index (0, 1, or 2)

        Returns:
            Tuple of (is_valid, error_message)
            - is_valid: True if the transfer is legal, False otherwise
            - error_message: Empty string if valid, reason if invalid
        """
        error = self._validate_pegs(source, dest) or self._validate_placement(source, dest)

        return (False, error) if error else (True, "")

    def _validate_pegs(self, source: int, dest: int) -> Optional[str]:
        for peg in (source, dest):
            if not isinstance(peg, int) or peg < 0 or peg >= 3:
                return f"Invalid peg index: {peg}. Must be 0, 1, or 2."
        if source == dest:
            return f"Cannot move from peg {source} to same peg"

    def _validate_placement(self, source: int, dest: int) -> Optional[str]:
        if not self.pegs[source]:
            return f"Peg {source} is empty"

        disk = self.pegs[source][-1]
        if not self.pegs[dest]:
            return None
        dest_top = self.pegs[dest][-1]
        if disk % 2 == dest_top % 2:
            return f"Cannot place disk {disk} on disk {dest_top}: disks of equal parity"
        if disk > dest_top:
            return (
                f"Cannot place disk {disk} on disk {dest_top}: "
                f"larger disk cannot be placed on smaller disk"
            )

    def move(self, source: int, dest: int) -> bool:
        """Move the top disk of `source` onto `dest`; returns False and leaves
        the pegs untouched when the transfer is illegal."""
        if source == dest or not (0 <= source < 3 and 0 <= dest < 3):
            return False
        from_peg = self.pegs[source]
        to_peg = self.pegs[dest]
        if not from_peg:
            return False
        disk = from_peg[-1]
        if to_peg and (disk % 2 == to_peg[-1] % 2 or disk > to_peg[-1]):
            return False
        to_peg.append(from_peg.pop())
        return True

    def _transfer(self, source: int, dest: int, observer: Optional[Observer]) -> bool:
        if self.previous == source or not self.move(source, dest):
            return False
        self.moves += 1
        self.previous = dest
        if observer is not None:
            observer(self, source, dest)
        return True

    def _attempt_first(self, priority: Sequence[Tuple[int, int]], observer: Optional[Observer]) -> bool:
        for source, dest in priority:
            if self._transfer(source, dest, observer):
                return True
        return False

    def step(self, priority: Sequence[Tuple[int, int]], observer: Optional[Observer] = None) -> None:
        # Restart from the top of the priority list after every success until
        # no candidate can move.
        while self._attempt_first(priority, observer):
            pass

    def solve(self, n_disks: int, priority: Sequence[Tuple[int, int]], observer: Optional[Observer] = None) -> None:
        # Each round exhausts the stepper, then tries at most one fallback
        # transfer out of peg 2 or back to peg 0.
        target = self.pegs[DESTINATION]
        while len(target) != n_disks:
            self.step(priority, observer)
            self._attempt_first(FALLBACK_PRIORITY, observer)


class SolveReport(BaseModel):
    """Outcome of a full solve.

    Attributes:
        n_disks: Number of disks that were moved
        moves: Total number of successful transfers
        elapsed_us: Wall-clock duration of the solve in microseconds
    """

    n_disks: int
    moves: int
    elapsed_us: int

    def summary(self) -> str:
        return f"{self.n_disks} disks done in {self.moves} moves\nIt took {self.elapsed_us} us"


class ParityHanoi(StoreModel):
    n_disks: int = Field(default=DEFAULT_DISKS)
    pegs: List[List[int]] = Field(default_factory=lambda: [[3, 2, 1], [], []])
    previous: int = Field(default=DESTINATION)
    moves: int = Field(default=0)
    elapsed_us: int = Field(default=0)

    @classmethod
    def create(cls, n_disks: int = DEFAULT_DISKS) -> "ParityHanoi":
        """Build a puzzle backed by its own store, outside of any eval sample."""
        puzzle = cls(store=Store())
        puzzle.reset(n_disks)
        return puzzle

    def reset(self, n_disks: Optional[int] = None) -> None:
        if n_disks is None:
            n_disks = self.n_disks
        if n_disks < 1:
            raise ValueError(f"Number of disks must be at least 1, got {n_disks}")

        self.n_disks = n_disks
        self.pegs = [
            list(range(n_disks, 0, -1)),  # Peg 0: all disks (largest to smallest)
            [],  # Peg 1: empty
            [],  # Peg 2: empty
        ]
        self.previous = DESTINATION
        self.moves = 0
        self.elapsed_us = 0
        logger.debug(f"Reset puzzle with {n_disks} disks")

    def _load(self) -> Towers:
        return Towers(pegs=[list(peg) for peg in self.pegs], previous=self.previous, moves=self.moves)

    def _save(self, towers: Towers) -> None:
        self.pegs = towers.pegs
        self.previous = towers.previous
        self.moves = towers.moves

    def get_state(self) -> str:
        return render_pegs(self.pegs)

    def get_top_disk(self, peg: int) -> Optional[int]:
        if not self.pegs[peg]:
            return None

        return self.pegs[peg][-1]

    def can_move(self, source: int, dest: int) -> Tuple[bool, str]:
        return self._load().can_move(source, dest)

    def move(self, source: int, dest: int) -> bool:
        towers = self._load()
        if not towers.move(source, dest):
            return False
        self._save(towers)
        return True

    def step_even(self, observer: Optional[Observer] = None) -> None:
        towers = self._load()
        towers.step(EVEN_PRIORITY, observer)
        self._save(towers)

    def step_odd(self, observer: Optional[Observer] = None) -> None:
        towers = self._load()
        towers.step(ODD_PRIORITY, observer)
        self._save(towers)

    def solve(self, observer: Optional[Observer] = None) -> SolveReport:
        """Run the parity-directed solver until every disk sits on peg 2.

        The stepper variant is chosen once from the parity of the disk count.
        The pegs are copied out of the store, solved in place, and written
        back once the tower is complete.

        Args:
            observer: Optional callable invoked as observer(towers, source, dest)
                after each successful transfer

        Returns:
            SolveReport with the move count and elapsed time
        """
        n_disks = self.n_disks
        priority = ODD_PRIORITY if n_disks % 2 else EVEN_PRIORITY
        towers = self._load()

        start = time.perf_counter()
        towers.solve(n_disks, priority, observer)
        elapsed_us = int((time.perf_counter() - start) * 1_000_000)

        self._save(towers)
        self.elapsed_us = elapsed_us
        logger.debug(f"Solved {n_disks} disks in {towers.moves} moves ({elapsed_us} us)")
        return SolveReport(n_disks=n_disks, moves=towers.moves, elapsed_us=elapsed_us)

    def is_solved(self) -> bool:
        return (
            len(self.pegs[SOURCE]) == 0
            and len(self.pegs[AUXILIARY]) == 0
            and self.pegs[DESTINATION] == list(range(self.n_disks, 0, -1))
        )

    def __str__(self) -> str:
        return f"ParityHanoi({self.n_disks} disks):\n{self.get_state()}"


def log_pegs(towers: Towers, source: int, dest: int) -> None:
    logger.debug(f"Move {towers.moves}: peg {source} -> peg {dest}\n{towers.get_state()}")


def disks_count(value: Optional[int]) -> int:
    """Normalise the requested disk count, printing advisories along the way."""
    if value is None:
        print(
            f"\nNeed to provide a number of disks on program input!\n"
            f"For now taking default {DEFAULT_DISKS} disks\n"
        )
        return DEFAULT_DISKS

    count = abs(value)
    if count < 1:
        print(
            f"\nDisks count {count} does not sound correct. You need at least one disk.\n"
            f"Will keep default {DEFAULT_DISKS} disks.\n"
        )
        return DEFAULT_DISKS

    if count > SLOW_DISKS:
        print("\nLarge number of disks may take long to move. Working on it, be patient....\n")

    return count


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Move a tower of disks where a disk may only rest on a larger disk of opposite parity."
    )
    parser.add_argument("disks", nargs="?", type=int, default=None, help=f"Number of disks (default: {DEFAULT_DISKS})")
    parser.add_argument("--debug", action="store_true", help="Log the pegs after every move")
    args = parser.parse_args(argv)

    observer = None
    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(message)s", stream=sys.stdout)
        observer = log_pegs

    puzzle = ParityHanoi.create(disks_count(args.disks))
    report = puzzle.solve(observer)
    print(report.summary())

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
