from inspect_ai import Task, task
from inspect_ai.dataset import MemoryDataset, Sample
from inspect_ai.model import ModelOutput
from inspect_ai.scorer import accuracy, CORRECT, INCORRECT, mean, Scorer, scorer, Score, Target
from inspect_ai.solver import Generate, Solver, solver, TaskState
from inspect_ai.util import store_as
from parity_hanoi import ParityHanoi

input_template = "Move {n_disks} disks from peg 0 to peg 2 under the parity rule."


@solver
def run_parity_solver() -> Solver:

    async def solve(state: TaskState, generate: Generate) -> TaskState:
        puzzle = store_as(ParityHanoi)
        puzzle.reset(state.metadata["n_disks"])
        report = puzzle.solve()

        state.output = ModelOutput.from_content(model="parity_hanoi", content=report.summary())
        return state

    return solve


@scorer(metrics=[accuracy()])
def solved() -> Scorer:

    async def score(state: TaskState, target: Target) -> Score:
        puzzle = store_as(ParityHanoi)
        return Score(value=CORRECT) if puzzle.is_solved() else Score(value=INCORRECT)

    return score


@scorer(metrics=[mean()])
def moves_used() -> Scorer:

    async def score(state: TaskState, target: Target) -> Score:
        puzzle = store_as(ParityHanoi)
        return Score(value=puzzle.moves)

    return score


@scorer(metrics=[mean()])
def solve_time() -> Scorer:

    async def score(state: TaskState, target: Target) -> Score:
        puzzle = store_as(ParityHanoi)
        return Score(value=puzzle.elapsed_us)

    return score


def disk_samples(max_disks: int) -> MemoryDataset:
    return MemoryDataset(
        [
            Sample(id=n, input=input_template.format(n_disks=n), metadata={"n_disks": n})
            for n in range(1, max_disks + 1)
        ],
        name="parity_hanoi",
    )


@task
def parity_hanoi(max_disks: int = 10) -> Task:
    return Task(
        name="parity_hanoi",
        dataset=disk_samples(max_disks),
        solver=run_parity_solver(),
        scorer=[solved(), moves_used(), solve_time()],
    )
