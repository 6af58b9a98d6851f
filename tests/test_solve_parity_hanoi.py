"""
Tests for the inspect_ai evaluation task
"""

from inspect_ai import eval

from solve_parity_hanoi import disk_samples, parity_hanoi


def test_disk_samples():
    dataset = disk_samples(4)

    assert len(dataset) == 4
    assert [sample.metadata["n_disks"] for sample in dataset] == [1, 2, 3, 4]
    assert "4 disks" in dataset[3].input


def test_task_solves_every_sample(tmp_path):
    logs = eval(
        parity_hanoi(max_disks=4),
        model="mockllm/model",
        log_dir=str(tmp_path),
        display="none",
    )

    log = logs[0]
    assert log.status == "success"

    scores = {score.name: score for score in log.results.scores}
    assert scores["solved"].metrics["accuracy"].value == 1.0
    assert scores["moves_used"].metrics["mean"].value == (1 + 3 + 7 + 15) / 4
    assert scores["solve_time"].metrics["mean"].value >= 0
