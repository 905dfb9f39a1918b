import numpy as np
import pytest

from xysim.constants import ColumnType
from xysim.exceptions import TaskTransformError
from xysim.simulation.ground_truth import PsiBuilder, apply_task, build_equation, build_tgp
from xysim.task import Task


def _psi(intercept=True):
    builder = PsiBuilder()
    if intercept:
        builder.add("intercept", [[2.5]], ["(Intercept)"])
    builder.add("interactions", [[5.0, 0.0], [0.3, 7.0]], ["NLIN_1", "LIN_1"])
    builder.add("dummies", np.diag([0.0, 4.2]), ["DUMMY_1__1", "DUMMY_1__2"])
    builder.add("noise", np.eye(1), ["NOISE_1"])
    builder.add("target", [[1.0]], ["y"])
    return builder.build()


TAGS = {
    "(Intercept)": ColumnType.intercept,
    "NLIN_1": ColumnType.nonlinear,
    "LIN_1": ColumnType.linear,
    "DUMMY_1__1": ColumnType.dummy,
    "DUMMY_1__2": ColumnType.dummy,
    "NOISE_1": ColumnType.noise,
    "y": ColumnType.target,
}


def test_psi_block_placement():
    psi = _psi()

    assert psi.shape == (7, 7)
    assert list(psi.columns) == list(TAGS)
    assert list(psi.index) == list(TAGS)
    assert psi.loc["(Intercept)", "(Intercept)"] == 2.5
    assert psi.loc["LIN_1", "NLIN_1"] == 0.3
    assert psi.loc["DUMMY_1__2", "DUMMY_1__2"] == 4.2
    assert psi.loc["y", "y"] == 1.0
    # nothing outside the diagonal blocks
    assert psi.loc["(Intercept)", "NLIN_1"] == 0
    assert psi.loc["NOISE_1", "DUMMY_1__2"] == 0
    assert psi.to_numpy().sum() == pytest.approx(2.5 + 5 + 0.3 + 7 + 4.2 + 1 + 1)


def test_psi_builder_labels():
    builder = PsiBuilder().add("interactions", np.eye(2), ["LIN_1", "LIN_2"]).add("target", [[1]], ["y"])

    assert builder.labels == ["interactions", "target"]


def test_psi_builder_rejects_mismatched_names():
    with pytest.raises(ValueError):
        PsiBuilder().add("interactions", np.eye(2), ["LIN_1"])


def test_equation_skips_reference_dummies():
    equation = build_equation(_psi(), TAGS)

    assert equation == "y ~ 1 + NLIN_1 + LIN_1 + DUMMY_1__2 + NOISE_1"


def test_equation_without_intercept():
    equation = build_equation(_psi(intercept=False), TAGS)

    assert equation == "y ~ -1 + NLIN_1 + LIN_1 + DUMMY_1__2 + NOISE_1"


def test_tgp_fixes_signs():
    tgp = build_tgp(1.2344, ["5 NLIN_1", "(-0.3 LIN_1)", "(7 LIN_1 * -0.2 NLIN_1)", "4.2 DUMMY_1__2"], 1.234)

    assert tgp == "y = 1.234 + 5 NLIN_1 - 0.3 LIN_1 + 7 LIN_1 * -0.2 NLIN_1 + 4.2 DUMMY_1__2 + e ~ N(0, 1.23)"


def test_tgp_without_intercept():
    tgp = build_tgp(None, ["(-2 LIN_1)", "", "3 NLIN_1"], 0.5)

    assert tgp == "y = -2 LIN_1 + 3 NLIN_1 + e ~ N(0, 0.5)"
    assert tgp.count("+ e ~ N(0,") == 1


def test_apply_task_identity():
    y = np.array([1.0, -2.0, 3.0])

    assert np.array_equal(apply_task(y, Task.regression()), y)


def test_apply_task_classification():
    y = np.linspace(-5, 5, 11)
    labels = apply_task(y, Task.classification())

    assert set(np.unique(labels)) == {0.0, 1.0}
    assert labels[0] == 0.0 and labels[-1] == 1.0


def _fail(y):
    raise ArithmeticError("boom")


@pytest.mark.parametrize("task, step", [
    (Task(name="bad link", link=_fail), "link"),
    (Task(name="bad cutoff", cutoff=_fail), "cutoff"),
    (Task(name="bad shape", cutoff=lambda y: y[:2]), "cutoff"),
])
def test_apply_task_failures(task, step):
    with pytest.raises(TaskTransformError, match=step):
        apply_task(np.arange(5.0), task)
