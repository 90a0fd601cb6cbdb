import pytest

matplotlib = pytest.importorskip("matplotlib")
matplotlib.use("Agg")

from epoch_tour.core.steps import STEP_ORDER, StepId
from epoch_tour.visualization import plot_epoch_trace
from epoch_tour.walkthrough import run_epoch


def test_plot_every_step(tmp_path) -> None:
    fig = plot_epoch_trace(run_epoch())
    visible = [ax for ax in fig.axes if ax.axison]
    assert len(visible) == len(STEP_ORDER)
    path = tmp_path / "epoch.png"
    fig.savefig(path)
    assert path.exists()
    matplotlib.pyplot.close(fig)


def test_plot_selected_steps_and_validation() -> None:
    trace = run_epoch()
    fig = plot_epoch_trace(trace, ["calc-z1", StepId.CALC_DW1], columns=2)
    titles = [ax.get_title() for ax in fig.axes]
    assert titles == ["Z1 = X·W1 + B1", "dW1 = Xᵀ·dZ1"]
    matplotlib.pyplot.close(fig)

    with pytest.raises(ValueError):
        plot_epoch_trace(trace, [])
    with pytest.raises(ValueError):
        plot_epoch_trace(trace, columns=0)
