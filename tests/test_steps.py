import logging
import threading

import pytest

from epoch_tour.core.steps import (
    BIAS_SIBLINGS,
    PREREQUISITES,
    STEP_ORDER,
    EpochSession,
    StepId,
    UnknownStep,
    active_step,
    complete,
    initial_completed,
    is_epoch_complete,
    is_unlocked,
    parse_step,
    reset,
)


def test_step_order_is_canonical() -> None:
    assert [step.value for step in STEP_ORDER] == [
        "input", "calc-z1", "activate-a1", "calc-z2", "activate-a2", "calc-z3", "activate-a3", "calc-loss",
        "calc-dz3", "calc-dw3", "calc-db3", "calc-dz2", "calc-dw2", "calc-db2", "calc-dz1", "calc-dw1", "calc-db1",
    ]


def test_prerequisites_keep_weight_gradient_ordering() -> None:
    assert len(PREREQUISITES) == 16
    assert PREREQUISITES[StepId.CALC_DZ2] is StepId.CALC_DW3
    assert PREREQUISITES[StepId.CALC_DZ1] is StepId.CALC_DW2
    assert PREREQUISITES[StepId.CALC_DB3] is StepId.CALC_DZ3
    assert StepId.INPUT not in PREREQUISITES


def test_initial_state_contains_only_input() -> None:
    assert initial_completed() == {StepId.INPUT}
    assert EpochSession().completed == {StepId.INPUT}


def test_unlock_rules_for_first_layer() -> None:
    start = {StepId.INPUT}
    assert is_unlocked("calc-z1", start)
    assert not is_unlocked("activate-a1", start)
    assert is_unlocked("activate-a1", {StepId.INPUT, StepId.CALC_Z1})


def test_calc_z1_is_always_unlocked() -> None:
    assert is_unlocked(StepId.CALC_Z1, set())


def test_input_counts_as_unlocked_but_is_never_offered() -> None:
    assert is_unlocked(StepId.INPUT, set())
    assert StepId.INPUT not in EpochSession().unlocked_steps()


@pytest.mark.parametrize("step, prerequisite", list(PREREQUISITES.items()))
def test_each_step_unlocks_after_its_prerequisite(step, prerequisite) -> None:
    without = frozenset(STEP_ORDER) - {prerequisite}
    if step is not StepId.CALC_Z1:
        assert not is_unlocked(step, without)
    assert is_unlocked(step, {prerequisite})


def test_complete_delta_z_also_completes_bias_gradient() -> None:
    forward = frozenset(STEP_ORDER[: STEP_ORDER.index(StepId.CALC_LOSS) + 1])
    after = complete("calc-dz3", forward)
    assert StepId.CALC_DZ3 in after
    assert StepId.CALC_DB3 in after
    assert forward < after
    for delta_z, bias in BIAS_SIBLINGS.items():
        assert bias in complete(delta_z, {StepId.INPUT})


def test_complete_is_idempotent_and_ignores_prerequisites() -> None:
    once = complete(StepId.CALC_DW1, {StepId.INPUT})
    assert once == {StepId.INPUT, StepId.CALC_DW1}
    assert complete(StepId.CALC_DW1, once) == once


def test_active_step_is_latest_completed() -> None:
    assert active_step({StepId.INPUT, StepId.CALC_Z1, StepId.ACTIVATE_A1}) is StepId.ACTIVATE_A1
    assert active_step({StepId.INPUT}) is StepId.INPUT
    assert active_step(set()) is StepId.INPUT
    assert active_step({StepId.INPUT, StepId.CALC_DB1, StepId.CALC_Z1}) is StepId.CALC_DB1


def test_session_always_includes_input() -> None:
    session = EpochSession({"calc-z1", StepId.ACTIVATE_A1})
    assert session.completed == {StepId.INPUT, StepId.CALC_Z1, StepId.ACTIVATE_A1}
    assert EpochSession(set()).completed == {StepId.INPUT}


def test_session_logs_completion_and_reset(caplog) -> None:
    session = EpochSession()
    with caplog.at_level(logging.DEBUG, logger="epoch_tour.core.steps"):
        session.complete("calc-z1")
        session.reset()
    messages = [record.getMessage() for record in caplog.records]
    assert "completed calc-z1 (2/17 steps)" in messages
    assert "session reset" in messages


def test_reset_returns_only_input() -> None:
    assert reset() == {StepId.INPUT}
    session = EpochSession(STEP_ORDER)
    assert session.is_finished()
    assert session.reset() == {StepId.INPUT}
    assert session.completed == {StepId.INPUT}


def test_unknown_steps_are_rejected() -> None:
    with pytest.raises(UnknownStep) as excinfo:
        is_unlocked("calc-z4", {StepId.INPUT})
    assert excinfo.value.step == "calc-z4"
    with pytest.raises(UnknownStep):
        complete("softmax", {StepId.INPUT})
    with pytest.raises(UnknownStep):
        parse_step(3)
    with pytest.raises(UnknownStep):
        EpochSession().complete("loss")
    assert parse_step("calc-loss") is StepId.CALC_LOSS


def test_session_walks_full_epoch_in_order() -> None:
    session = EpochSession()
    performed = []
    while not session.is_finished():
        available = session.unlocked_steps()
        assert available, "session stalled before the epoch finished"
        step = available[0]
        performed.append(step)
        session.complete(step)
        assert step in session.completed
        assert STEP_ORDER.index(session.active_step()) >= STEP_ORDER.index(step)
    assert session.active_step() is StepId.CALC_DB1
    assert is_epoch_complete(session.completed)
    # Bias gradients are completed through their delta-Z and never performed directly.
    assert performed == [step for step in STEP_ORDER[1:] if step not in BIAS_SIBLINGS.values()]


def test_completed_snapshot_is_stable() -> None:
    session = EpochSession()
    snapshot = session.completed
    session.complete(StepId.CALC_Z1)
    assert snapshot == {StepId.INPUT}
    assert session.completed == {StepId.INPUT, StepId.CALC_Z1}


def test_concurrent_completions_are_all_recorded() -> None:
    session = EpochSession()
    barrier = threading.Barrier(len(STEP_ORDER))

    def worker(step: StepId) -> None:
        barrier.wait()
        for _ in range(50):
            session.complete(step)

    threads = [threading.Thread(target=worker, args=(step,)) for step in STEP_ORDER]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert session.completed == frozenset(STEP_ORDER)
