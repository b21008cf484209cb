import asyncio

import pytest

from simulation.execution.executor import ControlDisabledError, Executor
from simulation.utils.enums import Command, Direction, Outcome, QueueName, RunPhase
from simulation.utils.types import RobotState

F, L, R, P = Command.FORWARD, Command.LEFT, Command.RIGHT, Command.FUNCTION
START = RobotState(0, 0, Direction.SOUTH)


class Recorder:
    """Collects every callback the executor makes."""

    def __init__(self):
        self.renders = []
        self.controls = []
        self.shakes = []

    def render(self, state, main_slots, function_slots):
        self.renders.append(state)

    def on_controls(self, controls):
        self.controls.append(controls.get_dict())

    def on_shake(self, active):
        self.shakes.append(active)


def make_executor(main=(), function=(), recorder=None):
    recorder = recorder or Recorder()
    executor = Executor(
        step_delay=0, shake_delay=0, settle_delay=0,
        on_render=recorder.render,
        on_controls=recorder.on_controls,
        on_shake=recorder.on_shake,
    )
    for command in main:
        assert executor.append(QueueName.MAIN, command)
    for command in function:
        assert executor.append(QueueName.FUNCTION, command)
    recorder.renders.clear()
    return executor, recorder


def assert_initial(executor):
    assert executor.state == START
    assert len(executor.main) == 0
    assert len(executor.function) == 0
    assert executor.phase == RunPhase.IDLE
    assert executor.controls.get_dict() == {"run": True, "commands": True, "reset": True}


def test_starts_idle_at_initial_pose():
    executor, _ = make_executor()
    assert_initial(executor)


def test_single_forward_completes():
    executor, recorder = make_executor([F])
    assert asyncio.run(executor.run()) == Outcome.COMPLETED
    assert executor.state == RobotState(0, 1, Direction.SOUTH)
    assert recorder.renders == [RobotState(0, 1, Direction.SOUTH)]


def test_completed_run_keeps_boards_and_enables_only_reset():
    executor, recorder = make_executor([F, L, F, P], [F, R, F])
    assert asyncio.run(executor.run()) == Outcome.COMPLETED

    assert executor.state == RobotState(2, 2, Direction.SOUTH)
    assert executor.main.commands == (F, L, F, P)
    assert executor.function.commands == (F, R, F)
    assert executor.phase == RunPhase.COMPLETED
    assert executor.controls.get_dict() == {"run": False, "commands": False, "reset": True}
    assert recorder.controls == [
        {"run": False, "commands": False, "reset": False},
        {"run": False, "commands": False, "reset": True},
    ]
    assert recorder.shakes == []
    assert len(executor.history) == 7


def test_sixth_forward_south_hits_the_edge_and_resets():
    executor, recorder = make_executor([F] * 6)
    assert asyncio.run(executor.run()) == Outcome.ABORTED

    assert_initial(executor)
    assert executor.failed_step == 5
    assert [s.y for s in executor.history] == [0, 1, 2, 3, 4, 5]
    assert recorder.shakes == [True, False]
    # Five steps drawn, then the reset redraw back at the start
    assert recorder.renders[:5] == [RobotState(0, y, Direction.SOUTH) for y in range(1, 6)]
    assert recorder.renders[-1] == START


def test_function_block_runs_inline():
    executor, recorder = make_executor([P], [F, L, F])
    assert asyncio.run(executor.run()) == Outcome.COMPLETED
    assert recorder.renders == [
        RobotState(0, 1, Direction.SOUTH),
        RobotState(0, 1, Direction.EAST),
        RobotState(1, 1, Direction.EAST),
    ]


def test_failure_inside_function_aborts_whole_run():
    # R turns to WEST at x=0, so the function's 2nd block runs off the edge
    executor, recorder = make_executor([P, F, F], [R, F, L])
    assert asyncio.run(executor.run()) == Outcome.ABORTED

    assert executor.failed_step == 1
    # Only the turn was drawn before the reset; nothing after the failure ran
    assert recorder.renders == [RobotState(0, 0, Direction.WEST), START]
    assert_initial(executor)


def test_failure_in_second_function_call_skips_rest_of_main():
    executor, recorder = make_executor([P, P, L], [F, F, F])
    assert asyncio.run(executor.run()) == Outcome.ABORTED
    # First call reaches y=3, second call reaches y=5 then fails
    assert executor.failed_step == 5
    assert all(s.direction == Direction.SOUTH for s in recorder.renders)


def test_empty_function_board_makes_function_block_a_no_op():
    executor, recorder = make_executor([P, F])
    assert asyncio.run(executor.run()) == Outcome.COMPLETED
    assert recorder.renders == [RobotState(0, 1, Direction.SOUTH)]


def test_empty_program_completes():
    executor, _ = make_executor()
    assert asyncio.run(executor.run()) == Outcome.COMPLETED
    assert executor.state == START


def test_controls_disabled_while_stepping():
    seen = []
    executor, _ = make_executor([F, R])
    executor.on_render = lambda *args: seen.append(executor.controls.get_dict())
    asyncio.run(executor.run())
    assert seen == [{"run": False, "commands": False, "reset": False}] * 2


def test_append_refused_while_running():
    results = []
    executor, _ = make_executor([F, F])

    def try_append(state, main_slots, function_slots):
        results.append(executor.append(QueueName.MAIN, L))

    executor.on_render = try_append
    asyncio.run(executor.run())
    assert results == [False, False]
    assert executor.main.commands == (F, F)


def test_reset_refused_while_running():
    errors = []
    executor, _ = make_executor([F])

    def try_reset(state, main_slots, function_slots):
        try:
            executor.reset()
        except ControlDisabledError as e:
            errors.append(e)

    executor.on_render = try_reset
    asyncio.run(executor.run())
    assert len(errors) == 1
    assert executor.state == RobotState(0, 1, Direction.SOUTH)


def test_run_and_append_refused_after_completion_until_reset():
    executor, _ = make_executor([F])
    asyncio.run(executor.run())

    assert not executor.append(QueueName.MAIN, F)
    with pytest.raises(ControlDisabledError):
        asyncio.run(executor.run())

    executor.reset()
    assert_initial(executor)
    assert executor.append(QueueName.MAIN, F)


def test_reset_when_idle_is_a_no_op():
    executor, recorder = make_executor()
    executor.reset()
    executor.reset()
    assert_initial(executor)
    assert recorder.renders == [START, START]


def test_append_over_capacity_leaves_queue_at_cap():
    executor, _ = make_executor()
    for _ in range(15):
        executor.append(QueueName.MAIN, F)
    for _ in range(6):
        executor.append(QueueName.FUNCTION, L)
    assert len(executor.main) == 12
    assert len(executor.function) == 4


def test_append_accepts_wire_names():
    executor, _ = make_executor()
    assert executor.append("function", "right")
    assert not executor.append("function", "function")
    assert executor.function.commands == (R,)


def test_render_comes_before_each_pause(monkeypatch):
    events = []

    async def fake_sleep(seconds):
        events.append(("sleep", seconds))

    monkeypatch.setattr("simulation.execution.executor.asyncio.sleep", fake_sleep)
    executor = Executor(
        on_render=lambda state, main_slots, function_slots: events.append(("render", state.y)),
        on_shake=lambda active: events.append(("shake", active)),
    )
    for _ in range(6):
        executor.append(QueueName.MAIN, F)
    events.clear()

    # Five forwards south succeed, the sixth runs off the bottom edge
    assert asyncio.run(executor.run()) == Outcome.ABORTED
    expected = []
    for y in range(1, 6):
        expected += [("render", y), ("sleep", 0.85)]
    expected += [
        ("shake", True), ("sleep", 0.5),
        ("shake", False), ("sleep", 0.2),
        ("render", 0),
    ]
    assert events == expected


def test_snapshot_shape():
    executor, _ = make_executor([F, P], [L])
    snap = executor.snapshot()
    assert snap["robot"] == {"x": 0, "y": 0, "dir": 2}
    assert snap["phase"] == "idle"
    assert snap["main"]["slots"][:3] == ["forward", "function", None]
    assert len(snap["main"]["slots"]) == 12
    assert snap["function"]["slots"] == ["left", None, None, None]


def test_failing_callback_still_resets_board():
    calls = []

    def render_once_then_fail(state, main_slots, function_slots):
        calls.append(state)
        if len(calls) == 1:
            raise RuntimeError("display went away")

    executor, _ = make_executor([F, F])
    executor.on_render = render_once_then_fail
    with pytest.raises(RuntimeError):
        asyncio.run(executor.run())

    assert_initial(executor)
    executor.reset()
    assert executor.append(QueueName.MAIN, F)


def test_cancelled_run_still_resets_board():
    executor, _ = make_executor([F, F, F])
    executor.step_delay = 10

    async def cancel_mid_step():
        task = asyncio.ensure_future(executor.run())
        await asyncio.sleep(0.01)
        assert executor.phase == RunPhase.RUNNING
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(cancel_mid_step())
    assert_initial(executor)
    executor.reset()
    assert_initial(executor)
