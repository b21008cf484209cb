# IN THIS FILE: THE COMMAND EXECUTOR (RUN / RESET STATE MACHINE)
import asyncio
from typing import Callable, List, Optional, Union

from simulation.commands.queue import CommandQueue, function_queue, main_queue
from simulation.commands.steps import execute_step
from simulation.entities.grid import Grid
from simulation.entities.robot import Robot
from simulation.utils.consts import SHAKE_DURATION_MS, SHAKE_PAUSE_MS, STEP_DELAY_MS
from simulation.utils.enums import Command, Outcome, QueueName, RunPhase
from simulation.utils.types import Controls, RobotState

RenderCallback = Callable[[RobotState, list, list], None]
ControlsCallback = Callable[[Controls], None]
ShakeCallback = Callable[[bool], None]


class ControlDisabledError(RuntimeError):
    """Run or reset was requested while its control is disabled."""


class Executor:
    """
    Owns the whole simulation: grid, robot, both command boards and the
    button state. Front ends drive it only through append / run / reset.

    Run phases:
        IDLE --run--> RUNNING --> COMPLETED --reset--> IDLE
                         \\--(edge hit)--> shake, automatic reset --> IDLE

    While RUNNING every control is disabled. A completed run re-enables only
    reset; the boards stay as authored until the user resets.
    """

    def __init__(
        self,
        grid: Optional[Grid] = None,
        step_delay: float = STEP_DELAY_MS / 1000,
        shake_delay: float = SHAKE_DURATION_MS / 1000,
        settle_delay: float = SHAKE_PAUSE_MS / 1000,
        on_render: Optional[RenderCallback] = None,
        on_controls: Optional[ControlsCallback] = None,
        on_shake: Optional[ShakeCallback] = None,
    ):
        """
        Args:
            grid: Playing field (defaults to the 6x6 board)
            step_delay: Seconds to wait after each successful step
            shake_delay: Seconds the invalid-move signal stays on
            settle_delay: Seconds to wait after the signal clears, before reset
            on_render: Called with (state, main slots, function slots) after every visible change
            on_controls: Called with the Controls whenever enablement changes
            on_shake: Called with True/False as the invalid-move signal toggles
        """
        self.grid = grid or Grid()
        self.robot = Robot()
        self.main: CommandQueue = main_queue()
        self.function: CommandQueue = function_queue()
        self.controls = Controls()
        self.phase = RunPhase.IDLE
        self.last_outcome: Optional[Outcome] = None
        self.failed_step: Optional[int] = None   # index into the run's steps of the edge hit

        self.step_delay = step_delay
        self.shake_delay = shake_delay
        self.settle_delay = settle_delay

        self.on_render = on_render
        self.on_controls = on_controls
        self.on_shake = on_shake

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @property
    def state(self) -> RobotState:
        return self.robot.state

    @property
    def history(self) -> List[RobotState]:
        """Poses of the last run, starting pose first."""
        return list(self.robot.path_history)

    def queue(self, name: Union[QueueName, str]) -> CommandQueue:
        return self.main if QueueName(name) == QueueName.MAIN else self.function

    def snapshot(self) -> dict:
        return {
            "robot": self.state.get_dict(),
            "phase": self.phase.value,
            "controls": self.controls.get_dict(),
            "main": self.main.get_dict(),
            "function": self.function.get_dict(),
        }

    # -------------------------------------------------------------------------
    # Board editing
    # -------------------------------------------------------------------------

    def append(self, queue_name: Union[QueueName, str], command: Union[Command, str]) -> bool:
        """
        Add a block to a board. Refused (False) while command entry is disabled,
        when the board is full, or when the board does not take that block.
        """
        if not self.controls.commands:
            return False
        if not self.queue(queue_name).append(Command(command)):
            return False
        self._render()
        return True

    # -------------------------------------------------------------------------
    # Running
    # -------------------------------------------------------------------------

    async def run(self) -> Outcome:
        if not self.controls.run:
            raise ControlDisabledError("run is disabled until the board is reset")

        self.phase = RunPhase.RUNNING
        self.failed_step = None
        self.robot.begin_run()
        self.controls.set_entry(False)
        self.controls.reset = False
        self._notify_controls()

        try:
            completed = await self._run_steps()
        except BaseException:
            # A failing callback or a cancelled task still ends in a full reset
            self._reset_board()
            raise

        if not completed:
            self.last_outcome = Outcome.ABORTED
            return Outcome.ABORTED

        self.phase = RunPhase.COMPLETED
        self.controls.reset = True
        self._notify_controls()
        self.last_outcome = Outcome.COMPLETED
        return Outcome.COMPLETED

    async def _run_steps(self) -> bool:
        """Step through the main board, expanding FUNCTION blocks as they come."""
        step_index = 0
        for command in self.main.commands:
            sub_steps = self.function.commands if command == Command.FUNCTION else (command,)
            for step in sub_steps:
                if not await self._step(step):
                    self.failed_step = step_index
                    await self._invalid_move()
                    return False
                step_index += 1
        return True

    async def _step(self, command: Command) -> bool:
        state, ok = execute_step(self.robot.state, command, self.grid)
        if not ok:
            return False
        self.robot.record(state)
        self._render()
        await asyncio.sleep(self.step_delay)
        return True

    async def _invalid_move(self) -> None:
        self._shake(True)
        await asyncio.sleep(self.shake_delay)
        self._shake(False)
        await asyncio.sleep(self.settle_delay)
        self._reset_board()

    # -------------------------------------------------------------------------
    # Reset
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """Clear both boards, put the robot back and re-enable every control."""
        if not self.controls.reset:
            raise ControlDisabledError("reset is disabled while a run is stepping")
        self.failed_step = None
        self.last_outcome = None
        self._reset_board()
        self.robot.clear_history()

    def _reset_board(self) -> None:
        self.main.clear()
        self.function.clear()
        self.robot.reset()
        self.phase = RunPhase.IDLE
        self.controls.set_entry(True)
        self.controls.reset = True
        self._notify_controls()
        self._render()

    # -------------------------------------------------------------------------
    # Callbacks
    # -------------------------------------------------------------------------

    def _render(self) -> None:
        if self.on_render:
            self.on_render(self.robot.state, self.main.slots(), self.function.slots())

    def _notify_controls(self) -> None:
        if self.on_controls:
            self.on_controls(self.controls)

    def _shake(self, active: bool) -> None:
        if self.on_shake:
            self.on_shake(active)
