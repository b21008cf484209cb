# simulation/commands/steps.py
from typing import Iterable, List, Tuple

from simulation.entities.grid import Grid
from simulation.utils.enums import Command
from simulation.utils.types import RobotState


def move_forward(state: RobotState, grid: Grid) -> Tuple[RobotState, bool]:
    """
    Step one cell in the facing direction.

    Returns (new_state, True) when the target cell is on the grid, otherwise
    (state, False). Hitting the edge is a normal outcome, not an error.
    """
    dx, dy = state.direction.delta
    nx, ny = state.x + dx, state.y + dy
    if not grid.is_within_bounds(nx, ny):
        return state, False
    return RobotState(nx, ny, state.direction), True


def turn(state: RobotState, command: Command) -> RobotState:
    """Rotate a quarter turn in place. Only LEFT and RIGHT are turns."""
    return RobotState(state.x, state.y, state.direction.turned(command))


def execute_step(state: RobotState, command: Command, grid: Grid) -> Tuple[RobotState, bool]:
    if command == Command.FORWARD:
        return move_forward(state, grid)
    if command in (Command.LEFT, Command.RIGHT):
        return turn(state, command), True
    # FUNCTION blocks are expanded by the caller
    raise ValueError(f"cannot execute {command!r} as a single step")


def expand(main: Iterable[Command], function: Iterable[Command]) -> List[Command]:
    """
    Flatten a program by inlining the function board at every FUNCTION block.
    """
    function = list(function)
    steps = []
    for command in main:
        if command == Command.FUNCTION:
            steps.extend(function)
        else:
            steps.append(command)
    return steps
