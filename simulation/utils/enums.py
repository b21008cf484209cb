# IN THIS FILE: DIRECTIONS, COMMANDS, QUEUE NAMES, RUN OUTCOMES
from enum import Enum
from typing import Tuple


class Direction(int, Enum):
    """
    Robot facing direction.
    Increases clockwise, so a right turn is +1 and a left turn is -1 (mod 4).
    """
    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3

    def __int__(self):
        return self.value

    @property
    def delta(self) -> Tuple[int, int]:
        """
        Unit step (dx, dy) for one cell forward.
        y grows downward on the board, so NORTH is y-1.
        """
        return {0: (0, -1), 1: (1, 0), 2: (0, 1), 3: (-1, 0)}[self.value]

    def turned(self, command: 'Command') -> 'Direction':
        if command == Command.LEFT:
            return Direction((self.value - 1) % 4)
        if command == Command.RIGHT:
            return Direction((self.value + 1) % 4)
        raise ValueError(f"{command!r} is not a turn")


class Command(str, Enum):
    """
    Instruction blocks a user can place on a board.
    Value is the name used on the wire and in the board palette.
    """
    FORWARD = "forward"
    LEFT = "left"
    RIGHT = "right"
    FUNCTION = "function"


class QueueName(str, Enum):
    MAIN = "main"
    FUNCTION = "function"


class Outcome(str, Enum):
    COMPLETED = "completed"
    ABORTED = "aborted"


class RunPhase(str, Enum):
    """
    Resting phases of the executor.
    An aborted run resets straight back to IDLE, so it has no phase of its own.
    """
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
