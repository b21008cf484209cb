# IN THIS FILE: POSITION, ROBOTSTATE, CONTROLS

from simulation.utils.consts import START_DIR, START_X, START_Y
from simulation.utils.enums import Direction


class Position:
    """
    Represents a robot's cell and orientation on the grid.
    """

    def __init__(self, x: int, y: int, direction: Direction):
        self.x = x                              # Column, 0 is the left edge
        self.y = y                              # Row, 0 is the top edge
        self.direction = Direction(direction)   # Facing direction (NORTH/EAST/SOUTH/WEST)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Position):
            return False
        return (self.x == other.x and
                self.y == other.y and
                self.direction == other.direction)

    def __hash__(self) -> int:
        return hash((self.x, self.y, self.direction))

    def __repr__(self) -> str:
        return f"Position(x={self.x}, y={self.y}, d={self.direction.name})"


class RobotState(Position):
    """
    Pose of the robot during a run.
    Step functions never mutate a RobotState; they return a new one.
    """

    @classmethod
    def initial(cls) -> 'RobotState':
        return cls(START_X, START_Y, Direction(START_DIR))

    def copy(self) -> 'RobotState':
        return RobotState(self.x, self.y, self.direction)

    def get_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {"x": self.x, "y": self.y, "dir": int(self.direction)}

    def __repr__(self) -> str:
        return f"RobotState(x={self.x}, y={self.y}, d={self.direction.name})"


class Controls:
    """
    Enablement of the board's buttons.
    `run` and `commands` always move together; `reset` is independent.
    """

    def __init__(self, run: bool = True, commands: bool = True, reset: bool = True):
        self.run = run
        self.commands = commands
        self.reset = reset

    def set_entry(self, enabled: bool) -> None:
        self.run = enabled
        self.commands = enabled

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Controls):
            return False
        return self.get_dict() == other.get_dict()

    def get_dict(self) -> dict:
        return {"run": self.run, "commands": self.commands, "reset": self.reset}

    def __repr__(self) -> str:
        return f"Controls(run={self.run}, commands={self.commands}, reset={self.reset})"
