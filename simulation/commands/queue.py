# IN THIS FILE: COMMAND BOARDS (MAIN + FUNCTION) AND PROGRAM TEXT PARSING
import re
from typing import FrozenSet, Iterator, List, Optional, Tuple

from simulation.utils.consts import FUNCTION_QUEUE_CAPACITY, MAIN_QUEUE_CAPACITY
from simulation.utils.enums import Command, QueueName

# Short tokens accepted by parse_program, alongside the full wire names
TOKENS = {
    "F": Command.FORWARD,
    "L": Command.LEFT,
    "R": Command.RIGHT,
    "P": Command.FUNCTION,
}


class CommandQueue:
    """
    Append-only board of instruction blocks with a fixed number of slots.
    """

    def __init__(self, name: QueueName, capacity: int, allowed: FrozenSet[Command]):
        self.name = name
        self.capacity = capacity
        self.allowed = allowed
        self._commands: List[Command] = []

    def append(self, command: Command) -> bool:
        """
        Place a block in the next free slot.
        A full board or a block this board does not take is refused (False).
        """
        if self.is_full or command not in self.allowed:
            return False
        self._commands.append(command)
        return True

    def clear(self) -> None:
        self._commands.clear()

    @property
    def is_full(self) -> bool:
        return len(self._commands) >= self.capacity

    @property
    def commands(self) -> Tuple[Command, ...]:
        return tuple(self._commands)

    def slots(self) -> List[Optional[Command]]:
        """One entry per slot on the board, None for an empty slot."""
        return list(self._commands) + [None] * (self.capacity - len(self._commands))

    def get_dict(self) -> dict:
        return {
            "name": self.name.value,
            "capacity": self.capacity,
            "slots": [c.value if c is not None else None for c in self.slots()],
        }

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands)

    def __repr__(self) -> str:
        return f"CommandQueue({self.name.value}, {len(self)}/{self.capacity})"


def main_queue() -> CommandQueue:
    return CommandQueue(QueueName.MAIN, MAIN_QUEUE_CAPACITY, frozenset(Command))


def function_queue() -> CommandQueue:
    # No FUNCTION block here, so a function can never call itself
    return CommandQueue(
        QueueName.FUNCTION,
        FUNCTION_QUEUE_CAPACITY,
        frozenset({Command.FORWARD, Command.LEFT, Command.RIGHT}),
    )


def parse_program(text: str) -> List[Command]:
    """
    Turn "F, F, P, L" (or "forward forward function left") into commands.
    Raises ValueError on an unknown token.
    """
    commands = []
    for token in re.split(r"[\s,]+", text.strip()):
        if not token:
            continue
        key = token.upper()
        if key in TOKENS:
            commands.append(TOKENS[key])
            continue
        try:
            commands.append(Command(token.lower()))
        except ValueError:
            raise ValueError(f"Unknown command token: {token!r}") from None
    return commands
