import argparse
import asyncio
import sys

from simulation.commands.queue import parse_program
from simulation.commands.steps import expand
from simulation.execution.executor import Executor
from simulation.utils.consts import GRID_SIZE
from simulation.utils.enums import Outcome, QueueName

# Robot glyph per direction (NORTH, EAST, SOUTH, WEST)
ARROWS = "^>v<"


def draw_grid(state, size=GRID_SIZE):
    rows = []
    for y in range(size):
        row = []
        for x in range(size):
            row.append(ARROWS[int(state.direction)] if (x, y) == (state.x, state.y) else ".")
        rows.append(" ".join(row))
    return "\n".join(rows)


def build_executor(main_text, function_text, fast=False):
    """
    Load both boards on a local executor that draws to the terminal.
    Raises ValueError for bad program text or a block a board refuses.
    """
    delays = {"step_delay": 0, "shake_delay": 0, "settle_delay": 0} if fast else {}
    executor = Executor(
        on_controls=lambda c: print(f"[Executor] Controls: {c.get_dict()}"),
        on_shake=lambda active: print("[Executor] *** BUMP ***" if active else "[Executor] resetting board"),
        **delays,
    )
    for name, text in ((QueueName.MAIN, main_text), (QueueName.FUNCTION, function_text)):
        for command in parse_program(text):
            if not executor.append(name, command):
                raise ValueError(f"{name.value} board refused '{command.value}' (full or not allowed)")
    return executor


def run_cli(main_text, function_text, fast=False):
    try:
        executor = build_executor(main_text, function_text, fast)
    except ValueError as e:
        print(f"[CLI] Error: {e}", file=sys.stderr)
        return 2

    steps = expand(executor.main, executor.function)
    print(f"[CLI] Program: {[c.value for c in steps]}")
    print(draw_grid(executor.state))

    # Only draw poses from the run itself, not the board edits above
    def on_render(state, main_slots, function_slots):
        print()
        print(draw_grid(state))

    executor.on_render = on_render
    outcome = asyncio.run(executor.run())

    if outcome == Outcome.COMPLETED:
        print(f"[CLI] Completed at {executor.state}")
        return 0
    print(f"[CLI] Aborted: step {executor.failed_step} would leave the grid")
    return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run a command-board program in the terminal.")
    parser.add_argument("--main", required=True, help="Main board, e.g. 'F,F,P,L' (F/L/R/P or full names).")
    parser.add_argument("--function", default="", help="Function board, e.g. 'F,R,F' (no P).")
    parser.add_argument("--fast", action="store_true", help="Skip animation delays.")

    args = parser.parse_args()

    sys.exit(run_cli(args.main, args.function, args.fast))
