# IN THIS FILE: TRACKING ROBOT'S CURRENT STATE & MOVEMENT HISTORY

from typing import List

from simulation.utils.types import RobotState


class Robot:
    """
    Tracks robot's starting pose, current pose and the poses visited in a run.
    The start pose is the board's fixed one: top-left, facing SOUTH.
    """

    def __init__(self):
        self.start_state = RobotState.initial()
        self.state = self.start_state.copy()
        self.path_history: List[RobotState] = [self.state]

    def begin_run(self) -> None:
        """Start a fresh history from the current pose."""
        self.path_history = [self.state]

    def record(self, state: RobotState) -> None:
        """Move the robot to `state` and remember it."""
        self.state = state
        self.path_history.append(state)

    def reset(self) -> None:
        """Back to the start pose. History is kept until the next run begins."""
        self.state = self.start_state.copy()

    def clear_history(self) -> None:
        self.path_history = [self.state]
