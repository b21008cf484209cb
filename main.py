# main.py
import traceback
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from simulation.execution.executor import ControlDisabledError, Executor
from simulation.utils.consts import FUNCTION_QUEUE_CAPACITY, MAIN_QUEUE_CAPACITY
from simulation.utils.enums import Command, Outcome, QueueName

HOST = "0.0.0.0"
PORT = 5000

app = FastAPI(title="Robot Command Board Server")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Steps are not paced here: clients replay the returned frames at their own speed
board = Executor(step_delay=0, shake_delay=0, settle_delay=0)

# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class CommandInput(BaseModel):
    command: Command

class ProgramInput(BaseModel):
    main: List[Command]
    function: List[Command] = []

class RobotPoint(BaseModel):
    x: int
    y: int
    dir: int

class ControlsOutput(BaseModel):
    run: bool
    commands: bool
    reset: bool

class QueueOutput(BaseModel):
    name: str
    capacity: int
    slots: List[Optional[str]]

class BoardOutput(BaseModel):
    robot: RobotPoint
    phase: str
    controls: ControlsOutput
    main: QueueOutput
    function: QueueOutput

class AppendOutput(BoardOutput):
    accepted: bool

class RunOutput(BoardOutput):
    outcome: Outcome
    frames: List[RobotPoint]
    aborted_at: Optional[int]

class SimulateOutput(BaseModel):
    outcome: Outcome
    frames: List[RobotPoint]
    aborted_at: Optional[int]
    last_pose: RobotPoint


# =============================================================================
# CORE
# =============================================================================

async def run_executor(executor: Executor) -> dict:
    outcome = await executor.run()
    return {
        "outcome": outcome,
        "frames": [s.get_dict() for s in executor.history],
        "aborted_at": executor.failed_step,
    }


def load_program(executor: Executor, main: List[Command], function: List[Command]) -> None:
    """Fill a fresh executor's boards, refusing anything the boards would drop."""
    capacity = {QueueName.MAIN: MAIN_QUEUE_CAPACITY, QueueName.FUNCTION: FUNCTION_QUEUE_CAPACITY}
    for name, commands in ((QueueName.MAIN, main), (QueueName.FUNCTION, function)):
        if len(commands) > capacity[name]:
            raise ValueError(f"{name.value} board holds at most {capacity[name]} blocks")
        for command in commands:
            if not executor.append(name, command):
                raise ValueError(f"{command.value} is not allowed on the {name.value} board")


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.get("/status")
def health_check():
    return {"status": "ok", "message": "Command board server is running"}


@app.get("/state", response_model=BoardOutput)
async def get_state():
    return board.snapshot()


@app.post("/queue/{queue}", response_model=AppendOutput)
async def append_command(queue: QueueName, input_data: CommandInput):
    accepted = board.append(queue, input_data.command)
    if accepted:
        print(f"[Server] + {input_data.command.value} on {queue.value} board")
    return {"accepted": accepted, **board.snapshot()}


@app.post("/run", response_model=RunOutput)
async def run_board():
    try:
        result = await run_executor(board)
    except ControlDisabledError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(status_code=500, detail=str(e))
    print(f"[Server] Run {result['outcome'].value} after {len(result['frames']) - 1} steps")
    return {**result, **board.snapshot()}


@app.post("/reset", response_model=BoardOutput)
async def reset_board():
    try:
        board.reset()
    except ControlDisabledError as e:
        raise HTTPException(status_code=409, detail=str(e))
    print("[Server] Board reset")
    return board.snapshot()


@app.post("/simulate", response_model=SimulateOutput)
async def simulate(input_data: ProgramInput):
    """
    Stateless dry run of a whole program on a fresh board.
    The shared board is left untouched.
    """
    executor = Executor(step_delay=0, shake_delay=0, settle_delay=0)
    try:
        load_program(executor, input_data.main, input_data.function)
        result = await run_executor(executor)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        traceback.print_exc()
        raise HTTPException(status_code=500, detail=str(e))
    result["last_pose"] = result["frames"][-1]
    return result


if __name__ == "__main__":
    uvicorn.run(app, host=HOST, port=PORT)
