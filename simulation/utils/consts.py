# IN THIS FILE: ALL CONSTANTS (BOARD, QUEUES, ANIMATION TIMING)

# -----------------------------------------------------------------------------
# 1. GRID
# -----------------------------------------------------------------------------
GRID_SIZE = 6           # 6x6 cells, indices 0..5 on both axes

# Start pose (top-left corner, facing SOUTH)
START_X = 0
START_Y = 0
START_DIR = 2

# -----------------------------------------------------------------------------
# 2. COMMAND BOARDS
# -----------------------------------------------------------------------------
MAIN_QUEUE_CAPACITY = 12
FUNCTION_QUEUE_CAPACITY = 4

# -----------------------------------------------------------------------------
# 3. ANIMATION TIMING (milliseconds)
# -----------------------------------------------------------------------------
STEP_DELAY_MS = 850     # Pause after every successful step
SHAKE_DURATION_MS = 500 # How long the "bump" is shown on an invalid move
SHAKE_PAUSE_MS = 200    # Pause after the bump before the board resets

# -----------------------------------------------------------------------------
# 4. RENDERING
# -----------------------------------------------------------------------------
# Map artwork has an 80px border on a 2025px image.
BORDER_OFFSET_RATIO = 80 / 2025
# Robot icon takes 70% of a cell and is centred inside it.
ROBOT_SCALE_FACTOR = 0.7
