import matplotlib.pyplot as plt
import matplotlib.patches as patches
import matplotlib.widgets as widgets
import numpy as np
import requests

from simulation.utils.consts import (
    GRID_SIZE,
    ROBOT_SCALE_FACTOR,
    SHAKE_DURATION_MS,
    SHAKE_PAUSE_MS,
    STEP_DELAY_MS,
)

# CONFIGURATION
API_URL = "http://localhost:5000"
TIMEOUT = 5

# Direction int → human name
DIR_NAMES = {0: "NORTH", 1: "EAST", 2: "SOUTH", 3: "WEST"}
# Block colours on the boards
BLOCK_COLORS = {"forward": "#4caf50", "left": "#2196f3", "right": "#ff9800", "function": "#9c27b0"}
ENABLED_COLOR = "lightgray"
DISABLED_COLOR = "#f4f4f4"


class InteractiveDashboard:

    # =========================================================================
    # INIT
    # =========================================================================

    def __init__(self):
        # --- Board state (mirrors the server's /state) ---
        self.board = None

        # --- Playback state ---
        self.frames = []             # Robot poses returned by /run
        self.current_frame = 0
        self.is_playing = False
        self.shaking = False
        self.outcome = None
        self.pending_board = None    # Board after the run, shown once playback ends
        self._pending_timer = None

        # ---- BUILD FIGURE ----
        self.fig = plt.figure(figsize=(9, 11))
        self.ax = self.fig.add_axes([0.15, 0.38, 0.7, 0.58])
        self.ax_main = self.fig.add_axes([0.05, 0.28, 0.9, 0.05])
        self.ax_func = self.fig.add_axes([0.05, 0.20, 0.3, 0.05])

        self.timer = self.fig.canvas.new_timer(interval=STEP_DELAY_MS)
        self.timer.add_callback(self.play_step)

        # --- Row 1: main board palette ---
        self.entry_buttons = []
        for i, (label, command) in enumerate(
            [("Forward", "forward"), ("Left", "left"), ("Right", "right"), ("Function", "function")]
        ):
            btn = widgets.Button(plt.axes([0.05 + i * 0.16, 0.11, 0.14, 0.05]), label)
            btn.on_clicked(lambda event, c=command: self.add_command("main", c))
            self.entry_buttons.append(btn)

        # --- Row 2: function board palette ---
        for i, (label, command) in enumerate([("F: Fwd", "forward"), ("F: Left", "left"), ("F: Right", "right")]):
            btn = widgets.Button(plt.axes([0.05 + i * 0.16, 0.04, 0.14, 0.05]), label)
            btn.on_clicked(lambda event, c=command: self.add_command("function", c))
            self.entry_buttons.append(btn)

        # --- Run / Reset ---
        self.btn_run = widgets.Button(plt.axes([0.72, 0.11, 0.23, 0.05]), 'Run', color='lightgreen')
        self.btn_run.on_clicked(self.run_program)

        self.btn_reset = widgets.Button(plt.axes([0.72, 0.04, 0.23, 0.05]), 'Reset', color='salmon')
        self.btn_reset.on_clicked(self.reset_board)

        self.ax_status = self.fig.add_axes([0.40, 0.20, 0.55, 0.05])
        self.ax_status.axis('off')
        self.status_text = self.ax_status.text(
            0, 0.5, "Status: connecting...",
            transform=self.ax_status.transAxes,
            va='center', fontsize=9, color='gray', wrap=True
        )

        self.refresh_state()
        plt.show()

    # =========================================================================
    # SERVER CALLS
    # =========================================================================

    def _post(self, path, payload=None):
        return requests.post(f"{API_URL}{path}", json=payload, timeout=TIMEOUT)

    def refresh_state(self):
        try:
            res = requests.get(f"{API_URL}/state", timeout=TIMEOUT)
            res.raise_for_status()
            self.board = res.json()
            self._set_status("Ready. Build a program and press Run.", "gray")
        except requests.exceptions.RequestException as e:
            self._set_status(f"Connection failed: {e}", "red")
        self.redraw()

    def add_command(self, queue, command):
        if not self._controls()["commands"]:
            return
        try:
            res = self._post(f"/queue/{queue}", {"command": command})
            if res.status_code != 200:
                self._set_status(f"Server error {res.status_code}: {res.text[:80]}", "red")
                return
            data = res.json()
            self.board = data
            if not data["accepted"]:
                self._set_status(f"The {queue} board is full.", "orange")
            self.redraw()
        except requests.exceptions.RequestException as e:
            self._set_status(f"Connection failed: {e}", "red")

    def run_program(self, event):
        if not self._controls()["run"]:
            return
        try:
            res = self._post("/run")
        except requests.exceptions.RequestException as e:
            self._set_status(f"Connection failed: {e}", "red")
            return
        if res.status_code != 200:
            self._set_status(f"Server error {res.status_code}: {res.text[:80]}", "red")
            return

        data = res.json()
        self.frames = data["frames"]
        self.outcome = data["outcome"]
        self.pending_board = {k: data[k] for k in ("robot", "phase", "controls", "main", "function")}
        print(f"[Dashboard] Run {self.outcome}: {len(self.frames) - 1} steps, aborted_at={data['aborted_at']}")

        # Keep the authored boards on screen while the robot moves
        self.current_frame = 0
        self.is_playing = True
        self._set_status("Running...", "orange")
        self.redraw()
        self.timer.start()

    def reset_board(self, event):
        if not self._controls()["reset"]:
            return
        try:
            res = self._post("/reset")
            if res.status_code == 200:
                self.board = res.json()
                self.frames = []
                self.outcome = None
                self._set_status("Board cleared.", "gray")
                self.redraw()
            else:
                self._set_status(f"Server error {res.status_code}: {res.text[:80]}", "red")
        except requests.exceptions.RequestException as e:
            self._set_status(f"Connection failed: {e}", "red")

    # =========================================================================
    # PLAYBACK
    # =========================================================================

    def play_step(self):
        if self.current_frame < len(self.frames) - 1:
            self.current_frame += 1
            self.redraw()
            return
        self.timer.stop()
        if self.outcome == "aborted":
            self._start_shake()
        else:
            self._finish_run()

    def _start_shake(self):
        self.shaking = True
        self._set_status("Bump! The robot hit the edge.", "red")
        self.redraw()
        self._one_shot(SHAKE_DURATION_MS, self._end_shake)

    def _end_shake(self):
        self.shaking = False
        self.redraw()
        self._one_shot(SHAKE_PAUSE_MS, self._finish_run)

    def _one_shot(self, interval, callback):
        timer = self.fig.canvas.new_timer(interval=interval)
        timer.single_shot = True
        timer.add_callback(callback)
        timer.start()
        # Hold a reference so the timer is not collected before it fires
        self._pending_timer = timer

    def _finish_run(self):
        self.is_playing = False
        self.board = self.pending_board
        self.pending_board = None
        if self.outcome == "aborted":
            self.frames = []
            self._set_status("Board reset after the bump. Try again.", "gray")
        else:
            self._set_status("Done! Press Reset to build a new program.", "darkgreen")
        self.redraw()

    # =========================================================================
    # REDRAW
    # =========================================================================

    def _controls(self):
        if self.board is None or self.is_playing:
            return {"run": False, "commands": False, "reset": False}
        return self.board["controls"]

    def _robot_pose(self):
        if self.frames and (self.is_playing or self.outcome == "completed"):
            return self.frames[self.current_frame]
        if self.board is None:
            return None
        return self.board["robot"]

    def _draw_robot(self, pose):
        # Triangle pointing NORTH, rotated clockwise by 90° per direction step
        half = ROBOT_SCALE_FACTOR / 2
        shape = np.array([[0, -half], [half, half], [-half, half]])
        theta = np.radians(90 * pose["dir"])
        rot = np.array([[np.cos(theta), -np.sin(theta)], [np.sin(theta), np.cos(theta)]])
        cx, cy = pose["x"] + 0.5, pose["y"] + 0.5
        if self.shaking:
            cx += 0.12
        pts = shape @ rot.T + np.array([cx, cy])
        color = 'red' if self.shaking else 'royalblue'
        self.ax.add_patch(patches.Polygon(pts, closed=True, color=color, zorder=3))

    def _draw_slots(self, ax, queue):
        ax.clear()
        ax.set_xlim(0, queue["capacity"])
        ax.set_ylim(0, 1)
        ax.axis('off')
        ax.set_title(f"{queue['name'].title()} board", fontsize=8, loc='left')
        for i, command in enumerate(queue["slots"]):
            ax.add_patch(patches.Rectangle((i + 0.05, 0.05), 0.9, 0.9, fill=False, ec='gray'))
            if command is not None:
                ax.add_patch(patches.Rectangle((i + 0.15, 0.15), 0.7, 0.7, color=BLOCK_COLORS[command]))

    def _paint_button(self, btn, color):
        # Button.color only applies after the next hover, so paint the axes too
        btn.color = color
        btn.ax.set_facecolor(color)

    def _paint_buttons(self):
        controls = self._controls()
        for btn in self.entry_buttons:
            self._paint_button(btn, ENABLED_COLOR if controls["commands"] else DISABLED_COLOR)
        self._paint_button(self.btn_run, "lightgreen" if controls["run"] else DISABLED_COLOR)
        self._paint_button(self.btn_reset, "salmon" if controls["reset"] else DISABLED_COLOR)

    def redraw(self):
        self.ax.clear()
        self.ax.set_xlim(0, GRID_SIZE)
        self.ax.set_ylim(GRID_SIZE, 0)   # row 0 at the top
        self.ax.set_xticks(range(GRID_SIZE + 1))
        self.ax.set_yticks(range(GRID_SIZE + 1))
        self.ax.grid(True, linestyle=':', alpha=0.6)
        self.ax.set_aspect('equal')

        pose = self._robot_pose()
        if pose is not None:
            self._draw_robot(pose)
            frame_info = f"Step {self.current_frame}/{len(self.frames) - 1}" if self.is_playing else "Edit mode"
            self.ax.set_title(
                f"{frame_info}\nRobot at ({pose['x']}, {pose['y']}) facing {DIR_NAMES[pose['dir']]}",
                fontsize=9
            )

        if self.board is not None:
            self._draw_slots(self.ax_main, self.board["main"])
            self._draw_slots(self.ax_func, self.board["function"])

        self._paint_buttons()
        self.fig.canvas.draw_idle()

    def _set_status(self, msg, color="gray"):
        self.status_text.set_text(f"Status: {msg}")
        self.status_text.set_color(color)


if __name__ == "__main__":
    InteractiveDashboard()
