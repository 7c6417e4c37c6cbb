# ==============================================================================
# TASK SCHEDULER MODULE
# ==============================================================================
# Owns the single active Task and steps it.
#
# Policy:
#   - At most one task is active at a time.
#   - Requesting a task while another one is active aborts and discards the
#     active one if it can be aborted (its completion handlers do NOT run),
#     otherwise the request is rejected and the new task is never init()'d.
#   - step() performs one increment of the active task. When the task is
#     done the active slot is cleared first and then its completion
#     handlers run, so a handler may immediately request a follow-up task.
#
# Any driver can call step(): a GUI idle timer (see gui/task_runner.py), a
# CLI loop via run_until_idle(), or a test.
# ==============================================================================

from typing import Callable, Optional

from .base import Task

ProgressCallback = Callable[[int, int, str], None]


class TaskScheduler:
    """
    Single-slot cooperative task scheduler.

    Attributes:
        progress_callback: Optional callable(current, maximum, text) called
                           after every step and once with an empty text
                           when a task finishes
    """

    def __init__(self, progress_callback: Optional[ProgressCallback] = None):
        self._current: Optional[Task] = None
        self.progress_callback = progress_callback

    @property
    def current_task(self) -> Optional[Task]:
        return self._current

    @property
    def has_task(self) -> bool:
        return self._current is not None

    def perform_task(self, task: Task) -> bool:
        """
        Make `task` the active task.

        Returns:
            True if the task was accepted and initialized, False if it was
            rejected (active task not abortable) or its init() failed
        """
        current = self._current
        if current is not None:
            if not current.can_abort():
                print(f"[WARN] Rejected {type(task).__name__}: "
                      f"{type(current).__name__} cannot be aborted")
                return False
            print(f"[INFO] Aborting {type(current).__name__} for {type(task).__name__}")
            current.abort()
            self._current = None

        if not task.init():
            return False

        self._current = task
        self._report(task.current_progress, task.max_progress, task.text)
        return True

    def step(self) -> bool:
        """
        Perform one increment of the active task.

        Returns:
            True if a task is still active afterwards
        """
        task = self._current
        if task is None:
            return False

        if not task.is_done():
            try:
                task.perform()
            except Exception as e:
                self._current = None
                print(f"[ERROR] {type(task).__name__} failed: {e}")
                raise

        if not task.is_done():
            self._report(task.current_progress, task.max_progress, task.text)
            return True

        self._current = None
        self._report(task.max_progress, task.max_progress, "")
        task.invoke_on_complete_handlers()
        return self._current is not None

    def run_until_idle(self, max_steps: Optional[int] = None) -> int:
        """
        Step until no task is active (including follow-up tasks).

        Args:
            max_steps: Stop after this many steps even if work remains

        Returns:
            Number of steps performed
        """
        steps = 0
        while self._current is not None:
            if max_steps is not None and steps >= max_steps:
                break
            self.step()
            steps += 1
        return steps

    def abort_current(self, notify: bool = True) -> bool:
        """
        Abort and discard the active task (shutdown path).

        Args:
            notify: Run the aborted task's completion handlers

        Returns:
            True if no task is active any more, False if the active task
            cannot be aborted right now
        """
        task = self._current
        if task is None:
            return True
        if not task.can_abort():
            return False

        task.abort()
        self._current = None
        self._report(0, 0, "")
        if notify:
            task.invoke_on_complete_handlers()
        return True

    def _report(self, current: int, maximum: int, text: str):
        if self.progress_callback:
            self.progress_callback(current, maximum, text)
