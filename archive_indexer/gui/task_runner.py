# ==============================================================================
# TASK RUNNER MODULE
# ==============================================================================
# Drives a TaskScheduler from the Qt event loop.
#
# A zero-interval QTimer calls step() whenever the event loop is idle, so
# one task increment runs between UI events and the window never freezes.
# The timer stops by itself once the scheduler has no active task; call
# wake() (or perform_task()) after queueing new work.
#
# Usage:
#   runner = TaskRunner(browser.scheduler)
#   runner.progress.connect(progress_bar.update)
#   browser.open_archive(path)
#   runner.wake()
# ==============================================================================

from typing import Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from ..tasks.base import Task
from ..tasks.scheduler import TaskScheduler


class TaskRunner(QObject):
    """Idle-time driver for a TaskScheduler."""

    progress = pyqtSignal(int, int, str)  # current, maximum, text
    idle = pyqtSignal()                   # no active task left
    failed = pyqtSignal(str)              # a task raised; message

    def __init__(self, scheduler: Optional[TaskScheduler] = None,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self.scheduler = scheduler if scheduler is not None else TaskScheduler()
        self.scheduler.progress_callback = self.progress.emit

        self._timer = QTimer(self)
        self._timer.setInterval(0)
        self._timer.timeout.connect(self.step)

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    def wake(self):
        """Start stepping if there is work to do."""
        if self.scheduler.has_task and not self._timer.isActive():
            self._timer.start()

    def stop(self):
        self._timer.stop()

    def perform_task(self, task: Task) -> bool:
        """Hand a task to the scheduler and start stepping it."""
        accepted = self.scheduler.perform_task(task)
        self.wake()
        return accepted

    def step(self):
        """Perform one scheduler step (timer slot)."""
        try:
            active = self.scheduler.step()
        except Exception as e:
            self._timer.stop()
            self.failed.emit(str(e))
            return

        if not active:
            self._timer.stop()
            self.idle.emit()
