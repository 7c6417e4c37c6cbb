# ==============================================================================
# TASK BASE MODULE
# ==============================================================================
# Cooperative, steppable background work.
#
# A Task does its work in small increments: each perform() call does one
# bounded step and returns, so whoever drives the task (the scheduler, an
# idle timer, a CLI loop) stays responsive no matter how much work is left.
#
# Lifecycle:
#   PENDING --init()--> RUNNING --perform()*--> DONE
#                          |
#                          +--abort()--> ABORTED
#
#   - init() does cheap setup that may fail; a False return means the task
#     is discarded without ever being stepped.
#   - A task inside a critical section (see enter_critical_section) cannot
#     be aborted; can_abort() reports this and abort() raises.
#   - Completion handlers run exactly once, after is_done() became true,
#     whether the task finished or was aborted.
# ==============================================================================

from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, List

from ..core.errors import TaskAbortError


class TaskState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    ABORTED = "aborted"


class Task(ABC):
    """
    Base class for all background tasks.

    Subclasses implement perform() and call finish() when their work is
    complete. Progress is reported through max_progress, current_progress
    and text, which subclasses update as they go.
    """

    def __init__(self):
        self._state = TaskState.PENDING
        self._critical_section = False
        self._handlers: List[Callable[[], None]] = []
        self._handlers_invoked = False
        self._max_progress = 0
        self._current_progress = 0
        self._text = ""

    def __repr__(self):
        return f"<{type(self).__name__}(state={self._state.value})>"

    # ==========================================================================
    # LIFECYCLE
    # ==========================================================================

    def init(self) -> bool:
        """
        Prepare the task. Returns False to reject it before any step runs.

        Subclasses overriding this must call super().init() on success.
        """
        self._state = TaskState.RUNNING
        return True

    @abstractmethod
    def perform(self):
        """Do one bounded increment of work."""

    @property
    def state(self) -> TaskState:
        return self._state

    def is_done(self) -> bool:
        return self._state in (TaskState.DONE, TaskState.ABORTED)

    @property
    def was_aborted(self) -> bool:
        return self._state is TaskState.ABORTED

    def finish(self):
        """Mark the task as naturally completed."""
        self._critical_section = False
        if not self.is_done():
            self._state = TaskState.DONE

    # ==========================================================================
    # ABORTING
    # ==========================================================================

    def enter_critical_section(self):
        self._critical_section = True

    def leave_critical_section(self):
        self._critical_section = False

    def can_abort(self) -> bool:
        """Check whether abort() may be called right now."""
        return not self._critical_section

    def abort(self):
        """
        Stop the task early. Work already committed is kept.

        Raises:
            TaskAbortError: if the task is inside a critical section
        """
        if not self.can_abort():
            raise TaskAbortError(f"{type(self).__name__} cannot be aborted right now")
        if not self.is_done():
            self._state = TaskState.ABORTED

    # ==========================================================================
    # PROGRESS
    # ==========================================================================

    @property
    def max_progress(self) -> int:
        return self._max_progress

    @property
    def current_progress(self) -> int:
        return self._current_progress

    @property
    def text(self) -> str:
        """Human-readable status line."""
        return self._text

    # ==========================================================================
    # COMPLETION HANDLERS
    # ==========================================================================

    def add_on_complete_handler(self, handler: Callable[[], None]):
        """Register a callable to run once the task is done."""
        self._handlers.append(handler)

    def invoke_on_complete_handlers(self):
        """Run the completion handlers; later calls do nothing."""
        if self._handlers_invoked:
            return
        self._handlers_invoked = True
        for handler in list(self._handlers):
            handler()
