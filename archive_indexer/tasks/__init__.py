# ==============================================================================
# TASKS MODULE INIT
# ==============================================================================
# Cooperative background work.
#
#   - Task / TaskState:  steppable, abortable, progress-reporting unit
#   - TaskScheduler:     owns the single active task and steps it
#   - ReadIndexTask:     load a persisted index
#   - WriteIndexTask:    persist an index (not abortable)
#   - ScanArchiveTask:   classify archive entries into the index
# ==============================================================================

from .base import Task, TaskState
from .scheduler import TaskScheduler
from .read_index import ReadIndexTask
from .write_index import WriteIndexTask
from .scan_archive import ScanArchiveTask, category_path_for, display_name_for

__all__ = [
    'Task',
    'TaskState',
    'TaskScheduler',
    'ReadIndexTask',
    'WriteIndexTask',
    'ScanArchiveTask',
    'category_path_for',
    'display_name_for',
]
