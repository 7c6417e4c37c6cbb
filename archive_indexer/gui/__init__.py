# ==============================================================================
# GUI MODULE INIT
# ==============================================================================
# PyQt6 integration (install the "gui" extra).
#
# Components:
#   - TaskRunner: steps a TaskScheduler from the Qt event loop and re-emits
#                 its progress as signals
# ==============================================================================

from .task_runner import TaskRunner

__all__ = ['TaskRunner']
