import pytest

from archive_indexer.core.errors import TaskAbortError
from archive_indexer.tasks import Task, TaskScheduler, TaskState


class CountingTask(Task):
    """Finishes after `steps` perform() calls."""

    def __init__(self, steps=3, accept=True, critical=False):
        super().__init__()
        self.steps = steps
        self.accept = accept
        self.critical = critical
        self.performed = 0
        self.completions = 0
        self.add_on_complete_handler(self._count_completion)

    def _count_completion(self):
        self.completions += 1

    def init(self):
        if not self.accept:
            return False
        self._max_progress = self.steps
        self._text = "counting"
        super().init()
        if self.critical:
            self.enter_critical_section()
        return True

    def perform(self):
        self.performed += 1
        self._current_progress = self.performed
        if self.performed >= self.steps:
            self.finish()


class FailingTask(Task):
    def perform(self):
        raise RuntimeError("boom")


class TestTask:
    def test_lifecycle(self):
        task = CountingTask(steps=1)
        assert task.state is TaskState.PENDING
        assert task.init()
        assert task.state is TaskState.RUNNING
        task.perform()
        assert task.is_done()
        assert task.state is TaskState.DONE
        assert not task.was_aborted

    def test_abort(self):
        task = CountingTask()
        task.init()
        task.abort()
        assert task.is_done()
        assert task.was_aborted

    def test_critical_section_blocks_abort(self):
        task = CountingTask(critical=True)
        task.init()
        assert not task.can_abort()
        with pytest.raises(TaskAbortError):
            task.abort()
        task.leave_critical_section()
        assert task.can_abort()

    def test_finish_leaves_critical_section(self):
        task = CountingTask(steps=1, critical=True)
        task.init()
        task.perform()
        assert task.can_abort()

    def test_handlers_run_once_in_order(self):
        task = CountingTask()
        calls = []
        task.add_on_complete_handler(lambda: calls.append("a"))
        task.add_on_complete_handler(lambda: calls.append("b"))
        task.invoke_on_complete_handlers()
        task.invoke_on_complete_handlers()
        assert calls == ["a", "b"]
        assert task.completions == 1


class TestScheduler:
    def test_runs_task_to_completion(self):
        scheduler = TaskScheduler()
        task = CountingTask(steps=3)
        assert scheduler.perform_task(task)
        assert scheduler.current_task is task

        assert scheduler.step()
        assert scheduler.step()
        assert not scheduler.step()

        assert task.performed == 3
        assert task.completions == 1
        assert not scheduler.has_task

    def test_step_without_task(self):
        assert TaskScheduler().step() is False

    def test_rejected_init_is_never_scheduled(self):
        scheduler = TaskScheduler()
        task = CountingTask(accept=False)
        assert not scheduler.perform_task(task)
        assert not scheduler.has_task
        assert task.state is TaskState.PENDING

    def test_abortable_task_is_replaced_silently(self):
        scheduler = TaskScheduler()
        first = CountingTask(steps=5)
        second = CountingTask(steps=1)
        scheduler.perform_task(first)
        scheduler.step()

        assert scheduler.perform_task(second)
        assert first.was_aborted
        assert first.completions == 0
        assert scheduler.current_task is second

    def test_non_abortable_task_rejects_new_requests(self):
        scheduler = TaskScheduler()
        writer = CountingTask(steps=2, critical=True)
        other = CountingTask(steps=1)
        scheduler.perform_task(writer)

        assert not scheduler.perform_task(other)
        assert scheduler.current_task is writer
        assert other.state is TaskState.PENDING
        assert not writer.was_aborted

    def test_handlers_may_queue_follow_up(self):
        scheduler = TaskScheduler()
        first = CountingTask(steps=1)
        follow_up = CountingTask(steps=1)
        first.add_on_complete_handler(lambda: scheduler.perform_task(follow_up))
        scheduler.perform_task(first)

        assert scheduler.step()
        assert scheduler.current_task is follow_up
        assert scheduler.run_until_idle() == 1
        assert follow_up.completions == 1

    def test_run_until_idle_respects_max_steps(self):
        scheduler = TaskScheduler()
        task = CountingTask(steps=10)
        scheduler.perform_task(task)
        assert scheduler.run_until_idle(max_steps=4) == 4
        assert task.performed == 4
        assert scheduler.has_task

    def test_progress_reports(self):
        reports = []
        scheduler = TaskScheduler(lambda *args: reports.append(args))
        scheduler.perform_task(CountingTask(steps=2))
        scheduler.run_until_idle()
        assert reports == [(0, 2, "counting"), (1, 2, "counting"), (2, 2, "")]

    def test_abort_current_runs_handlers(self):
        scheduler = TaskScheduler()
        task = CountingTask(steps=5)
        scheduler.perform_task(task)
        assert scheduler.abort_current()
        assert task.was_aborted
        assert task.completions == 1
        assert not scheduler.has_task

    def test_abort_current_without_notification(self):
        scheduler = TaskScheduler()
        task = CountingTask(steps=5)
        scheduler.perform_task(task)
        assert scheduler.abort_current(notify=False)
        assert task.completions == 0

    def test_abort_current_refuses_critical_task(self):
        scheduler = TaskScheduler()
        task = CountingTask(steps=2, critical=True)
        scheduler.perform_task(task)
        assert not scheduler.abort_current()
        assert scheduler.current_task is task

    def test_abort_current_when_idle(self):
        assert TaskScheduler().abort_current()

    def test_failing_task_is_dropped(self):
        scheduler = TaskScheduler()
        scheduler.perform_task(FailingTask())
        with pytest.raises(RuntimeError):
            scheduler.step()
        assert not scheduler.has_task
