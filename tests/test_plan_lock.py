"""
Tests for per-plan locking.
"""
import threading

import pytest

from planview.plan_lock import PlanBusyError, PlanLockManager


@pytest.fixture
def manager():
    return PlanLockManager(timeout_seconds=1)


def hold_lock_in_thread(manager, plan_id, operation_name):
    """Acquire the plan lock in a worker thread and keep it until the returned event is set."""
    acquired = threading.Event()
    release = threading.Event()

    def worker():
        with manager.acquire_plan_lock(plan_id, operation_name):
            acquired.set()
            release.wait(5)

    thread = threading.Thread(target=worker)
    thread.start()
    assert acquired.wait(5)
    return release, thread


class TestPlanLockManager:
    def test_lock_is_released_after_block(self, manager):
        with manager.acquire_plan_lock("plan_a", "move_task"):
            assert manager.is_locked("plan_a")
            assert manager.get_current_operation("plan_a") == "move_task"

        assert not manager.is_locked("plan_a")
        assert manager.get_current_operation("plan_a") is None

    def test_released_when_operation_raises(self, manager):
        with pytest.raises(ValueError):
            with manager.acquire_plan_lock("plan_a", "split_task"):
                raise ValueError("rejected")

        assert not manager.is_locked("plan_a")

    def test_reentrant_in_same_thread(self, manager):
        with manager.acquire_plan_lock("plan_a", "outer"):
            with manager.acquire_plan_lock("plan_a", "inner"):
                assert manager.get_current_operation("plan_a") == "outer"
            assert manager.is_locked("plan_a")

        assert not manager.is_locked("plan_a")

    def test_busy_plan_raises_after_timeout(self, manager):
        release, thread = hold_lock_in_thread(manager, "plan_a", "pull_forward")
        try:
            with pytest.raises(PlanBusyError) as exc_info:
                with manager.acquire_plan_lock("plan_a", "move_task", timeout_seconds=0.05):
                    pass
            assert "pull_forward" in str(exc_info.value)
        finally:
            release.set()
            thread.join()

        assert not manager.is_locked("plan_a")

    def test_other_plans_do_not_block(self, manager):
        release, thread = hold_lock_in_thread(manager, "plan_a", "pull_forward")
        try:
            with manager.acquire_plan_lock("plan_b", "move_task", timeout_seconds=0.05):
                assert manager.is_locked("plan_b")
        finally:
            release.set()
            thread.join()

    def test_status_lists_locked_plans_only(self, manager):
        with manager.acquire_plan_lock("plan_a", "merge_tasks"):
            with manager.acquire_plan_lock("plan_b", "equalize_task"):
                pass
            status = manager.get_status()

        assert list(status["locked_plans"]) == ["plan_a"]
        assert status["locked_plans"]["plan_a"]["current_operation"] == "merge_tasks"
        assert status["locked_plans"]["plan_a"]["held_by_thread"] == threading.get_ident()
        assert status["timeout_seconds"] == 1
