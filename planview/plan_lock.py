import threading
from contextlib import contextmanager
from typing import Dict, Optional
from datetime import datetime

from planview.logging_config import get_logger

logger = get_logger(__name__)


class PlanBusyError(RuntimeError):
    """Another operation held the plan for longer than the lock timeout."""


class _PlanLockState:
    def __init__(self):
        self.lock = threading.RLock()
        self.current_operation: Optional[str] = None
        self.holder_thread_id: Optional[int] = None
        self.acquired_at: Optional[datetime] = None
        self.depth = 0


class PlanLockManager:
    """
    One lock per plan id.

    Every read-modify-write of a saved plan runs under its plan's lock, so
    two mutations of the same plan never interleave. Mutations of different
    plans do not block each other.
    """

    def __init__(self, timeout_seconds: float = 30):
        self._registry_lock = threading.Lock()
        self._plans: Dict[str, _PlanLockState] = {}
        self._timeout_seconds = timeout_seconds

    def _state_for(self, plan_id: str) -> _PlanLockState:
        with self._registry_lock:
            state = self._plans.get(plan_id)
            if state is None:
                state = _PlanLockState()
                self._plans[plan_id] = state
            return state

    def is_locked(self, plan_id: str) -> bool:
        with self._registry_lock:
            state = self._plans.get(plan_id)
        return state is not None and state.depth > 0

    def get_current_operation(self, plan_id: str) -> Optional[str]:
        with self._registry_lock:
            state = self._plans.get(plan_id)
        return state.current_operation if state is not None and state.depth > 0 else None

    @contextmanager
    def acquire_plan_lock(self, plan_id: str, operation_name: str, timeout_seconds: Optional[float] = None):
        """
        Context manager holding the lock for one plan.

        Args:
            plan_id: Plan being read and written
            operation_name: Name of the operation acquiring the lock
            timeout_seconds: How long to wait for a running operation to finish

        Raises:
            PlanBusyError: If the lock could not be acquired in time
        """
        state = self._state_for(plan_id)
        timeout = timeout_seconds if timeout_seconds is not None else self._timeout_seconds

        if not state.lock.acquire(timeout=timeout):
            logger.warning(
                "Plan lock busy",
                plan_id=plan_id,
                operation=operation_name,
                held_by=state.current_operation,
            )
            raise PlanBusyError(
                f"Plan {plan_id} is busy with '{state.current_operation}'. Try again shortly."
            )

        try:
            state.depth += 1
            if state.depth == 1:
                state.current_operation = operation_name
                state.holder_thread_id = threading.get_ident()
                state.acquired_at = datetime.now()
                logger.debug("Plan lock acquired", plan_id=plan_id, operation=operation_name)
            else:
                logger.debug("Re-entrant plan lock", plan_id=plan_id, operation=operation_name)
            yield
        finally:
            state.depth -= 1
            if state.depth == 0:
                state.current_operation = None
                state.holder_thread_id = None
                state.acquired_at = None
                logger.debug("Plan lock released", plan_id=plan_id, operation=operation_name)
            state.lock.release()

    def get_status(self) -> dict:
        """Snapshot of every plan currently locked"""
        now = datetime.now()
        with self._registry_lock:
            states = dict(self._plans)
        return {
            "locked_plans": {
                plan_id: {
                    "current_operation": state.current_operation,
                    "held_by_thread": state.holder_thread_id,
                    "held_for_seconds": (now - state.acquired_at).total_seconds() if state.acquired_at else 0,
                }
                for plan_id, state in states.items()
                if state.depth > 0
            },
            "timestamp": now.isoformat(),
            "timeout_seconds": self._timeout_seconds,
        }


# Global instance - create once and reuse
plan_lock_manager = PlanLockManager()
