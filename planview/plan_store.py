"""
Saved-plan persistence.

A plan is an opaque snapshot (``PlanData``) stored under an id and a display
name. Two built-in plans always exist: they appear in listings and load as
empty plans before anything has been saved under them, and they cannot be
deleted.
"""
import random
import string
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Union

from planview.logging_config import get_logger
from planview.scheduling.models import PlanData

logger = get_logger(__name__)

DEFAULT_PLAN_ID = "plan_default"
DEFAULT_PLAN_NAME = "Default Plan"
BUCKET_PLAN_ID = "bucket_plan_default"
BUCKET_PLAN_NAME = "Default Bucket Plan"

BUILT_IN_PLANS = {
    DEFAULT_PLAN_ID: DEFAULT_PLAN_NAME,
    BUCKET_PLAN_ID: BUCKET_PLAN_NAME,
}


class PlanNotFound(Exception):
    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(f"Plan {plan_id} not found.")


class DefaultPlanProtected(Exception):
    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(f"The built-in plan {plan_id} cannot be deleted.")


def generate_plan_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=5))
    return f"plan_{int(time.time() * 1000)}_{suffix}"


def is_built_in(plan_id: str) -> bool:
    return plan_id in BUILT_IN_PLANS


@dataclass
class StoredPlan:
    id: str
    name: str
    data: PlanData = field(default_factory=PlanData)
    updated_at: Optional[datetime] = None

    def summary(self) -> Dict[str, Optional[str]]:
        return {
            "id": self.id,
            "name": self.name,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def to_dict(self) -> Dict:
        result = self.summary()
        result.update(self.data.to_dict())
        return result


def _as_snapshot(data: Union[PlanData, Dict, None]) -> Dict:
    if isinstance(data, PlanData):
        return data.to_dict()
    # round trip through PlanData so legacy keys (lineId, missing baseOrderId) are normalised
    return PlanData.from_dict(data).to_dict()


class PlanStore(ABC):
    """Port the HTTP layer saves and loads plans through."""

    @abstractmethod
    def _list_saved(self) -> List[StoredPlan]:
        ...

    @abstractmethod
    def _get_saved(self, plan_id: str) -> Optional[StoredPlan]:
        ...

    @abstractmethod
    def _put(self, plan_id: str, name: str, snapshot: Dict) -> StoredPlan:
        ...

    @abstractmethod
    def _remove(self, plan_id: str) -> bool:
        ...

    def list_plans(self) -> List[StoredPlan]:
        """Saved plans plus any built-in plan not saved yet, built-ins first."""
        saved = {p.id: p for p in self._list_saved()}
        plans = [saved.pop(plan_id, None) or StoredPlan(id=plan_id, name=name)
                 for plan_id, name in BUILT_IN_PLANS.items()]
        plans.extend(sorted(saved.values(), key=lambda p: p.name.lower()))
        return plans

    def load_plan(self, plan_id: str) -> StoredPlan:
        """
        Raises:
            PlanNotFound: If nothing is saved under a non built-in id
        """
        stored = self._get_saved(plan_id)
        if stored is not None:
            return stored
        if is_built_in(plan_id):
            return StoredPlan(id=plan_id, name=BUILT_IN_PLANS[plan_id])
        raise PlanNotFound(plan_id)

    def save_plan(self, plan_id: Optional[str], name: Optional[str], data: Union[PlanData, Dict, None]) -> StoredPlan:
        """Create or overwrite a plan. A missing id generates a new one; a missing name keeps the current one."""
        plan_id = plan_id or generate_plan_id()
        if not name:
            current = self._get_saved(plan_id)
            if current is not None:
                name = current.name
            else:
                name = BUILT_IN_PLANS.get(plan_id, "Untitled Plan")
        stored = self._put(plan_id, name.strip(), _as_snapshot(data))
        logger.info("Plan saved", plan_id=plan_id, plan_name=stored.name)
        return stored

    def rename_plan(self, plan_id: str, name: str) -> StoredPlan:
        if not name or not name.strip():
            raise ValueError("Plan name must not be empty")
        stored = self.load_plan(plan_id)
        renamed = self._put(plan_id, name.strip(), stored.data.to_dict())
        logger.info("Plan renamed", plan_id=plan_id, plan_name=renamed.name)
        return renamed

    def delete_plan(self, plan_id: str) -> None:
        """
        Raises:
            DefaultPlanProtected: For the built-in plans
            PlanNotFound: If nothing is saved under the id
        """
        if is_built_in(plan_id):
            raise DefaultPlanProtected(plan_id)
        if not self._remove(plan_id):
            raise PlanNotFound(plan_id)
        logger.info("Plan deleted", plan_id=plan_id)


class InMemoryPlanStore(PlanStore):
    def __init__(self):
        self._plans: Dict[str, StoredPlan] = {}

    def _list_saved(self) -> List[StoredPlan]:
        return list(self._plans.values())

    def _get_saved(self, plan_id: str) -> Optional[StoredPlan]:
        stored = self._plans.get(plan_id)
        if stored is None:
            return None
        # hand out a fresh copy so callers never share task lists with the store
        return StoredPlan(stored.id, stored.name, PlanData.from_dict(stored.data.to_dict()), stored.updated_at)

    def _put(self, plan_id: str, name: str, snapshot: Dict) -> StoredPlan:
        stored = StoredPlan(plan_id, name, PlanData.from_dict(snapshot), datetime.utcnow())
        self._plans[plan_id] = stored
        return stored

    def _remove(self, plan_id: str) -> bool:
        return self._plans.pop(plan_id, None) is not None


class SqlAlchemyPlanStore(PlanStore):
    """Plans kept in the ``saved_plans`` table. Needs an application context."""

    def _to_stored(self, row) -> StoredPlan:
        return StoredPlan(row.plan_id, row.name, PlanData.from_dict(row.data), row.updated_at)

    def _list_saved(self) -> List[StoredPlan]:
        from planview.models import SavedPlan

        return [self._to_stored(row) for row in SavedPlan.query.order_by(SavedPlan.name).all()]

    def _get_saved(self, plan_id: str) -> Optional[StoredPlan]:
        from planview.models import SavedPlan

        row = SavedPlan.query.filter_by(plan_id=plan_id).first()
        return self._to_stored(row) if row is not None else None

    def _put(self, plan_id: str, name: str, snapshot: Dict) -> StoredPlan:
        from planview.models import SavedPlan, db

        try:
            row = SavedPlan.query.filter_by(plan_id=plan_id).first()
            if row is None:
                row = SavedPlan(plan_id=plan_id, name=name, data=snapshot)
                db.session.add(row)
            else:
                row.name = name
                row.data = snapshot
                row.updated_at = datetime.utcnow()
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.error("Failed to save plan", plan_id=plan_id, exc_info=True)
            raise
        return self._to_stored(row)

    def _remove(self, plan_id: str) -> bool:
        from planview.models import SavedPlan, db

        row = SavedPlan.query.filter_by(plan_id=plan_id).first()
        if row is None:
            return False
        try:
            db.session.delete(row)
            db.session.commit()
        except Exception:
            db.session.rollback()
            logger.error("Failed to delete plan", plan_id=plan_id, exc_info=True)
            raise
        return True
