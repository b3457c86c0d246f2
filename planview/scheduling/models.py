"""
Value objects for the scheduling core.

All records are frozen; operators build new records with ``dataclasses.replace``
instead of editing them in place. ``to_dict``/``from_dict`` use the camelCase
field names of the saved-plan snapshot.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from planview.datetime_utils import format_iso_date, parse_iso_date


class HolidayType(Enum):
    FULL = "full"
    HALF_AM = "half-am"
    HALF_PM = "half-pm"


@dataclass(frozen=True)
class HolidayDetail:
    type: HolidayType
    name: Optional[str] = None

    @property
    def is_full(self) -> bool:
        return self.type is HolidayType.FULL

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "name": self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HolidayDetail":
        return cls(type=HolidayType(data.get("type", "full")), name=data.get("name"))


@dataclass(frozen=True)
class LearningCurvePoint:
    day: int
    efficiency: float

    def to_dict(self) -> Dict[str, Any]:
        return {"day": self.day, "efficiency": self.efficiency}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LearningCurvePoint":
        return cls(day=int(data["day"]), efficiency=float(data["efficiency"]))


@dataclass(frozen=True)
class LearningCurveDefinition:
    """A style's efficiency ramp plus the machine parameters that turn it into output."""
    id: str
    points: Tuple[LearningCurvePoint, ...]
    smv: Optional[float]
    working_minutes_per_day: float
    operators_count: int
    name: str = ""
    curve_type: str = "Custom"
    description: Optional[str] = None

    @property
    def has_capacity_model(self) -> bool:
        return self.smv is not None and self.smv > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "curveType": self.curve_type,
            "points": [p.to_dict() for p in self.points],
            "smv": self.smv,
            "workingMinutesPerDay": self.working_minutes_per_day,
            "operatorsCount": self.operators_count,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LearningCurveDefinition":
        smv = data.get("smv")
        return cls(
            id=data["id"],
            points=tuple(LearningCurvePoint.from_dict(p) for p in data.get("points") or []),
            smv=float(smv) if smv is not None else None,
            working_minutes_per_day=float(data.get("workingMinutesPerDay") or 0),
            operators_count=int(data.get("operatorsCount") or 0),
            name=data.get("name", ""),
            curve_type=data.get("curveType", "Custom"),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class DailyProductionEntry:
    date: date
    efficiency: float
    capacity: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": format_iso_date(self.date),
            "efficiency": self.efficiency,
            "capacity": self.capacity,
        }


@dataclass(frozen=True)
class DailySegment:
    """One day of a vertical task's plan."""
    date: date
    style_code: str
    planned_qty: int
    efficiency: Optional[float] = None
    cumulative_qty: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": format_iso_date(self.date),
            "styleCode": self.style_code,
            "plannedQty": self.planned_qty,
            "efficiency": self.efficiency,
            "cumulativeQty": self.cumulative_qty,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailySegment":
        efficiency = data.get("efficiency")
        return cls(
            date=parse_iso_date(data["date"]),
            style_code=data.get("styleCode", ""),
            planned_qty=int(round(float(data.get("plannedQty") or 0))),
            efficiency=float(efficiency) if efficiency is not None else None,
            cumulative_qty=int(round(float(data.get("cumulativeQty") or 0))),
        )


@dataclass(frozen=True)
class Order:
    """
    An order (or a derived fragment of one) before or after placement.

    ``base_order_id`` names the originating order and is fixed when a fragment
    is created; it defaults to ``id`` for orders entered directly.
    """
    id: str
    buyer: str
    style: str
    quantity: int
    requested_ship_date: Optional[date] = None
    product_type: Optional[str] = None
    reason: str = ""
    learning_curve_id: Optional[str] = None
    image_hint: Optional[str] = None
    base_order_id: Optional[str] = None

    def __post_init__(self):
        if self.base_order_id is None:
            object.__setattr__(self, "base_order_id", self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "baseOrderId": self.base_order_id,
            "buyer": self.buyer,
            "style": self.style,
            "productType": self.product_type,
            "quantity": self.quantity,
            "requestedShipDate": format_iso_date(self.requested_ship_date),
            "reason": self.reason,
            "learningCurveId": self.learning_curve_id,
            "imageHint": self.image_hint,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        """
        Raises:
            ValueError: If the quantity is not a whole number or is negative
        """
        quantity = int(data.get("quantity") or 0)
        if quantity < 0:
            raise ValueError(f"Order {data['id']} has a negative quantity ({quantity})")
        return cls(
            id=str(data["id"]),
            buyer=data.get("buyer") or "",
            style=data.get("style") or "",
            quantity=quantity,
            requested_ship_date=parse_iso_date(data.get("requestedShipDate")),
            product_type=data.get("productType"),
            reason=data.get("reason") or "",
            learning_curve_id=data.get("learningCurveId"),
            image_hint=data.get("imageHint"),
            base_order_id=data.get("baseOrderId"),
        )


@dataclass(frozen=True)
class SchedulableResource:
    id: str
    name: str
    capacity: float

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "capacity": self.capacity}


@dataclass(frozen=True)
class TnaActivity:
    activity_name: str
    responsible: str
    start_date: Optional[date]
    end_date: Optional[date]
    remarks: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activityName": self.activity_name,
            "responsible": self.responsible,
            "startDate": format_iso_date(self.start_date),
            "endDate": format_iso_date(self.end_date),
            "remarks": self.remarks,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TnaActivity":
        return cls(
            activity_name=data.get("activityName", ""),
            responsible=data.get("responsible", ""),
            start_date=parse_iso_date(data.get("startDate")),
            end_date=parse_iso_date(data.get("endDate")),
            remarks=data.get("remarks"),
        )


@dataclass(frozen=True)
class TnaPlan:
    """Time-and-action plan attached to a task; carried through operators untouched."""
    plan_name: str
    activities: Tuple[TnaActivity, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "planName": self.plan_name,
            "activities": [a.to_dict() for a in self.activities],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TnaPlan":
        return cls(
            plan_name=data.get("planName", ""),
            activities=tuple(TnaActivity.from_dict(a) for a in data.get("activities") or []),
        )


def _common_task_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    order = data.get("originalOrderDetails")
    tna = data.get("tnaPlan")
    return {
        "id": str(data["id"]),
        # older snapshots stored the line under "lineId"
        "resource_id": str(data.get("resourceId") or data.get("lineId") or ""),
        "start_date": parse_iso_date(data["startDate"]),
        "end_date": parse_iso_date(data["endDate"]),
        "original_order_details": Order.from_dict(order) if order else None,
        "color": data.get("color"),
        "display_color": data.get("displayColor"),
        "learning_curve_id": data.get("learningCurveId"),
        "merged_order_ids": tuple(data.get("mergedOrderIds") or ()),
        "tna_plan": TnaPlan.from_dict(tna) if tna else None,
    }


@dataclass(frozen=True)
class HorizontalTask:
    """Coarse grid view of a scheduled task."""
    id: str
    resource_id: str
    start_date: date
    end_date: date
    label: str
    original_order_details: Optional[Order] = None
    color: Optional[str] = None
    display_color: Optional[str] = None
    learning_curve_id: Optional[str] = None
    merged_order_ids: Tuple[str, ...] = ()
    tna_plan: Optional[TnaPlan] = None

    @property
    def base_order_id(self) -> str:
        if self.original_order_details is None:
            return self.id
        return self.original_order_details.base_order_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "resourceId": self.resource_id,
            "startDate": format_iso_date(self.start_date),
            "endDate": format_iso_date(self.end_date),
            "label": self.label,
            "color": self.color,
            "displayColor": self.display_color,
            "originalOrderDetails": self.original_order_details.to_dict() if self.original_order_details else None,
            "learningCurveId": self.learning_curve_id,
            "mergedOrderIds": list(self.merged_order_ids),
            "tnaPlan": self.tna_plan.to_dict() if self.tna_plan else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HorizontalTask":
        return cls(label=data.get("label") or "", **_common_task_fields(data))


@dataclass(frozen=True)
class VerticalTask:
    """Detailed timeline view of a scheduled task, carrying the day-by-day plan."""
    id: str
    resource_id: str
    start_date: date
    end_date: date
    order_name: str
    daily_data: Tuple[DailySegment, ...] = ()
    image_hint: Optional[str] = None
    original_order_details: Optional[Order] = None
    color: Optional[str] = None
    display_color: Optional[str] = None
    learning_curve_id: Optional[str] = None
    merged_order_ids: Tuple[str, ...] = ()
    tna_plan: Optional[TnaPlan] = None

    @property
    def base_order_id(self) -> str:
        if self.original_order_details is None:
            return self.id
        return self.original_order_details.base_order_id

    @property
    def planned_total(self) -> int:
        return sum(segment.planned_qty for segment in self.daily_data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "resourceId": self.resource_id,
            "startDate": format_iso_date(self.start_date),
            "endDate": format_iso_date(self.end_date),
            "orderName": self.order_name,
            "imageHint": self.image_hint,
            "dailyData": [segment.to_dict() for segment in self.daily_data],
            "color": self.color,
            "displayColor": self.display_color,
            "originalOrderDetails": self.original_order_details.to_dict() if self.original_order_details else None,
            "learningCurveId": self.learning_curve_id,
            "mergedOrderIds": list(self.merged_order_ids),
            "tnaPlan": self.tna_plan.to_dict() if self.tna_plan else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VerticalTask":
        return cls(
            order_name=data.get("orderName") or "",
            image_hint=data.get("imageHint"),
            daily_data=tuple(DailySegment.from_dict(d) for d in data.get("dailyData") or []),
            **_common_task_fields(data),
        )


@dataclass
class PlanData:
    """The snapshot handed to a plan store."""
    horizontal_tasks: List[HorizontalTask] = field(default_factory=list)
    vertical_tasks: List[VerticalTask] = field(default_factory=list)
    bucket_scheduled_tasks: List[Dict[str, Any]] = field(default_factory=list)
    bucket_unscheduled_orders: List[Order] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "horizontalTasks": [t.to_dict() for t in self.horizontal_tasks],
            "verticalTasks": [t.to_dict() for t in self.vertical_tasks],
            "bucketScheduledTasks": list(self.bucket_scheduled_tasks),
            "bucketUnscheduledOrders": [o.to_dict() for o in self.bucket_unscheduled_orders],
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PlanData":
        data = data or {}
        return cls(
            horizontal_tasks=[HorizontalTask.from_dict(t) for t in data.get("horizontalTasks") or []],
            vertical_tasks=[VerticalTask.from_dict(t) for t in data.get("verticalTasks") or []],
            bucket_scheduled_tasks=list(data.get("bucketScheduledTasks") or []),
            bucket_unscheduled_orders=[Order.from_dict(o) for o in data.get("bucketUnscheduledOrders") or []],
        )
