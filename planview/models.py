from flask_sqlalchemy import SQLAlchemy
from datetime import datetime

from planview.scheduling.models import (
    HolidayDetail,
    HolidayType,
    LearningCurveDefinition,
    LearningCurvePoint,
    SchedulableResource,
)

db = SQLAlchemy()


class ProductionLine(db.Model):
    """Sewing line master data."""
    __tablename__ = "production_lines"

    id = db.Column(db.Integer, primary_key=True)
    line_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)
    default_capacity = db.Column(db.Float, nullable=False, default=0)  # units per day
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_resource(self) -> SchedulableResource:
        return SchedulableResource(id=self.line_id, name=self.name, capacity=self.default_capacity or 0)

    def to_dict(self):
        return {
            'id': self.line_id,
            'name': self.name,
            'capacity': self.default_capacity,
            'sort_order': self.sort_order,
            'is_active': self.is_active,
        }

    @classmethod
    def active_resources(cls):
        '''Active lines in display order, as scheduling resources'''
        lines = cls.query.filter_by(is_active=True).order_by(cls.sort_order, cls.line_id).all()
        return [line.to_resource() for line in lines]


class LearningCurveMaster(db.Model):
    """Learning curve master data. Points are stored as a JSON list of {day, efficiency}."""
    __tablename__ = "learning_curves"

    id = db.Column(db.Integer, primary_key=True)
    curve_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)
    curve_type = db.Column(db.String(32), nullable=False, default="Custom")
    points = db.Column(db.JSON, nullable=False, default=list)
    smv = db.Column(db.Float, nullable=True)
    working_minutes_per_day = db.Column(db.Float, nullable=False, default=480)
    operators_count = db.Column(db.Integer, nullable=False, default=0)
    description = db.Column(db.Text, nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_definition(self) -> LearningCurveDefinition:
        return LearningCurveDefinition(
            id=self.curve_id,
            points=tuple(LearningCurvePoint.from_dict(p) for p in (self.points or [])),
            smv=self.smv,
            working_minutes_per_day=self.working_minutes_per_day or 0,
            operators_count=self.operators_count or 0,
            name=self.name,
            curve_type=self.curve_type,
            description=self.description,
        )

    @classmethod
    def from_definition(cls, definition: LearningCurveDefinition) -> "LearningCurveMaster":
        return cls(
            curve_id=definition.id,
            name=definition.name or definition.id,
            curve_type=definition.curve_type,
            points=[p.to_dict() for p in definition.points],
            smv=definition.smv,
            working_minutes_per_day=definition.working_minutes_per_day,
            operators_count=definition.operators_count,
            description=definition.description,
        )

    def to_dict(self):
        return self.to_definition().to_dict()


class HolidayEntry(db.Model):
    """One plant calendar day off (full day or half day)."""
    __tablename__ = "holidays"

    id = db.Column(db.Integer, primary_key=True)
    holiday_date = db.Column(db.Date, unique=True, nullable=False, index=True)
    holiday_type = db.Column(db.Enum(HolidayType, values_callable=lambda e: [m.value for m in e]),
                             nullable=False, default=HolidayType.FULL)
    name = db.Column(db.String(128), nullable=True)

    def to_detail(self) -> HolidayDetail:
        return HolidayDetail(type=self.holiday_type, name=self.name)

    def to_dict(self):
        return {
            'date': self.holiday_date.isoformat(),
            'type': self.holiday_type.value,
            'name': self.name,
        }


class SavedPlan(db.Model):
    """A named plan snapshot (horizontal, vertical and bucket collections)."""
    __tablename__ = "saved_plans"

    id = db.Column(db.Integer, primary_key=True)
    plan_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    data = db.Column(db.JSON, nullable=False, default=dict)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.plan_id,
            'name': self.name,
            'data': self.data,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
