"""
Built-in master data: standard learning curves and starter production lines.
"""
from typing import List

from planview.scheduling.learning_curve import generate_standard_points
from planview.scheduling.models import LearningCurveDefinition, SchedulableResource


def default_learning_curves() -> List[LearningCurveDefinition]:
    return [
        LearningCurveDefinition(
            id='lc-simple-tee',
            name='Simple T-Shirt Curve',
            curve_type='Simple',
            points=tuple(generate_standard_points(45, 80, 5)),
            smv=8,
            working_minutes_per_day=480,
            operators_count=20,
            description='Basic t-shirts: quick learning, high volume.',
        ),
        LearningCurveDefinition(
            id='lc-complex-jacket',
            name='Complex Jacket Curve',
            curve_type='Complex',
            points=tuple(generate_standard_points(30, 70, 15)),
            smv=45,
            working_minutes_per_day=480,
            operators_count=25,
            description='Multi-panel jackets with many operations; slow ramp.',
        ),
        LearningCurveDefinition(
            id='lc-standard-polo',
            name='Standard Polo Shirt',
            curve_type='Standard',
            points=tuple(generate_standard_points(40, 75, 10)),
            smv=15,
            working_minutes_per_day=480,
            operators_count=22,
            description='Standard polo shirt line.',
        ),
        LearningCurveDefinition(
            id='lc-very-fast',
            name='Very Fast Item Curve',
            curve_type='Simple',
            points=tuple(generate_standard_points(60, 90, 3)),
            smv=5,
            working_minutes_per_day=480,
            operators_count=15,
            description='Very simple items or repeat orders.',
        ),
        LearningCurveDefinition(
            id='lc-moderate-dress',
            name='Moderate Dress Curve',
            curve_type='Standard',
            points=tuple(generate_standard_points(35, 72, 12)),
            smv=25,
            working_minutes_per_day=480,
            operators_count=18,
            description='Dresses of moderate complexity.',
        ),
    ]


def default_production_lines() -> List[SchedulableResource]:
    return [
        SchedulableResource(id='line-1', name='Sewing Line 1', capacity=600),
        SchedulableResource(id='line-2', name='Sewing Line 2', capacity=600),
        SchedulableResource(id='line-3', name='Sewing Line 3', capacity=450),
        SchedulableResource(id='line-4', name='Sewing Line 4', capacity=450),
    ]
