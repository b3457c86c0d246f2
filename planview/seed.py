from sqlalchemy.exc import SQLAlchemyError

from planview.logging_config import get_logger
from planview.models import db, LearningCurveMaster, ProductionLine
from planview.scheduling.masters import default_learning_curves, default_production_lines

logger = get_logger(__name__)


def seed_learning_curves():
    """Insert the built-in learning curves that are not in the database yet. Returns the number added."""
    existing = {row.curve_id for row in LearningCurveMaster.query.with_entities(LearningCurveMaster.curve_id)}
    added = 0
    for definition in default_learning_curves():
        if definition.id in existing:
            continue
        db.session.add(LearningCurveMaster.from_definition(definition))
        added += 1
    return added


def seed_production_lines():
    """Insert the starter sewing lines that are not in the database yet. Returns the number added."""
    existing = {row.line_id for row in ProductionLine.query.with_entities(ProductionLine.line_id)}
    added = 0
    for position, resource in enumerate(default_production_lines()):
        if resource.id in existing:
            continue
        db.session.add(ProductionLine(
            line_id=resource.id,
            name=resource.name,
            default_capacity=resource.capacity,
            sort_order=position,
        ))
        added += 1
    return added


def seed_master_data():
    """
    Seed learning curves and production lines. Existing rows are left alone,
    so running it twice adds nothing the second time.

    Returns:
        dict: counts of rows added per table
    """
    try:
        result = {
            "learning_curves_added": seed_learning_curves(),
            "production_lines_added": seed_production_lines(),
        }
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.error("Master data seed failed", exc_info=True)
        raise

    logger.info("Master data seeded", **result)
    return result
