"""
Plan View Module
Flask Blueprint for the production plan view.

Routes here load a saved plan, run one scheduling operation on it and save
the result, plus read-only access to the sewing lines, learning curves and
holiday calendar the planner works from.
"""
from flask import Blueprint

plan_view_bp = Blueprint("plan_view", __name__)

from planview.plan_view import routes  # noqa: E402,F401
