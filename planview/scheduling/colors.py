"""
Display color rotation.

Tasks are grouped by a key that depends on the rotation mode and each group
gets the next color from a fixed palette. This is a pure derivation: the
stored task color is never changed, only ``display_color``.
"""
from dataclasses import replace
from typing import Dict, List, Sequence, TypeVar

from planview.datetime_utils import format_iso_date

ROTATION_MODES = ('order', 'product', 'productType', 'customer', 'delivery')

ROTATION_COLORS = [
    'bg-sky-500 text-white',
    'bg-emerald-500 text-white',
    'bg-amber-500 text-black',
    'bg-rose-500 text-white',
    'bg-fuchsia-500 text-white',
    'bg-indigo-500 text-white',
    'bg-lime-500 text-black',
    'bg-cyan-500 text-white',
    'bg-orange-500 text-white',
    'bg-violet-500 text-white',
    'bg-teal-500 text-white',
    'bg-pink-500 text-white',
]

T = TypeVar('T')


def rotation_key(task, rotation_mode: str) -> str:
    """Grouping key for a task under the given rotation mode."""
    order = task.original_order_details
    if order is None:
        return task.id

    if rotation_mode == 'product':
        return order.style or task.id
    if rotation_mode == 'productType':
        return order.product_type or order.style or task.id
    if rotation_mode == 'customer':
        return order.buyer or task.id
    if rotation_mode == 'delivery':
        return format_iso_date(order.requested_ship_date) or task.id
    return order.base_order_id or task.id


def assign_display_colors(tasks: Sequence[T], rotation_mode: str = 'order') -> List[T]:
    """
    Return copies of ``tasks`` with ``display_color`` set.

    Keys are colored in the order they first appear. In 'order' mode a task's
    own stored color takes precedence over the palette.

    Raises:
        ValueError: If rotation_mode is not a known mode
    """
    if rotation_mode not in ROTATION_MODES:
        raise ValueError(f"rotation_mode must be one of: {', '.join(ROTATION_MODES)}")

    palette: Dict[str, str] = {}
    colored = []
    for task in tasks:
        key = rotation_key(task, rotation_mode)
        if key not in palette:
            palette[key] = ROTATION_COLORS[len(palette) % len(ROTATION_COLORS)]
        if rotation_mode == 'order':
            display_color = task.color or palette[key]
        else:
            display_color = palette[key]
        colored.append(replace(task, display_color=display_color))
    return colored
