"""Quote breakdown merging and normalization"""

from typing import Any, Optional


def is_richer(value: Any) -> bool:
    """A value worth writing over what is stored: non-empty containers/strings, any other non-null"""
    if value is None:
        return False
    if isinstance(value, (dict, list, tuple, str)):
        return len(value) > 0
    return True


def to_number(value: Any) -> Optional[float]:
    """Parse 12, 12.5, "12.50" or "$1,200" into a float; None when not numeric"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        cleaned = value.replace("$", "").replace(",", "").strip()
        try:
            return float(cleaned)
        except ValueError:
            return None
    return None


def heavy_item_count(item: dict) -> int:
    """Units of one heavy item; a missing or non-numeric count means one, 0 means none"""
    count = to_number(item.get("count"))
    if count is None:
        return 1
    return max(0, int(count))


def heavy_items_total_cents(items: Any) -> int:
    """Sum of price_cents * count over a heavy-items list"""
    if not isinstance(items, list):
        return 0
    total = 0
    for item in items:
        if not isinstance(item, dict):
            continue
        price = to_number(item.get("price_cents")) or 0
        total += int(round(price * heavy_item_count(item)))
    return total


def normalize_heavy_items_cost(breakdown: dict) -> float:
    """
    Dollar amount for heavy items.

    A non-empty ``heavy_items`` list is authoritative; otherwise a precomputed
    ``heavy_items_cost`` (dollars) or ``heavy_items_cost_cents`` is accepted.
    """
    items = breakdown.get("heavy_items")
    if isinstance(items, list) and items:
        return round(heavy_items_total_cents(items) / 100, 2)

    dollars = to_number(breakdown.get("heavy_items_cost"))
    if dollars is not None:
        return round(dollars, 2)
    cents = to_number(breakdown.get("heavy_items_cost_cents"))
    if cents is not None:
        return round(cents / 100, 2)
    # Some calculators store the dollar total directly under heavy_items
    dollars = to_number(items)
    if dollars is not None:
        return round(dollars, 2)
    return 0.0


def merge_breakdown(stored: Optional[dict], incoming: Optional[dict]) -> dict:
    """
    Merge a caller's breakdown into the stored one.

    Stored keys survive unless the incoming value is richer; the result always
    carries a numeric ``heavy_items_cost``.
    """
    merged = dict(stored or {})
    for key, value in (incoming or {}).items():
        if is_richer(value):
            merged[key] = value
        else:
            merged.setdefault(key, value)
    merged["heavy_items_cost"] = normalize_heavy_items_cost(merged)
    return merged
