from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Literal, Optional, Sequence, Tuple, TypeVar

from store.models import Appointment, Product, Sale

ReportKind = Literal["all", "pending", "completed"]
REPORT_KINDS: Tuple[str, ...] = ("all", "pending", "completed")

T = TypeVar("T")


# ---------------------------
# Dashboard aggregates
# ---------------------------


def inventory_value(products: Iterable[Product]) -> float:
    """Sum of price * stock over all products; 0 for none."""
    return sum((p.price * p.stock for p in products), 0.0)


def dashboard_stats(
    appointments: Sequence[Appointment], products: Sequence[Product]
) -> Dict[str, float]:
    """
    Headline numbers for the dashboard.

    Confirmed and cancelled appointments count towards the total only, so
    pending + completed <= total.
    """
    return {
        "total_appointments": len(appointments),
        "pending_appointments": sum(1 for a in appointments if a.status == "pending"),
        "completed_appointments": sum(
            1 for a in appointments if a.status == "completed"
        ),
        "total_products": len(products),
        "inventory_value": inventory_value(products),
    }


def chart_series(appointments: Iterable[Appointment]) -> List[Tuple[date, int]]:
    """Appointment count per calendar date, oldest date first."""
    counts = Counter(a.date for a in appointments)
    return sorted(counts.items(), key=lambda item: item[0])


def report_filter(
    appointments: Sequence[Appointment], kind: ReportKind
) -> List[Appointment]:
    """Appointments for a report: all of them, or only pending / completed ones."""
    if kind == "all":
        return list(appointments)
    if kind in ("pending", "completed"):
        return [a for a in appointments if a.status == kind]
    raise ValueError(f"Unknown report kind: {kind!r}")


def recent_products(products: Sequence[Product], n: int = 3) -> List[Product]:
    """The last `n` products in collection order."""
    return list(products[-n:]) if n > 0 else []


# ---------------------------
# Sales
# ---------------------------


def sale_total(sale_price: float, extra_costs: float) -> float:
    return round((sale_price or 0.0) + (extra_costs or 0.0), 2)


def sales_revenue(sales: Iterable[Sale]) -> float:
    return sum((s.total for s in sales), 0.0)


# ---------------------------
# Weak references
# ---------------------------


def resolve_name(
    entities: Iterable[T], id: Optional[str], fallback: str = "-"
) -> str:
    """
    Name of the entity with this id, or `fallback` when the id is unset or
    no longer resolves (e.g. the referenced row was deleted).
    """
    if not id:
        return fallback
    for entity in entities:
        if getattr(entity, "id", None) == id:
            return getattr(entity, "name", fallback)
    return fallback


# ---------------------------
# Rendering helpers
# ---------------------------


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of strings.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = list(map(str, headers))
    rows = [list(map(str, row)) for row in rows]

    num_cols = len(headers)
    if aligns is None:
        aligns = ["c"] * num_cols
    elif len(aligns) != num_cols:
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {
        "l": ":---",
        "c": ":---:",
        "r": "---:",
    }

    header_line = "| " + " | ".join(headers) + " |"
    align_line = "| " + " | ".join(align_map[a] for a in aligns) + " |"
    row_lines = ["| " + " | ".join(row) + " |" for row in rows]

    return "\n".join([header_line, align_line, *row_lines])


def render_bar_chart(series: Sequence[Tuple[date, int]], width: int = 30) -> str:
    """Horizontal text bars, one line per date, scaled to the largest count."""
    if not series:
        return ""
    peak = max(count for _, count in series)
    lines = []
    for day, count in series:
        bar = "█" * max(1, round(count / peak * width))
        lines.append(f"{day.isoformat()}  {bar} {count}")
    return "\n".join(lines)
