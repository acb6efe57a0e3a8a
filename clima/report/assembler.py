# clima/report/assembler.py
"""
Summary metrics of the climate report.

Everything here is a pure function of already aggregated data, so the same
numbers feed the JSON dashboard panels and the exported HTML documents.
"""
from typing import Mapping, Optional

import numpy as np

from ..taxonomy import SATISFACTION_FIELDS

EXCELLENT = "Excellent"
GOOD = "Good"
REGULAR = "Regular"
NEEDS_ATTENTION = "Needs Attention"

# (minimum average on the 1-5 scale, status); percentage thresholds are avg * 20
AVERAGE_THRESHOLDS = (
    (4.0, EXCELLENT),
    (3.5, GOOD),
    (3.0, REGULAR),
)
PERCENTAGE_THRESHOLDS = tuple((avg * 20, status) for avg, status in AVERAGE_THRESHOLDS)

STATUS_LABELS = {
    EXCELLENT: "Excelente",
    GOOD: "Bom",
    REGULAR: "Regular",
    NEEDS_ATTENTION: "Necessita Atenção",
}
STATUS_CSS = {
    EXCELLENT: "status-excelente",
    GOOD: "status-bom",
    REGULAR: "status-regular",
    NEEDS_ATTENTION: "status-atencao",
}
STATUS_COLORS = {
    EXCELLENT: "#10b981",
    GOOD: "#3b82f6",
    REGULAR: "#f59e0b",
    NEEDS_ATTENTION: "#ef4444",
}

NOT_AVAILABLE = "N/A"
HEALTHY_SATISFACTION = 70


_WEEKDAYS_PT = ("segunda-feira", "terça-feira", "quarta-feira", "quinta-feira",
                "sexta-feira", "sábado", "domingo")
_MONTHS_PT = ("janeiro", "fevereiro", "março", "abril", "maio", "junho", "julho",
              "agosto", "setembro", "outubro", "novembro", "dezembro")


def format_generated_at(moment) -> str:
    """'segunda-feira, 19 de outubro de 2026 às 14:05' (no locale dependency)."""
    return (f"{_WEEKDAYS_PT[moment.weekday()]}, {moment.day} de {_MONTHS_PT[moment.month - 1]} "
            f"de {moment.year} às {moment:%H:%M}")


def _classify(value, thresholds):
    for minimum, status in thresholds:
        if value >= minimum:
            return status
    return NEEDS_ATTENTION


def average_status(average: float) -> str:
    return _classify(average, AVERAGE_THRESHOLDS)


def percentage_status(percentage: float) -> str:
    return _classify(percentage, PERCENTAGE_THRESHOLDS)


def general_satisfaction(averages: Mapping[str, Optional[float]]) -> float:
    """Mean of the areas that have data, mapped from 1-5 onto 0-100. 0 when none do."""
    values = [v for v in averages.values() if v is not None]
    if not values:
        return 0.0
    return float(np.mean(values)) * 20


def percentage_of(count: int, total: int) -> float:
    if not total:
        return 0.0
    return count / total * 100


def rank_distribution(rows, total: int):
    """Sort [{category, count}] by count (stable) and attach percentage of total."""
    ranked = sorted(rows, key=lambda r: r["count"], reverse=True)
    return [dict(r, percentage=round(percentage_of(r["count"], total), 1)) for r in ranked]


def top_category(rows) -> dict:
    if not rows:
        return {"category": NOT_AVAILABLE, "count": 0}
    best = max(rows, key=lambda r: r["count"])
    return {"category": best["category"], "count": best["count"]}


def area_rows(averages: Mapping[str, Optional[float]]):
    """Per-area table rows for the areas that have data, best first."""
    rows = []
    for field, average in averages.items():
        if average is None:
            continue
        average = round(average, 2)
        status = average_status(average)
        rows.append({
            "field": field,
            "name": SATISFACTION_FIELDS.get(field, field),
            "average": average,
            "percentage": round(average * 20, 1),
            "status": status,
            "statusLabel": STATUS_LABELS[status],
        })
    rows.sort(key=lambda r: r["average"], reverse=True)
    return rows


def build_summary(data: Mapping) -> dict:
    """
    Assemble the report structure from raw aggregates.

    ``data`` keys: totalResponses, setorDistribution, ranchoDistribution,
    satisfactionAverages, timeline, generatedAt.
    """
    total = int(data.get("totalResponses") or 0)
    averages = dict(data.get("satisfactionAverages") or {})
    sectors = rank_distribution(data.get("setorDistribution") or [], total)
    messes = rank_distribution(data.get("ranchoDistribution") or [], total)

    # classified at the precision it is printed with
    general = round(general_satisfaction(averages), 1)
    general_status = percentage_status(general)
    areas = area_rows(averages)
    top = top_category(sectors)

    return {
        "totalResponses": total,
        "generalSatisfaction": general,
        "generalStatus": general_status,
        "generalStatusLabel": STATUS_LABELS[general_status],
        "healthy": general >= HEALTHY_SATISFACTION,
        "topSector": top["category"],
        "topSectorCount": top["count"],
        "sectorsParticipating": len(sectors),
        "setorDistribution": sectors,
        "ranchoDistribution": messes,
        "satisfactionAverages": averages,
        "areas": areas,
        "highlights": [a["name"] for a in areas if a["status"] == EXCELLENT],
        "attentionAreas": [a["name"] for a in areas if a["status"] == NEEDS_ATTENTION],
        "timeline": list(data.get("timeline") or []),
        "generatedAt": data.get("generatedAt"),
    }
