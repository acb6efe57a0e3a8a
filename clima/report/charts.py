# clima/report/charts.py
"""Geometry of the inline SVG/CSS charts embedded in the PDF-ready report."""
import math

from .assembler import STATUS_COLORS, percentage_of

COLORS = (
    "#1e40af", "#dc2626", "#059669", "#d97706", "#7c3aed",
    "#be185d", "#0891b2", "#65a30d", "#4338ca", "#ea580c",
)

PIE_CENTER = 150
PIE_RADIUS = 120

DONUT_RADIUS = 80
DONUT_CIRCUMFERENCE = 2 * math.pi * DONUT_RADIUS

LINE_WIDTH = 300
LINE_HEIGHT = 200
LINE_LEFT = 50
LINE_TOP = 50


def _color(index):
    return COLORS[index % len(COLORS)]


def _point_on_circle(angle):
    rad = math.radians(angle - 90)  # 0 degrees at twelve o'clock
    return (round(PIE_CENTER + PIE_RADIUS * math.cos(rad), 2),
            round(PIE_CENTER + PIE_RADIUS * math.sin(rad), 2))


def pie_segments(rows):
    """Slices of [{category, count}]: cumulative percentage * 3.6 gives the angles."""
    total = sum(r["count"] for r in rows)
    if not total:
        return []

    segments = []
    cumulative = 0.0
    for index, row in enumerate(rows):
        percentage = percentage_of(row["count"], total)
        start = cumulative * 3.6
        end = (cumulative + percentage) * 3.6
        cumulative += percentage

        x1, y1 = _point_on_circle(start)
        x2, y2 = _point_on_circle(end)
        large_arc = 1 if percentage > 50 else 0
        segments.append({
            "category": row["category"],
            "count": row["count"],
            "percentage": round(percentage, 1),
            "color": _color(index),
            "startAngle": start,
            "endAngle": end,
            # a lone 100% slice has identical arc endpoints, draw it as a circle
            "full": percentage >= 100,
            "path": (f"M {PIE_CENTER},{PIE_CENTER} L {x1},{y1} "
                     f"A {PIE_RADIUS},{PIE_RADIUS} 0 {large_arc},1 {x2},{y2} Z"),
        })
    return segments


def bar_items(rows):
    """Horizontal bars scaled against the largest count of the series."""
    peak = max((r["count"] for r in rows), default=0)
    return [{
        "category": r["category"],
        "count": r["count"],
        "width": round(r["count"] / peak * 100, 1) if peak else 0.0,
        "color": _color(index),
    } for index, r in enumerate(rows)]


def satisfaction_bars(areas):
    """Bars at average * 20 percent width, coloured by the status of each area row."""
    bars = []
    for area in sorted(areas, key=lambda a: a["percentage"], reverse=True):
        value = area["percentage"]
        bars.append({
            "name": area["name"],
            "value": value,
            "width": min(max(value, 0.0), 100.0),
            "color": STATUS_COLORS[area["status"]],
        })
    return bars


def donut(percentage, status):
    value = round(percentage, 1)
    return {
        "value": value,
        "remaining": round(100 - value, 1),
        "color": STATUS_COLORS[status],
        "dash": round(value / 100 * DONUT_CIRCUMFERENCE, 2),
        "circumference": round(DONUT_CIRCUMFERENCE, 2),
    }


def line_chart(timeline):
    """Points and SVG path of the monthly participation line; None when empty."""
    if not timeline:
        return None
    peak = max(max(item["count"] for item in timeline), 1)
    spacing = LINE_WIDTH / (len(timeline) - 1) if len(timeline) > 1 else 0
    baseline = LINE_TOP + LINE_HEIGHT

    points = []
    for index, item in enumerate(timeline):
        x = round(LINE_LEFT + index * spacing, 2)
        y = round(baseline - item["count"] / peak * (LINE_HEIGHT - 20), 2)
        points.append({"x": x, "y": y, "label": item["label"], "count": item["count"]})

    path = " ".join(f"{'M' if i == 0 else 'L'} {p['x']},{p['y']}" for i, p in enumerate(points))
    return {
        "points": points,
        "path": path,
        "baseline": baseline,
        "gridWidth": round(spacing, 2) if spacing else LINE_WIDTH,
        "left": LINE_LEFT,
        "top": LINE_TOP,
        "width": LINE_WIDTH,
        "height": LINE_HEIGHT,
    }


def build_charts(summary):
    return {
        "sectors": pie_segments(summary["setorDistribution"]),
        "messes": bar_items(summary["ranchoDistribution"]),
        "areas": satisfaction_bars(summary["areas"]),
        "overall": donut(summary["generalSatisfaction"], summary["generalStatus"]),
        "timeline": line_chart(summary["timeline"]),
    }
