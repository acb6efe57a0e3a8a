from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .assembler import STATUS_CSS, build_summary
from .charts import build_charts

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_report(summary: dict, with_charts: bool = False) -> str:
    """Self-contained HTML document for a report summary (see build_summary)."""
    template = _env.get_template("report_pdf.html" if with_charts else "report.html")
    return template.render(
        summary=summary,
        charts=build_charts(summary) if with_charts else None,
        status_css=STATUS_CSS,
    )


__all__ = ["build_summary", "render_report"]
