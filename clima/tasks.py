import logging
from datetime import datetime, timedelta
from pathlib import Path

from celery import shared_task
from celery.schedules import crontab
from flask import current_app

from .report import build_summary, render_report
from .routes.export import report_filename
from .stats import report_data, stored_stats
from .submission import refresh_stats

logger = logging.getLogger(__name__)


@shared_task(name="clima.refresh_survey_stats")
def refresh_survey_stats():
    """Recount responses into survey_stats (repairs a counter left stale by a failed submission)"""
    refresh_stats()
    stats = stored_stats()
    logger.info(f"Survey stats refreshed: {stats.total_responses} responses")
    return {"total_responses": stats.total_responses,
            "last_updated": stats.last_updated.isoformat()}


@shared_task(name="clima.generate_daily_report")
def generate_daily_report():
    """Render the print-ready report into REPORT_DIR"""
    report_dir = Path(current_app.config["REPORT_DIR"])
    report_dir.mkdir(parents=True, exist_ok=True)

    summary = build_summary(report_data())
    path = report_dir / report_filename()
    path.write_text(render_report(summary, with_charts=True), encoding="utf-8")

    logger.info(f"Daily report generated: {path.name} ({summary['totalResponses']} responses)")
    return {
        "file": path.name,
        "total_responses": summary["totalResponses"],
        "general_satisfaction": summary["generalSatisfaction"],
        "generated_at": datetime.now().isoformat(),
    }


@shared_task(name="clima.cleanup_old_reports")
def cleanup_old_reports():
    """Remove generated reports older than REPORT_RETENTION_DAYS"""
    report_dir = Path(current_app.config["REPORT_DIR"])
    if not report_dir.is_dir():
        return {"removed_count": 0}

    cutoff = datetime.now() - timedelta(days=current_app.config["REPORT_RETENTION_DAYS"])
    removed_count = 0
    for path in report_dir.glob("*.html"):
        if datetime.fromtimestamp(path.stat().st_mtime) < cutoff:
            try:
                path.unlink()
                removed_count += 1
                logger.info(f"Removed old report: {path.name}")
            except OSError as e:
                logger.error(f"Error removing report {path.name}: {str(e)}")

    logger.info(f"Cleanup complete. Removed {removed_count} old reports.")
    return {"removed_count": removed_count}


BEAT_SCHEDULE = {
    # the counter is advisory; a periodic recount keeps it honest
    "refresh-survey-stats": {
        "task": "clima.refresh_survey_stats",
        "schedule": crontab(minute="*/30"),
    },
    "daily-report": {
        "task": "clima.generate_daily_report",
        "schedule": crontab(hour=6, minute=0),
    },
    "cleanup-old-reports": {
        "task": "clima.cleanup_old_reports",
        "schedule": crontab(hour=2, minute=0),
    },
}
