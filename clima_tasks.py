"""
Celery worker / beat entry point.

    celery -A clima_tasks worker --loglevel=info
    celery -A clima_tasks beat --loglevel=info
"""
from clima import create_app
from clima.tasks import BEAT_SCHEDULE

flask_app = create_app()
celery = flask_app.extensions["celery"]
celery.conf.beat_schedule = BEAT_SCHEDULE
