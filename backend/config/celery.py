"""
Celery configuration for the boatyard backend.
"""

import os

from celery import Celery

# Set the default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('boatyard')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django apps.
app.autodiscover_tasks()

# Configure task routes
app.conf.task_routes = {
    'application.tasks.project_tasks.*': {'queue': 'lifecycle'},
    'application.tasks.quote_tasks.*': {'queue': 'maintenance'},
}

# Configure task schedules (periodic tasks)
app.conf.beat_schedule = {
    'scan-expired-quotes': {
        'task': 'application.tasks.quote_tasks.scan_expired_quotes',
        'schedule': 86400.0,  # Every 24 hours
    },
}
