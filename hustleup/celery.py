"""
Celery application for HustleUp.

Email and SMS delivery for gig events runs on Celery workers so a slow SMTP
server or Twilio call never holds up an API request.
"""

import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hustleup.settings')

app = Celery('hustleup')

# All celery-related configuration keys carry a `CELERY_` prefix in settings.
app.config_from_object('django.conf:settings', namespace='CELERY')

app.autodiscover_tasks()
