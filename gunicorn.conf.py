"""
Gunicorn settings for serving daybook.main:app in a container.

Environment overrides:
  PORT              port to bind (default 8000)
  WEB_CONCURRENCY   worker processes (default 2)
  GUNICORN_TIMEOUT  seconds before a silent worker is restarted (default 120)
  LOG_LEVEL         shared with the application logger
"""
import os

wsgi_app = "daybook.main:app"
bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

workers = int(os.environ.get("WEB_CONCURRENCY", "2"))
worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "120"))
graceful_timeout = 30

# Application events go through structlog; gunicorn only writes access lines.
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sus'
