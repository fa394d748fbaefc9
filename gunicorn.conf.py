"""
Gunicorn configuration for the job portal API
Uvicorn workers; every setting can be overridden from the environment
"""
import multiprocessing
import os

# Server socket
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")

# Worker processes
# Default (2 * CPU) + 1, capped by GUNICORN_MAX_WORKERS for small instances
_max_workers = int(os.getenv("GUNICORN_MAX_WORKERS", 4))
workers = int(os.getenv("GUNICORN_WORKERS", min(multiprocessing.cpu_count() * 2 + 1, _max_workers)))
worker_class = "uvicorn.workers.UvicornWorker"

# Worker lifecycle
max_requests = 1000
max_requests_jitter = 100

# Timeouts
# Upload + text extraction + ATS call (bounded by ATS_TIMEOUT_SECONDS) must fit in one request
timeout = int(os.getenv("GUNICORN_TIMEOUT", 60))
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = "job_portal_api"

# Logging (application logs go through structlog on stdout)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()


def when_ready(server):
    """Called just after the server is started."""
    server.log.info(f"Job portal API ready with {workers} workers")


def worker_abort(worker):
    """Called when a worker is killed after exceeding the request timeout."""
    worker.log.warning("Worker aborted (request exceeded timeout)")
