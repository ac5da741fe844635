"""
Gunicorn configuration for production deployment.

Usage:
    gunicorn app.main:app -c gunicorn.conf.py

Run the in-process scheduler (SCHEDULER_ENABLED=true) in a single-worker
deployment only; with several workers every worker would fire the jobs.
Multi-worker deployments should leave it disabled and hit /internal/* from cron.
"""

import multiprocessing
import os

# Bind to all interfaces on port 8000
bind = "0.0.0.0:8000"

# Worker processes: CPU cores * 2 + 1 (Gunicorn recommendation)
workers = int(os.getenv("WEB_CONCURRENCY", multiprocessing.cpu_count() * 2 + 1))

# Use Uvicorn's ASGI worker for FastAPI
worker_class = "uvicorn.workers.UvicornWorker"

# Request timeout (seconds); full evaluations walk every obligation of a tenant
timeout = 120

# Keep-alive connections (seconds)
keepalive = 5

# Lets the lifespan shutdown stop the scheduler thread after an in-flight job
graceful_timeout = 30

# Logging
accesslog = "-"  # stdout
errorlog = "-"   # stderr
loglevel = "info"
