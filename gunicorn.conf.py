# Gunicorn configuration file
# Usage: gunicorn -c gunicorn.conf.py run:app
import multiprocessing

# Server socket
bind = "0.0.0.0:8080"
backlog = 2048

# Threaded workers; each request blocks one thread while it waits on the provisioning service
workers = 2
worker_class = "gthread"
threads = multiprocessing.cpu_count() * 4
worker_connections = 1000
timeout = 60
keepalive = 2

# Logging
accesslog = "-"  # Log to stdout
errorlog = "-"   # Log to stderr
loglevel = "info"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s"'

# Process naming
proc_name = "training-server"

# Server mechanics
daemon = False
pidfile = None
umask = 0
user = None
group = None
tmp_upload_dir = None

preload_app = False
