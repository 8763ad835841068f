# Onboarding flows, poller timers and payment settlements live in process
# memory, so a single worker serves every flow; concurrency comes from threads.
bind = "0.0.0.0:8000"
wsgi_app = "portal:create_app()"
workers = 1
threads = 8
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = "info"  # override with env LOG_LEVEL

# Honour proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False
