import os

# Core (bastion control plane) base URL; endpoint paths are appended to it
CORE_HOST = os.getenv("CORE_HOST", "http://127.0.0.1:8080")

# SSL verification (Core commonly runs behind a self-signed certificate)
CORE_VERIFY_SSL = os.getenv("CORE_VERIFY_SSL", "false").lower() == "true"

# Request timeouts (seconds)
CORE_CONNECT_TIMEOUT = int(os.getenv("CORE_CONNECT_TIMEOUT", "5"))
CORE_READ_TIMEOUT = int(os.getenv("CORE_READ_TIMEOUT", "30"))
REQUEST_TIMEOUT = (CORE_CONNECT_TIMEOUT, CORE_READ_TIMEOUT)

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
