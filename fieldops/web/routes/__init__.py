"""Route modules for the fieldops web UI."""

from fieldops.web.routes import health, reports

__all__ = ["health", "reports"]
