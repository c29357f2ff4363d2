"""HTTP routers."""

from inspection_desk.routes import comparison, releases, status, versioning

__all__ = ["comparison", "releases", "status", "versioning"]
