"""Release creation, delivery and edit-block control."""

from inspection_desk.releases.service import ReleaseService

__all__ = ["ReleaseService"]
