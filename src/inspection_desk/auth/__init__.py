"""Session-based manager identity."""

from inspection_desk.auth.middleware import actor_id, get_user, require_authenticated_user

__all__ = ["actor_id", "get_user", "require_authenticated_user"]
