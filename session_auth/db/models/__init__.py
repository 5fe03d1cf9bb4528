from session_auth.db.models.user import User

__all__ = ["User"]
