from user_directory.db.models.user import UserHobby, UserRow

__all__ = ["UserRow", "UserHobby"]
