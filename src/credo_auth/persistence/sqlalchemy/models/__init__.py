from credo_auth.persistence.sqlalchemy.models.invalidated_token_model import (
    InvalidatedTokenModel,
)
from credo_auth.persistence.sqlalchemy.models.user_model import UserModel

__all__ = ["InvalidatedTokenModel", "UserModel"]
