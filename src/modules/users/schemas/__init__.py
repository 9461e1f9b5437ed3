from .user_schemas import (
    UserSummary, UserResponse, UserUpdate, InitialEnableRequest, UserEnvelope
)

__all__ = [
    'UserSummary', 'UserResponse', 'UserUpdate', 'InitialEnableRequest', 'UserEnvelope'
]
