from .auth_schemas import CamelModel, LoginRequest, RegisterRequest, TokenResponse

__all__ = ['CamelModel', 'LoginRequest', 'RegisterRequest', 'TokenResponse']
