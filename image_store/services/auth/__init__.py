# Auth helpers (token handling only; authorization is left to the caller)
from .jwt_tokens import create_jwt_token, decode_jwt_token

__all__ = [
    "create_jwt_token",
    "decode_jwt_token",
]
