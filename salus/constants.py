from enum import Enum


class Role(str, Enum):
    ADMIN = "ADMIN"
    PARTNER = "PARTNER"
    USER = "USER"


ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

API_PREFIX = "/api/v1"
