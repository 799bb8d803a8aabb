from datetime import timedelta

from decouple import config

from .base import SECRET_KEY

ACCESS_TOKEN_LIFETIME = timedelta(minutes=config("ACCESS_TOKEN_LIFETIME_MINUTES", default=60, cast=int))
REFRESH_TOKEN_LIFETIME = timedelta(days=config("REFRESH_TOKEN_LIFETIME_DAYS", default=14, cast=int))

NINJA_JWT = {
    "ACCESS_TOKEN_LIFETIME": ACCESS_TOKEN_LIFETIME,
    "REFRESH_TOKEN_LIFETIME": REFRESH_TOKEN_LIFETIME,
    "ALGORITHM": config("JWT_ALGORITHM", default="HS256"),
    "SIGNING_KEY": config("JWT_SIGNING_KEY", default=SECRET_KEY),
    "AUDIENCE": config("JWT_AUDIENCE", default="taquilla"),
    "USER_ID_FIELD": "id",
    "USER_ID_CLAIM": "user_id",
}

NINJA_EXTRA = {
    # Rates live on the throttle classes in common.throttling.
    "NUM_PROXIES": config("NUM_PROXIES", default=1, cast=int),
}

NINJA_PAGINATION_PER_PAGE = 20
