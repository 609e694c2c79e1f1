from os import getenv


def _flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    # base locale (cache hors-ligne + file d'attente)
    DATABASE_URL = getenv("DATABASE_URL", "sqlite:///./taskboard_offline.db")

    # backend distant: "rest" (PostgREST / Supabase) ou "memory" (dev, tests)
    REMOTE_BACKEND = getenv("REMOTE_BACKEND", "rest")
    REMOTE_URL = getenv("REMOTE_URL", "http://localhost:54321/rest/v1")
    REMOTE_API_KEY = getenv("REMOTE_API_KEY", "")
    REMOTE_ACCESS_TOKEN = getenv("REMOTE_ACCESS_TOKEN", "")
    REMOTE_TIMEOUT = int(getenv("REMOTE_TIMEOUT", "10"))  # secondes
    RPC_SET_POSITIONS = getenv("RPC_SET_POSITIONS", "set_positions")

    # pas d'auth: le propriétaire vient de la config
    OWNER_ID = getenv("OWNER_ID", "local-user")

    SYNC_STRICT_ENTITY_ORDER = _flag(getenv("SYNC_STRICT_ENTITY_ORDER", "false"))
    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")

settings = Settings()
