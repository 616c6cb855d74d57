import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Debug snapshot endpoint; open when empty
    DEBUG_TOKEN = os.environ.get("DEBUG_TOKEN", "")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Empty means pick per platform (see server.create_app)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Rooms
    MAX_PARTICIPANTS = int(os.environ.get("MAX_PARTICIPANTS", "8"))
    ROOM_IDLE_TTL_SEC = int(os.environ.get("ROOM_IDLE_TTL_SEC", str(24 * 60 * 60)))
    ROOM_SWEEP_INTERVAL_SEC = int(os.environ.get("ROOM_SWEEP_INTERVAL_SEC", "3600"))
    STATS_LOG_INTERVAL_SEC = int(os.environ.get("STATS_LOG_INTERVAL_SEC", "120"))

    # Test round
    DEFAULT_TIMER_DURATION = int(os.environ.get("DEFAULT_TIMER_DURATION", "30"))
    COUNTDOWN_SEC = int(os.environ.get("COUNTDOWN_SEC", "5"))
    SUBMIT_GRACE_SEC = int(os.environ.get("SUBMIT_GRACE_SEC", "5"))
    RESULTS_RESET_SEC = int(os.environ.get("RESULTS_RESET_SEC", "10"))
    TEST_WORD_COUNT = int(os.environ.get("TEST_WORD_COUNT", "200"))
