import os


class Settings:
    PROJECT_NAME: str = "synquiz"
    DEBUG: bool = os.environ.get("SYNQUIZ_DEBUG", "") == "1"
    LOG_DIR: str = "log"
    LOG_FILE: str = "synquiz.log"
    LOG_TO_DB: bool = False
    DB_DIR: str = os.environ.get("SYNQUIZ_DB_DIR", "db")
    DB_FILE: str = "synquiz.db"
    VOCAB_DIR: str = os.environ.get("SYNQUIZ_VOCAB_DIR", "vocabulary")
    QUESTIONS_PER_PLAYER: int = 10
    DAILY_QUESTIONS: int = 10
    FAILED_STATS_TTL_SECONDS: int = 30
    SESSION_COOKIE_NAME: str = "quiz_session_id"
    SESSION_TIMEOUT_MINUTES: int = 120
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")


settings = Settings()
