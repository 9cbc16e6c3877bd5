"""Engine configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine settings loaded from environment."""

    # Application
    APP_NAME: str = "contact-import"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Field detection
    MATCH_THRESHOLD: int = 30
    FUZZY_CANDIDATE_LIMIT: int = 3
    FUZZY_SCORE_CUTOFF: float = 60.0
    SAMPLE_ROW_LIMIT: int = 5
    SAMPLE_DISPLAY_LIMIT: int = 3
    SEARCH_RESULT_LIMIT: int = 10

    # Reconciliation
    AGENT_FIELD_ID: str = "agentUid"
    UNASSIGNED_AGENT: str = "unassigned"
    PHONE_MATCH_MIN_DIGITS: int = 10

    class Config:
        env_file = ".env"


settings = Settings()
