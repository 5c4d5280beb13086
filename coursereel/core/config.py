"""Application configuration from environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from env / .env."""

    app_name: str = "CourseReel"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./coursereel.db"

    # Auth cookie signing (identity is issued by the account service)
    secret_key: str = "change-me-in-production-use-env"
    auth_cookie_name: str = "cr_auth"
    auth_token_max_age: int = 60 * 60 * 24 * 14  # 14 days

    # Generative text
    anthropic_api_key: str = ""
    anthropic_api_url: str = "https://api.anthropic.com/v1/messages"
    anthropic_version: str = "2023-06-01"
    content_model: str = "claude-3-haiku-20240307"
    scenario_model: str = "claude-sonnet-4-20250514"
    scene_timeout_seconds: float = 30.0
    topics_timeout_seconds: float = 60.0
    scenario_timeout_seconds: float = 60.0

    # Stock media
    pexels_api_key: str = ""
    pexels_photo_url: str = "https://api.pexels.com/v1/search"
    pexels_video_url: str = "https://api.pexels.com/videos/search"
    stock_timeout_seconds: float = 8.0
    stock_page_size: int = 10
    stock_top_n: int = 3

    # Speech
    elevenlabs_api_key: str = ""
    elevenlabs_api_url: str = "https://api.elevenlabs.io/v1"
    speech_timeout_seconds: float = 30.0
    speech_delay_seconds: float = 1.0  # between narration requests

    # Scenario scoring: optimal / suboptimal / poor
    optimal_points: int = 10
    suboptimal_points: int = 5
    poor_points: int = 2

    # Scene numbers above this are reserved for quiz scenes
    quiz_scene_number_base: int = 1000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def get_settings() -> Settings:
    return Settings()
