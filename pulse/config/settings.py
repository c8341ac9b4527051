from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # Storage buckets
    avatars_bucket: str = "avatars"
    images_bucket: str = "posts"
    videos_bucket: str = "videos"
    max_upload_bytes: int = 10 * 1024 * 1024  # 10MB
    allowed_image_types: str = "image/jpeg,image/png,image/gif,image/webp"
    allowed_video_types: str = "video/mp4,video/webm"

    # Feed
    disappearing_post_ttl_hours: int = 24

    # Sessions
    session_idle_ttl_sec: int = 1800
    session_max_count: int = 1000
    auth_cache_ttl_sec: int = 60

    # App
    app_name: str = "pulse"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def get_allowed_image_types(self) -> List[str]:
        return [t.strip() for t in self.allowed_image_types.split(",") if t.strip()]

    def get_allowed_video_types(self) -> List[str]:
        return [t.strip() for t in self.allowed_video_types.split(",") if t.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
