"""Configuration management using pydantic-settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Helper settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_prefix="WEBHELPERS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )
    
    # Public suffix list (None = list bundled with publicsuffixlist)
    suffix_list_path: Optional[str] = None
    
    # Domain matching
    label_aligned_matching: bool = True
    strict_extension: bool = False
    
    # Serialization
    serializer_indent: Optional[int] = None
    serializer_exclude_none: bool = True
    
    # Logging
    log_level: str = "INFO"


settings = Settings()
