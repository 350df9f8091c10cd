from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "ProductCite"
    debug: bool = False

    database_url: str = "sqlite:///./productcite.db"

    default_source_prefix: str = "auto_text_v1"

    matching_max_mentions_per_message: int = 5
    matching_min_token_similarity: float = 0.75
    matching_min_fuzzy_match_ratio: float = 0.7
    matching_min_fuzzy_average_similarity: float = 0.78
    matching_min_fuzzy_score: float = 0.84
    matching_min_code_length: int = 4
    matching_min_name_length: int = 4

    ranking_default_limit: int = 5
    ranking_max_limit: int = 50

    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False


settings = Settings()
