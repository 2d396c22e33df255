from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # AI gateway (OpenAI-compatible chat completions)
    ai_gateway_api_key: str = ""
    ai_gateway_base_url: str = "https://ai.gateway.lovable.dev/v1"
    assistant_model: str = "google/gemini-3-flash-preview"
    research_model: str = "google/gemini-2.5-flash"
    search_model: str = "google/gemini-3-flash-preview"

    # YouTube
    youtube_api_key: str = ""
    youtube_search_url: str = "https://www.googleapis.com/youtube/v3/search"
    youtube_max_results: int = 3

    # ResearchMind
    research_max_related_papers: int = 8
    research_ranked_top_n: int = 5
    pipeline_stage_interval_s: float = 2.0
    pipeline_close_grace_s: float = 0.3

    # Search
    fallback_trending_limit: int = 15
    semantic_trending_limit: int = 10

    # Client side
    api_base_url: str = "http://localhost:8000"
    api_key: str = ""  # bearer token; empty disables the check on the server
    request_timeout_s: float = 60.0

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
