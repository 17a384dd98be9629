"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_env: str = "development"
    app_debug: bool = True

    # LLM provider: "groq" (hosted) or "ollama" (local)
    llm_provider: str = "groq"

    # Groq (OpenAI-compatible chat completions)
    groq_api_key: str = ""
    groq_model: str = "llama-3.3-70b-versatile"
    groq_base_url: str = "https://api.groq.com/openai/v1"

    # Local LLM via Ollama
    llm_base_url: str = "http://localhost:11434"
    llm_model: str = "mistral"
    llm_timeout: float = 60.0  # seconds per request

    # Sampling temperatures per use case
    insights_temperature: float = 0.7
    budget_suggestion_temperature: float = 0.6
    categorization_temperature: float = 0.1

    # Insights
    currency_symbol: str = "₹"
    max_context_expenses: int = 200
    quick_insights_count: int = 2
    default_monthly_budget: float = 2000
    default_weekly_budget: float = 500
    default_savings_goal: float = 500

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://localhost:8080"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()
