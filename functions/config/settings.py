"""RoofReport configuration settings.

Loads configuration from environment variables with sensible defaults.
Secrets are loaded via Firebase Secrets Manager (production) or environment variables (emulator).
"""

import os
from typing import Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load .env file for non-secret configuration (emulator hosts, feature flags, etc.)
# Secrets should come from Firebase Secrets Manager or environment variables
load_dotenv()


@dataclass
class Settings:
    """Application settings loaded from environment variables.

    Note: Secrets (OPENAI_API_KEY, etc.) should be accessed via config.secrets module,
    not directly from this class. The openai_api_key property delegates to the
    secrets module.
    """

    # LLM Configuration (non-secrets)
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o"))
    llm_temperature: float = field(default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.2")))

    # Firebase Configuration
    firebase_project_id: Optional[str] = field(default_factory=lambda: os.getenv("FIREBASE_PROJECT_ID"))
    use_firebase_emulators: bool = field(default_factory=lambda: os.getenv("USE_FIREBASE_EMULATORS", "false").lower() == "true")
    firestore_emulator_host: str = field(default_factory=lambda: os.getenv("FIRESTORE_EMULATOR_HOST", "localhost:8081"))

    # Collections
    reports_collection: str = field(default_factory=lambda: os.getenv("REPORTS_COLLECTION", "pdfs"))
    user_roles_collection: str = field(default_factory=lambda: os.getenv("USER_ROLES_COLLECTION", "userRoles"))

    # Report Configuration
    brand_name: str = field(default_factory=lambda: os.getenv("BRAND_NAME", "RoofReport"))
    default_language: str = field(default_factory=lambda: os.getenv("DEFAULT_LANGUAGE", "english"))
    default_currency: str = field(default_factory=lambda: os.getenv("DEFAULT_CURRENCY", "USD"))

    # Pricing Data Source
    pricing_feed_url: Optional[str] = field(default_factory=lambda: os.getenv("PRICING_FEED_URL"))
    pricing_cache_hours: int = field(default_factory=lambda: int(os.getenv("PRICING_CACHE_HOURS", "24")))
    pricing_timeout_seconds: float = field(default_factory=lambda: float(os.getenv("PRICING_TIMEOUT_SECONDS", "10")))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Internal: cached secret value (use openai_api_key property instead)
    _openai_api_key: Optional[str] = field(default=None, repr=False)

    @property
    def openai_api_key(self) -> Optional[str]:
        """Get OpenAI API key from Firebase Secrets Manager or environment."""
        if self._openai_api_key is None:
            from config.secrets import get_openai_api_key
            self._openai_api_key = get_openai_api_key()
        return self._openai_api_key

    @property
    def pricing_live_enabled(self) -> bool:
        """Live pricing is only attempted when a feed URL is configured."""
        return bool(self.pricing_feed_url)

    def validate(self) -> None:
        """Validate required settings are present.

        Raises:
            ValueError: If required settings are missing.
        """
        if self.pricing_cache_hours < 0:
            raise ValueError("PRICING_CACHE_HOURS must not be negative")
        if not self.reports_collection:
            raise ValueError("REPORTS_COLLECTION must not be empty")

    @property
    def is_emulator_mode(self) -> bool:
        """Check if running in emulator mode."""
        return self.use_firebase_emulators


# Singleton settings instance
settings = Settings()
