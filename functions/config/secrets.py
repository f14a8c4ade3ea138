"""Unified secret access for RoofReport Python functions.

Secrets resolve from Google Cloud Secret Manager in production and from
environment variables when running against the Firebase emulators.

Usage:
    from config.secrets import get_openai_api_key, get_pricing_feed_token

    api_key = get_openai_api_key()
    token = get_pricing_feed_token()
"""

import os
import logging
from functools import lru_cache
from typing import Optional

from google.cloud import secretmanager

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_ID = "roofreport-dev"


def is_emulator_mode() -> bool:
    """Check if running in Firebase emulator mode."""
    return (
        os.environ.get('FUNCTIONS_EMULATOR') == 'true' or
        os.environ.get('FIRESTORE_EMULATOR_HOST') is not None
    )


def _secret_version_name(secret_id: str) -> str:
    project_id = (
        os.environ.get('GCLOUD_PROJECT')
        or os.environ.get('GOOGLE_CLOUD_PROJECT')
        or DEFAULT_PROJECT_ID
    )
    return f"projects/{project_id}/secrets/{secret_id}/versions/latest"


def get_secret(secret_id: str) -> Optional[str]:
    """
    Get secret from Secret Manager (production) or the environment (emulator).

    Args:
        secret_id: The name of the secret (e.g., 'OPENAI_API_KEY')

    Returns:
        The secret value, or None if not found
    """
    if is_emulator_mode():
        value = os.environ.get(secret_id)
        if not value:
            logger.warning(f"Secret {secret_id} not found in environment variables")
        return value

    try:
        client = secretmanager.SecretManagerServiceClient()
        response = client.access_secret_version(request={"name": _secret_version_name(secret_id)})
        return response.payload.data.decode("UTF-8")

    except Exception as e:
        logger.warning(f"Failed to load secret {secret_id} from Secret Manager: {e}")
        return os.environ.get(secret_id)


@lru_cache(maxsize=1)
def get_openai_api_key() -> Optional[str]:
    """Get OpenAI API key used by the report analysis service."""
    return get_secret('OPENAI_API_KEY')


@lru_cache(maxsize=1)
def get_pricing_feed_token() -> Optional[str]:
    """Get the bearer token for the live pricing feed, if one is configured."""
    return get_secret('PRICING_FEED_TOKEN')


def clear_secret_cache() -> None:
    """Clear cached secrets. Useful for testing or when secrets are rotated."""
    get_openai_api_key.cache_clear()
    get_pricing_feed_token.cache_clear()
