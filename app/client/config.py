import logging
import os
from typing import Mapping, Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:3000"
# first match wins; the build-time variable is preferred over the legacy names
API_URL_ENV_VARS = ("EXPO_PUBLIC_API_URL", "API_URL", "API_BASE_URL")

REQUEST_TIMEOUT_SECONDS = 5.0
DEFAULT_HEADERS = {"Content-Type": "application/json"}


def resolve_api_base_url(environ: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if environ is None else environ

    base_url = next((env[name] for name in API_URL_ENV_VARS if env.get(name)), DEFAULT_API_URL)

    if not env.get(API_URL_ENV_VARS[0]) and env.get("NODE_ENV", env.get("APP_ENV")) != "production":
        logger.warning(f"Warning: {API_URL_ENV_VARS[0]} is not set, using fallback: {base_url}")

    return base_url
