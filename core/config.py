# core/config.py
import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
import logging

# Load variables from .env file located in the project root directory
dotenv_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path=dotenv_path)
else:
    load_dotenv() # Fallback

class Settings(BaseSettings):
    """Loads configuration settings from environment variables and .env file."""

    # --- S3 Credentials ---
    S3_ACCESS_KEY: str | None = None
    S3_SECRET_KEY: str | None = None

    # --- Bucket / Endpoint ---
    S3_BUCKET: str | None = None
    S3_REGION: str | None = None # None -> provider default region
    S3_ENDPOINT_URL: str | None = None # Only for S3-compatible stores (MinIO, NCP, ...)

    # --- Client Behaviour ---
    S3_MAX_ATTEMPTS: int = int(os.getenv("S3_MAX_ATTEMPTS", 3))
    S3_UPLOAD_ACL: str = "public-read"

    class Config:
        env_file = '.env'
        env_file_encoding = 'utf-8'
        extra = 'ignore'

# Instantiate settings once for import
settings = Settings()

# --- Logging Setup ---
log_level_str = os.getenv("LOG_LEVEL", "INFO").upper(); log_level = getattr(logging, log_level_str, logging.INFO)
logging.basicConfig(level=log_level, format='%(asctime)s - %(name)s - [%(levelname)s] - %(message)s', datefmt='%Y-%m-%d %H:%M:%S')
logger = logging.getLogger("ObjectStore_Core")
logging.getLogger("botocore").setLevel(logging.WARNING); logging.getLogger("boto3").setLevel(logging.WARNING)
logging.getLogger("s3transfer").setLevel(logging.WARNING); logging.getLogger("urllib3").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

# --- Configuration Validation Checks ---
logger.info(f"Core Settings loaded. Log Level: {log_level_str}")
if not settings.S3_ACCESS_KEY or not settings.S3_SECRET_KEY: logger.warning("S3 access key/secret missing.")
if not settings.S3_BUCKET: logger.warning("S3_BUCKET missing. Object store cannot be created from settings.")
else: logger.info(f"Using S3 Bucket: {settings.S3_BUCKET}")
if settings.S3_REGION: logger.info(f"Using S3 Region: {settings.S3_REGION}")
if settings.S3_ENDPOINT_URL: logger.info(f"Using custom S3 endpoint: {settings.S3_ENDPOINT_URL}")

try: assert settings.S3_MAX_ATTEMPTS > 0; logger.info(f"S3 client max attempts: {settings.S3_MAX_ATTEMPTS}")
except (AssertionError, ValueError): logger.error(f"Invalid S3_MAX_ATTEMPTS: {settings.S3_MAX_ATTEMPTS}.")
