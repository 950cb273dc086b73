"""
storefront/config.py - Application configuration and Firebase initialization.

Settings are loaded from the environment (and `.env`) with pydantic-settings.
The Firebase Admin app and the Firestore client are created lazily on first use,
so importing the application never needs credentials. Everything that touches
the document store receives the client through `get_db()`.
"""
import logging
from functools import lru_cache
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("storefront.config")


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    firebase_cred_file: str = 'firebase_service_account.json'
    firebase_project_id: Optional[str] = None

    # Firebase credentials from environment variables (for Cloud Run)
    firebase_private_key_id: Optional[str] = None
    firebase_private_key: Optional[str] = None
    firebase_client_email: Optional[str] = None
    firebase_client_id: Optional[str] = None
    firebase_auth_uri: Optional[str] = None
    firebase_token_uri: Optional[str] = None
    firebase_auth_provider_x509_cert_url: Optional[str] = None
    firebase_client_x509_cert_url: Optional[str] = None

    firebase_web_api_key: str = ''
    firebase_collection_prefix: str = ''

    iyzico_api_key: str = ''
    iyzico_secret_key: str = ''
    iyzico_base_url: str = 'sandbox-api.iyzipay.com'
    iyzico_callback_url: str = 'http://localhost:3000/checkout/callback'
    currency: str = Field('USD', description="ISO currency used for orders and payments")

    debug: bool = False
    allow_mock_tokens: bool = False  # accept mock_jwt_token_<uid> bearer tokens (development only)
    allowed_origins: str = 'http://localhost:3000'  # Comma-separated list or '*' for all
    log_level: str = 'INFO'

    smtp_host: str = "localhost"
    smtp_port: int = 465
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_from: Optional[str] = None
    smtp_use_starttls: bool = False  # true for 587

    def collection(self, name: str) -> str:
        """Prefix-aware collection name (FIREBASE_COLLECTION_PREFIX)."""
        prefix = (self.firebase_collection_prefix or "").strip()
        return f"{prefix}{name}" if prefix else name

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_port and self.smtp_user and self.smtp_password)


# Load settings from environment (.env file, etc.)
settings = Settings()


_SERVICE_ACCOUNT_KEYS = (
    "private_key_id", "private_key", "client_email", "client_id",
    "auth_uri", "token_uri", "auth_provider_x509_cert_url", "client_x509_cert_url",
)


def _credentials():
    """Service account from FIREBASE_* env vars when all are set (Cloud Run), else from the key file."""
    fields = {key: getattr(settings, f"firebase_{key}") for key in _SERVICE_ACCOUNT_KEYS}
    if not all(fields.values()):
        return credentials.Certificate(settings.firebase_cred_file)
    fields["private_key"] = fields["private_key"].replace("\\n", "\n")
    return credentials.Certificate(dict(fields, type="service_account", project_id=settings.firebase_project_id))


def get_firebase_app():
    """Return the default Firebase app, initializing it on first call."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass
    options = {'projectId': settings.firebase_project_id} if settings.firebase_project_id else None
    try:
        app = firebase_admin.initialize_app(_credentials(), options)
    except ValueError as e:
        if "already exists" in str(e):
            return firebase_admin.get_app()
        raise
    logger.info("Firebase app initialized for project %s", settings.firebase_project_id)
    return app


@lru_cache(maxsize=1)
def _firestore_client():
    return firestore.client(get_firebase_app())


def get_db():
    """FastAPI dependency returning the Firestore client."""
    return _firestore_client()
