"""
salonhub/config.py - Application configuration and Firebase initialization.

This module defines a Pydantic BaseSettings class to load configuration from environment,
and initializes the Firebase Admin SDK (Firestore DB, Storage) using the provided credentials.
Routers receive the Firestore client and the storage bucket through the `get_db` and
`get_bucket` dependencies so tests can swap them out.
"""
import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore, storage
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("salonhub.config")


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    firebase_cred_file: str = Field('firebase_service_account.json', description="Service account JSON path")
    firebase_project_id: Optional[str] = None
    firebase_storage_bucket: Optional[str] = None

    # Firebase credentials from environment variables (for Cloud Run)
    firebase_private_key_id: Optional[str] = None
    firebase_private_key: Optional[str] = None
    firebase_client_email: Optional[str] = None
    firebase_client_id: Optional[str] = None
    firebase_auth_uri: Optional[str] = None
    firebase_token_uri: Optional[str] = None
    firebase_auth_provider_x509_cert_url: Optional[str] = None
    firebase_client_x509_cert_url: Optional[str] = None

    # Namespaces every Firestore/Storage path: artifacts/{app_id}/...
    firebase_app_id: str = Field('default-app-id', description="Application instance id")
    # Only needed by the Python client (Identity Toolkit REST sign-in)
    firebase_web_api_key: str = ''

    debug: bool = False
    allowed_origins: str = '*'  # Comma-separated list or '*' for all

    def _service_account_dict(self) -> Optional[dict]:
        fields = [
            self.firebase_private_key_id,
            self.firebase_private_key,
            self.firebase_client_email,
            self.firebase_client_id,
            self.firebase_auth_uri,
            self.firebase_token_uri,
            self.firebase_auth_provider_x509_cert_url,
            self.firebase_client_x509_cert_url,
        ]
        if not all(fields):
            return None
        return {
            "type": "service_account",
            "project_id": self.firebase_project_id,
            "private_key_id": self.firebase_private_key_id,
            # Cloud Run secrets usually carry escaped newlines
            "private_key": self.firebase_private_key.replace("\\n", "\n"),
            "client_email": self.firebase_client_email,
            "client_id": self.firebase_client_id,
            "auth_uri": self.firebase_auth_uri,
            "token_uri": self.firebase_token_uri,
            "auth_provider_x509_cert_url": self.firebase_auth_provider_x509_cert_url,
            "client_x509_cert_url": self.firebase_client_x509_cert_url,
        }


# Load settings from environment (.env file, etc.)
settings = Settings()


def init_firebase() -> firebase_admin.App:
    """
    Initialize the default Firebase app once; later calls return the existing app.
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    cred_dict = settings._service_account_dict()
    if cred_dict is not None:
        # Use environment variables for Firebase credentials (Cloud Run)
        cred = credentials.Certificate(cred_dict)
    else:
        # Use service account file (local development)
        cred = credentials.Certificate(settings.firebase_cred_file)

    options = {}
    if settings.firebase_project_id:
        options['projectId'] = settings.firebase_project_id
    if settings.firebase_storage_bucket:
        options['storageBucket'] = settings.firebase_storage_bucket

    try:
        app = firebase_admin.initialize_app(cred, options)
    except ValueError as e:
        if "already exists" in str(e):
            # Firebase app already initialized, get the default app
            return firebase_admin.get_app()
        raise
    logger.info("Firebase initialized for project %s (app_id=%s)",
                settings.firebase_project_id, settings.firebase_app_id)
    return app


def get_db():
    """FastAPI dependency: Firestore client of the default app."""
    init_firebase()
    return firestore.client()


def get_bucket():
    """FastAPI dependency: default Cloud Storage bucket."""
    init_firebase()
    return storage.bucket()
