import firebase_admin
from firebase_admin import credentials, firestore, storage

from eye_disease_api.config import Settings

APP_NAME = "eye-disease-api"


def init_firebase_app(settings: Settings) -> firebase_admin.App:
    """Return the named Firebase app, initializing it on first use."""
    try:
        return firebase_admin.get_app(APP_NAME)
    except ValueError:
        credential = credentials.Certificate(settings.firebase_credentials)
        return firebase_admin.initialize_app(
            credential,
            {"storageBucket": settings.storage_bucket},
            name=APP_NAME,
        )


def open_bucket(app: firebase_admin.App):
    return storage.bucket(app=app)


def open_firestore(app: firebase_admin.App):
    return firestore.client(app=app)
