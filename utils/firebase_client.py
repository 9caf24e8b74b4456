"""
Firebase bootstrap for SkillUp
One Firebase app and one Firestore client per process
"""

import os
import logging

from firebase_admin import initialize_app, get_app, credentials, firestore

from config import Config

logger = logging.getLogger(__name__)

_db = None

def init_firebase_app():
    """
    Return the default Firebase app, initializing it on first use
    """
    try:
        return get_app()
    except ValueError:
        pass

    options = {'projectId': Config.FIREBASE_PROJECT_ID} if Config.FIREBASE_PROJECT_ID else None
    try:
        if Config.SERVICE_ACCOUNT_KEY and os.path.exists(Config.SERVICE_ACCOUNT_KEY):
            # For local development, use service account key
            cred = credentials.Certificate(Config.SERVICE_ACCOUNT_KEY)
            app = initialize_app(cred, options)
        else:
            # Use default credentials in production
            app = initialize_app(options=options)
    except Exception as e:
        logger.error(f"Error initializing Firebase: {e}")
        raise

    logger.info(f"Initialized Firebase app for project {app.project_id}")
    return app

def get_firestore_client():
    """
    Process-wide Firestore client; never closed
    """
    global _db
    if _db is None:
        _db = firestore.client(init_firebase_app())
    return _db
