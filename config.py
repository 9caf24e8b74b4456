import os

from dotenv import load_dotenv

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

load_dotenv(os.path.join(BASE_DIR, '.env'))

def _flag(name, default='false'):
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')

class Config:
    ENVIRONMENT = os.environ.get('ENVIRONMENT', 'production')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Firebase; GOOGLE_APPLICATION_CREDENTIALS and FIRESTORE_EMULATOR_HOST are read by the SDK itself
    FIREBASE_PROJECT_ID = os.environ.get('FIREBASE_PROJECT_ID')
    SERVICE_ACCOUNT_KEY = os.environ.get(
        'GOOGLE_APPLICATION_CREDENTIALS',
        os.path.join(BASE_DIR, 'serviceAccountKey.json')
    )

    ALLOWED_ORIGINS = [
        origin.strip() for origin in os.environ.get('ALLOWED_ORIGINS', '*').split(',') if origin.strip()
    ]

    # Verify *Id fields against existing documents on every write
    CHECK_REFERENCES = _flag('CHECK_REFERENCES')
