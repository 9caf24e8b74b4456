import pytest
from unittest.mock import Mock, patch
import sys
import os

# Add project root to Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from fake_firestore import FakeFirestore
from services.firestore_service import FirestoreService
from services.repository import Repository

@pytest.fixture
def mock_firestore():
    """Mock Firestore client for error-path tests"""
    return Mock()

@pytest.fixture
def fake_db():
    """In-memory Firestore database"""
    return FakeFirestore()

@pytest.fixture
def store(fake_db):
    return FirestoreService(fake_db)

@pytest.fixture
def repository(fake_db):
    return Repository(fake_db)

@pytest.fixture
def sample_user_data():
    """Sample user data for testing"""
    return {
        'firebaseUid': 'fb-uid-1',
        'username': 'linh.tran',
        'name': 'Linh Tran',
        'email': 'linh@example.com',
        'role': 'student',
        'status': 'active',
        'classIds': [],
    }

@pytest.fixture
def sample_assignment_data():
    return {
        'title': 'Reading Test 1',
        'classId': 'class-1',
        'maxScore': 10,
        'isActive': True,
        'questions': [
            {'id': 'q1', 'type': 'mcq', 'question': 'Pick one', 'options': ['A', 'B', 'C']},
            {'id': 'q2', 'type': 'fill', 'question': 'Capital of France?'},
        ],
        'answerKey': {'q1': 'B', 'q2': 'Paris'},
    }

@pytest.fixture
def api_user():
    """Decoded token returned by the patched verify_id_token"""
    return {'uid': 'admin-uid', 'email': 'admin@skillup.edu', 'name': 'Admin', 'role': 'admin'}

@pytest.fixture
def client(repository, api_user):
    """Test client for Flask app with token verification patched"""
    from main import create_app

    app = create_app(repository)
    app.config['TESTING'] = True
    with patch('firebase_admin.auth.verify_id_token', return_value=api_user):
        with app.test_client() as client:
            yield client

@pytest.fixture
def auth_headers():
    return {'Authorization': 'Bearer fake-token'}
