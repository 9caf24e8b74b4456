import pytest
import pydantic
from unittest.mock import Mock, patch
from firebase_admin import auth

from services.account_service import AccountService
from utils.error_handler import StoreWriteError, ValidationError

class TestAccountService:
    """Test suite for account creation"""

    @pytest.fixture
    def accounts(self, repository):
        return AccountService(repository.users, repository.audit)

    @patch('firebase_admin.auth.create_user')
    def test_create_student_account(self, mock_create_user, accounts, repository):
        mock_create_user.return_value = Mock(uid='fb-new')

        result = accounts.create_account(' New.Student@Example.com ', 'secret123', {'name': 'New Student'})

        assert result['success'] is True
        assert result['email'] == 'new.student@example.com'
        assert result['role'] == 'student'
        mock_create_user.assert_called_once_with(
            email='new.student@example.com', password='secret123', display_name='New Student'
        )

        user = repository.users.get_user_by_id(result['user_id'])
        assert user.firebase_uid == 'fb-new'
        assert user.student_code == 'SU-001'

    @patch('firebase_admin.auth.create_user')
    def test_teacher_gets_no_student_code(self, mock_create_user, accounts, repository):
        mock_create_user.return_value = Mock(uid='fb-t')

        result = accounts.create_account('t@x.com', 'secret123', {'role': 'teacher'})

        assert repository.users.get_user_by_id(result['user_id']).student_code is None

    @patch('firebase_admin.auth.create_user')
    def test_profile_cannot_override_identity(self, mock_create_user, accounts, repository):
        mock_create_user.return_value = Mock(uid='fb-real')

        result = accounts.create_account('a@x.com', 'secret123', {'email': 'b@x.com', 'firebaseUid': 'fb-fake'})

        user = repository.users.get_user_by_id(result['user_id'])
        assert user.email == 'a@x.com'
        assert user.firebase_uid == 'fb-real'

    def test_missing_credentials(self, accounts):
        with pytest.raises(ValidationError):
            accounts.create_account('', 'secret123')

    @patch('firebase_admin.auth.create_user')
    def test_existing_email(self, mock_create_user, accounts, repository):
        mock_create_user.side_effect = auth.EmailAlreadyExistsError('exists', None, None)

        with pytest.raises(ValidationError) as exc_info:
            accounts.create_account('a@x.com', 'secret123')

        assert exc_info.value.field == 'email'
        assert repository.users.get_all_users() == []

    @patch('firebase_admin.auth.delete_user')
    @patch('firebase_admin.auth.create_user')
    def test_auth_user_removed_when_profile_invalid(self, mock_create_user, mock_delete_user, accounts):
        mock_create_user.return_value = Mock(uid='fb-orphan')

        with pytest.raises(pydantic.ValidationError):
            accounts.create_account('a@x.com', 'secret123', {'role': 'overlord'})

        mock_delete_user.assert_called_once_with('fb-orphan')

    @patch('firebase_admin.auth.delete_user')
    @patch('firebase_admin.auth.create_user')
    def test_auth_user_removed_when_store_fails(self, mock_create_user, mock_delete_user, accounts, fake_db):
        from google.api_core import exceptions
        mock_create_user.return_value = Mock(uid='fb-orphan')
        fake_db.fail('add', exceptions.ServiceUnavailable('offline'))

        with pytest.raises(StoreWriteError):
            accounts.create_account('a@x.com', 'secret123', {'role': 'teacher'})

        mock_delete_user.assert_called_once_with('fb-orphan')

    @patch('firebase_admin.auth.create_user')
    def test_actor_produces_audit_entry(self, mock_create_user, accounts, repository):
        mock_create_user.return_value = Mock(uid='fb-new')
        actor = {'uid': 'U-admin', 'name': 'Admin'}

        result = accounts.create_account('a@x.com', 'secret123', {'role': 'teacher'}, actor=actor)

        entries = repository.audit.get_audit_logs(actor_id='U-admin')
        assert len(entries) == 1
        assert entries[0].action == 'user_created'
        assert entries[0].target_id == result['user_id']
        assert entries[0].details == {'email': 'a@x.com', 'role': 'teacher'}

    @patch('firebase_admin.auth.delete_user')
    @patch('firebase_admin.auth.create_user')
    def test_failed_rollback_keeps_store_error(self, mock_create_user, mock_delete_user, accounts, fake_db):
        from google.api_core import exceptions
        mock_create_user.return_value = Mock(uid='fb-orphan')
        mock_delete_user.side_effect = RuntimeError('auth unavailable')
        fake_db.fail('add', exceptions.ServiceUnavailable('offline'))

        with pytest.raises(StoreWriteError):
            accounts.create_account('a@x.com', 'secret123', {'role': 'teacher'})

        mock_delete_user.assert_called_once_with('fb-orphan')
