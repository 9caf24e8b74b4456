import pytest

from schemas import Ref
from services.integrity import ReferenceChecker, with_reference_checks
from services.repository import Repository
from utils.error_handler import IntegrityError, ValidationError

class TestReferenceChecks:

    @pytest.fixture
    def checked(self, fake_db):
        return Repository(fake_db, check_references=True)

    def test_unchecked_repository_accepts_dangling_refs(self, repository):
        class_id = repository.classes.create_class({'name': 'A', 'classCode': 'A-1', 'levelId': 'ghost'})

        assert repository.classes.get_class_by_id(class_id).level_id == 'ghost'

    def test_dangling_reference_rejected_on_create(self, checked):
        with pytest.raises(IntegrityError) as exc_info:
            checked.classes.create_class({'name': 'A', 'classCode': 'A-1', 'levelId': 'ghost'})

        assert exc_info.value.ref == Ref('levels', 'ghost')
        assert exc_info.value.status_code == 409
        assert checked.classes.get_all_classes() == []

    def test_integrity_error_is_a_validation_error(self):
        assert issubclass(IntegrityError, ValidationError)

    def test_valid_references_accepted(self, checked):
        level_id = checked.levels.create_level({'name': 'Beginner', 'order': 1})
        teacher_id = checked.users.create_user({'email': 't@x.com', 'role': 'teacher'})

        class_id = checked.classes.create_class({
            'name': 'Morning Batch',
            'classCode': 'BEG-01',
            'levelId': level_id,
            'teacherId': teacher_id,
        })

        assert checked.classes.get_class_by_id(class_id).teacher_id == teacher_id

    def test_dangling_reference_rejected_on_update(self, checked):
        user_id = checked.users.create_user({'email': 's@x.com', 'role': 'student'})

        with pytest.raises(IntegrityError):
            checked.users.update_user(user_id, {'classIds': ['missing-class']})

        assert checked.users.get_user_by_id(user_id).class_ids == []

    def test_with_reference_checks_attaches_one_checker(self, repository):
        with_reference_checks(repository)

        checkers = {id(service.reference_checker) for service in repository.services()}
        assert len(checkers) == 1
        assert isinstance(repository.users.reference_checker, ReferenceChecker)

    def test_repeated_references_looked_up_once(self, mocker, store):
        checker = ReferenceChecker(store)
        spy = mocker.spy(store, 'get_by_id')
        level_id = store.create('levels', {'name': 'Beginner', 'order': 1})

        checker.check([Ref('levels', level_id), Ref('levels', level_id)])

        assert spy.call_count == 1
