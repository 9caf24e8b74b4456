import pytest
import pydantic

class TestClassAndLevelServices:

    def test_level_class_student_setup(self, repository):
        """A level, a class at that level and an enrolled student"""
        level_id = repository.levels.create_level({'name': 'Beginner', 'order': 1})
        class_id = repository.classes.create_class({
            'name': 'Morning Batch',
            'classCode': 'BEG-01',
            'levelId': level_id,
        })
        user_id = repository.users.create_user({
            'email': 'a@x.com',
            'role': 'student',
            'classIds': [class_id],
        })

        assert repository.classes.get_class_by_code('BEG-01').id == class_id
        assert user_id in [u.id for u in repository.users.get_all_users('student')]
        assert repository.users.get_user_by_id(user_id).class_ids == [class_id]
        assert repository.classes.get_class_by_id(class_id).level_id == level_id

    def test_class_code_lookup_missing(self, repository):
        assert repository.classes.get_class_by_code('NOPE') is None

    def test_levels_in_display_order(self, repository):
        repository.levels.create_level({'name': 'Advanced', 'order': 3})
        repository.levels.create_level({'name': 'Beginner', 'order': 1})
        repository.levels.create_level({'name': 'Intermediate', 'order': 2, 'isActive': False})

        assert [l.name for l in repository.levels.get_all_levels()] == ['Beginner', 'Intermediate', 'Advanced']
        assert [l.name for l in repository.levels.get_all_levels(is_active=True)] == ['Beginner', 'Advanced']

    def test_class_filters(self, repository):
        first = repository.classes.create_class({'name': 'A', 'classCode': 'A-1', 'teacherId': 'T1'})
        second = repository.classes.create_class({'name': 'B', 'classCode': 'B-1', 'teacherId': 'T2'})
        third = repository.classes.create_class({
            'name': 'C', 'classCode': 'C-1', 'teacherId': 'T1', 'isActive': False,
        })

        assert [c.id for c in repository.classes.get_all_classes()] == [third, second, first]
        assert [c.id for c in repository.classes.get_all_classes(teacher_id='T1')] == [third, first]
        assert [c.id for c in repository.classes.get_all_classes(is_active=False)] == [third]
        assert [c.id for c in repository.classes.get_all_classes(teacher_id='T1', is_active=True)] == [first]

    def test_update_and_delete_class(self, repository):
        class_id = repository.classes.create_class({'name': 'A', 'classCode': 'A-1'})

        repository.classes.update_class(class_id, {'studentIds': ['S1', 'S2'], 'isActive': False})
        cls = repository.classes.get_class_by_id(class_id)
        assert cls.student_ids == ['S1', 'S2']
        assert cls.is_active is False

        repository.classes.delete_class(class_id)
        assert repository.classes.get_class_by_id(class_id) is None

    def test_update_level_fee(self, repository):
        level_id = repository.levels.create_level({'name': 'Beginner', 'order': 1})

        repository.levels.update_level(level_id, {'monthlyFee': 1200000})

        assert repository.levels.get_level_by_id(level_id).monthly_fee == 1200000

    def test_delete_level(self, repository):
        level_id = repository.levels.create_level({'name': 'Beginner', 'order': 1})

        repository.levels.delete_level(level_id)

        assert repository.levels.get_level_by_id(level_id) is None
        assert repository.levels.get_all_levels() == []

    def test_class_requires_code(self, repository):
        with pytest.raises(pydantic.ValidationError):
            repository.classes.create_class({'name': 'No code'})

        assert repository.classes.get_all_classes() == []
