import pytest
import pydantic

class TestPotentialStudentService:

    def test_lead_defaults(self, repository):
        lead_id = repository.potential_students.create_potential_student({
            'name': 'Minh Anh',
            'email': 'minh@example.com',
            'interestedPrograms': ['IELTS'],
        })

        lead = repository.potential_students.get_potential_student_by_id(lead_id)
        assert lead.status == 'pending'
        assert lead.source == 'other'
        assert lead.interested_programs == ['IELTS']

    def test_filter_by_status(self, repository):
        leads = repository.potential_students
        pending = leads.create_potential_student({'name': 'A', 'email': 'a@x.com'})
        contacted = leads.create_potential_student({'name': 'B', 'email': 'b@x.com', 'status': 'contacted'})

        assert [l.id for l in leads.get_all_potential_students(status='contacted')] == [contacted]
        assert [l.id for l in leads.get_all_potential_students()] == [contacted, pending]

    def test_update_and_delete(self, repository):
        leads = repository.potential_students
        lead_id = leads.create_potential_student({'name': 'A', 'email': 'a@x.com'})

        leads.update_potential_student(lead_id, {'status': 'enrolled', 'assignedTo': 'U1'})
        lead = leads.get_potential_student_by_id(lead_id)
        assert lead.status == 'enrolled'
        assert lead.assigned_to == 'U1'

        leads.delete_potential_student(lead_id)
        assert leads.get_potential_student_by_id(lead_id) is None

    def test_invalid_source_rejected(self, repository):
        with pytest.raises(pydantic.ValidationError):
            repository.potential_students.create_potential_student(
                {'name': 'A', 'email': 'a@x.com', 'source': 'billboard'}
            )

class TestStudentRecordService:

    @pytest.fixture
    def record_data(self):
        return {
            'studentId': 'S1',
            'classId': 'C1',
            'attendance': 9,
            'participation': 8,
            'homework': 7.5,
            'exam': 8,
            'finalGrade': 8.1,
            'semester': 'HK1',
            'year': 2024,
        }

    def test_listing_by_student_and_class(self, repository, record_data):
        records = repository.student_records
        first = records.create_student_record(record_data)
        second = records.create_student_record({**record_data, 'semester': 'HK2'})
        records.create_student_record({**record_data, 'studentId': 'S2', 'classId': 'C2'})

        assert [r.id for r in records.get_student_records_by_student('S1')] == [second, first]
        assert [r.id for r in records.get_student_records_by_class('C1')] == [second, first]

    def test_final_grade_is_stored_as_given(self, repository, record_data):
        record_id = repository.student_records.create_student_record({**record_data, 'finalGrade': 2})

        assert repository.student_records.get_student_record_by_id(record_id).final_grade == 2

    def test_update_and_delete(self, repository, record_data):
        records = repository.student_records
        record_id = records.create_student_record(record_data)

        records.update_student_record(record_id, {'exam': 9.5, 'notes': 'Improved'})
        assert records.get_student_record_by_id(record_id).exam == 9.5

        records.delete_student_record(record_id)
        assert records.get_student_record_by_id(record_id) is None

    def test_missing_scores_rejected(self, repository):
        with pytest.raises(pydantic.ValidationError):
            repository.student_records.create_student_record({'studentId': 'S1', 'classId': 'C1'})

class TestChangeLogService:

    def test_record_from_actor(self, repository):
        actor = {'uid': 'fb-1', 'user_id': 'U1', 'name': 'Teacher Hoa', 'email': 'hoa@x.com'}

        log_id = repository.change_logs.record('update', 'classes', 'C1', actor, changes={'name': 'New'})

        log = repository.change_logs.get_change_log_by_id(log_id)
        assert log.user_id == 'U1'
        assert log.user_name == 'Teacher Hoa'
        assert log.changes == {'name': 'New'}
        assert log.timestamp is not None

    def test_record_falls_back_to_uid_and_email(self, repository):
        log_id = repository.change_logs.record('delete', 'users', 'U2', {'uid': 'fb-2', 'email': 'x@x.com'})

        log = repository.change_logs.get_change_log_by_id(log_id)
        assert log.user_id == 'fb-2'
        assert log.user_name == 'x@x.com'
        assert log.changes == {}

    def test_filters_newest_first(self, repository):
        actor = {'uid': 'fb-1'}
        logs = repository.change_logs
        first = logs.record('create', 'classes', 'C1', actor)
        logs.record('create', 'levels', 'L1', actor)
        third = logs.record('update', 'classes', 'C1', actor)
        logs.record('update', 'classes', 'C2', actor)

        assert [l.id for l in logs.get_change_logs(collection='classes', document_id='C1')] == [third, first]
        assert len(logs.get_change_logs(collection='classes')) == 3
        assert len(logs.get_change_logs()) == 4

    def test_invalid_action_rejected(self, repository):
        with pytest.raises(pydantic.ValidationError):
            repository.change_logs.record('archive', 'classes', 'C1', {'uid': 'fb-1'})

    def test_create_many_stamps_timestamp(self, repository):
        ids = repository.change_logs.create_many([
            {'action': 'create', 'collection': 'classes', 'documentId': 'C1', 'userId': 'U1', 'userName': 'A'},
            {'action': 'update', 'collection': 'classes', 'documentId': 'C1', 'userId': 'U1', 'userName': 'A'},
        ])

        listed = repository.change_logs.get_change_logs(collection='classes')

        assert sorted(l.id for l in listed) == sorted(ids)
        assert all(l.timestamp is not None for l in listed)

class TestAppendOnlyLogs:

    @pytest.mark.parametrize('service', ['change_logs', 'audit'])
    def test_no_update_or_delete(self, repository, service):
        logs = getattr(repository, service)

        assert not hasattr(logs, 'update_many')
        assert not hasattr(logs, 'delete_many')
        assert not any(name.startswith(('update_', 'delete_')) for name in dir(logs))

    def test_mutable_services_keep_batch_writes(self, repository):
        for service in (repository.users, repository.classes, repository.submissions):
            assert hasattr(service, 'update_many')
            assert hasattr(service, 'delete_many')
