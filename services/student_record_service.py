"""
Student Record Service for SkillUp
Semester score records; finalGrade is supplied by the caller
"""

from schemas import StudentRecord
from services.entity_service import BatchWriteMixin, EntityService
from services.firestore_service import order_by, where

class StudentRecordService(BatchWriteMixin, EntityService):
    model = StudentRecord

    def create_student_record(self, student_record_data):
        return self._create(student_record_data)

    def get_student_record_by_id(self, student_record_id):
        return self._get(student_record_id)

    def update_student_record(self, student_record_id, changes):
        self._update(student_record_id, changes)

    def delete_student_record(self, student_record_id):
        self._delete(student_record_id)

    def get_student_records_by_student(self, student_id):
        return self._list(
            where('studentId', student_id),
            order_by('createdAt', 'desc'),
        )

    def get_student_records_by_class(self, class_id):
        return self._list(
            where('classId', class_id),
            order_by('createdAt', 'desc'),
        )
