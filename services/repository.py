"""
Repository for SkillUp
One entry point holding every entity service over a shared Firestore service
"""

from services.assignment_service import AssignmentService
from services.audit_service import AuditService
from services.change_log_service import ChangeLogService
from services.class_service import ClassService
from services.firestore_service import FirestoreService
from services.integrity import with_reference_checks
from services.level_service import LevelService
from services.potential_student_service import PotentialStudentService
from services.student_record_service import StudentRecordService
from services.submission_service import SubmissionService
from services.user_service import UserService

class Repository:
    def __init__(self, db, check_references=False):
        self.store = FirestoreService(db)

        self.users = UserService(self.store)
        self.classes = ClassService(self.store)
        self.levels = LevelService(self.store)
        self.assignments = AssignmentService(self.store)
        self.submissions = SubmissionService(self.store)
        self.potential_students = PotentialStudentService(self.store)
        self.student_records = StudentRecordService(self.store)
        self.change_logs = ChangeLogService(self.store)
        self.audit = AuditService(self.store)

        if check_references:
            with_reference_checks(self)

    def services(self):
        return [
            self.users,
            self.classes,
            self.levels,
            self.assignments,
            self.submissions,
            self.potential_students,
            self.student_records,
            self.change_logs,
            self.audit,
        ]
