"""
SkillUp Backend - School management data API
Firebase Cloud Functions + Firestore Backend

Main entry point for the Flask API wrapped as Firebase Functions
"""

import logging

from flask import Blueprint, Flask, current_app, request, jsonify
from flask_cors import CORS
from firebase_functions import https_fn, options

from config import Config
from schemas import (
    COLLECTION_ASSIGNMENTS, COLLECTION_CLASSES, COLLECTION_LEVELS, COLLECTION_POTENTIAL_STUDENTS,
    COLLECTION_STUDENT_RECORDS, COLLECTION_SUBMISSIONS, COLLECTION_USERS,
)
from services.account_service import AccountService
from services.repository import Repository
from utils.auth_middleware import require_admin, require_auth, require_teacher
from utils.error_handler import NotFoundError, ValidationError, handle_error, validate_request_data
from utils.firebase_client import get_firestore_client

# Configure logging
logging.basicConfig(level=Config.LOG_LEVEL)
logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__)

def _repo():
    return current_app.extensions['skillup_repository']

def _actor():
    return request.current_user

def _found(entity, kind, doc_id):
    if entity is None:
        raise NotFoundError(f"{kind} '{doc_id}' not found")
    return entity

def _body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data

def _bool_arg(name):
    value = request.args.get(name)
    if value is None:
        return None
    return value.strip().lower() in ('1', 'true', 'yes')

def _created(collection, doc_id, data):
    _repo().change_logs.record('create', collection, doc_id, _actor(), changes=data)
    return jsonify({'id': doc_id, 'message': 'Created successfully'}), 201

def _updated(collection, doc_id, data):
    _repo().change_logs.record('update', collection, doc_id, _actor(), changes=data)
    return jsonify({'id': doc_id, 'message': 'Updated successfully'})

def _deleted(collection, doc_id):
    _repo().change_logs.record('delete', collection, doc_id, _actor())
    return jsonify({'id': doc_id, 'message': 'Deleted successfully'})

def _audit(action, target_type, target_id, details):
    actor = _actor()
    _repo().audit.log_action({
        'admin_id': actor.get('user_id') or actor['uid'],
        'admin_name': actor.get('name') or actor.get('email') or '',
        'action': action,
        'target_type': target_type,
        'target_id': target_id,
        'details': details,
    })


# Health check endpoint
@api_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    return jsonify({
        'status': 'healthy',
        'service': 'skillup-backend',
        'version': '1.0.0'
    })

# ============= USER ENDPOINTS =============

@api_bp.route('/users', methods=['GET'])
@require_auth
def list_users():
    """List users, optionally filtered by ?role= and ?status="""
    try:
        users = _repo().users.get_all_users(
            role=request.args.get('role'),
            status=request.args.get('status')
        )
        return jsonify({'users': [user.to_api() for user in users]})
    except Exception as e:
        return handle_error(e)

@api_bp.route('/users/lookup', methods=['GET'])
@require_auth
def lookup_user():
    """Find one user by ?email=, ?username= or ?firebaseUid="""
    try:
        users = _repo().users
        if request.args.get('email'):
            key, user = 'email', users.get_user_by_email(request.args['email'])
        elif request.args.get('username'):
            key, user = 'username', users.get_user_by_username(request.args['username'])
        elif request.args.get('firebaseUid'):
            key, user = 'firebaseUid', users.get_user_by_firebase_uid(request.args['firebaseUid'])
        else:
            raise ValidationError("One of email, username or firebaseUid is required")

        return jsonify(_found(user, 'User', request.args[key]).to_api())
    except Exception as e:
        return handle_error(e)

@api_bp.route('/users/<user_id>', methods=['GET'])
@require_auth
def get_user(user_id):
    try:
        return jsonify(_found(_repo().users.get_user_by_id(user_id), 'User', user_id).to_api())
    except Exception as e:
        return handle_error(e)

@api_bp.route('/users', methods=['POST'])
@require_admin
def create_user():
    try:
        data = _body()
        user_id = _repo().users.create_user(data)
        return _created(COLLECTION_USERS, user_id, data)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/users/<user_id>', methods=['PUT'])
@require_admin
def update_user(user_id):
    try:
        data = _body()
        users = _repo().users
        user = _found(users.get_user_by_id(user_id), 'User', user_id)
        users.update_user(user_id, data)

        new_role = data.get('role')
        if new_role and new_role != user.role:
            _audit('role_changed', 'user', user_id, {'before': user.role, 'after': new_role})
        return _updated(COLLECTION_USERS, user_id, data)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/users/<user_id>', methods=['DELETE'])
@require_admin
def delete_user(user_id):
    try:
        users = _repo().users
        user = _found(users.get_user_by_id(user_id), 'User', user_id)
        users.delete_user(user_id)
        _audit('user_deleted', 'user', user_id, {'email': user.email, 'role': user.role})
        return _deleted(COLLECTION_USERS, user_id)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/accounts', methods=['POST'])
@require_admin
def create_account():
    """Create a Firebase Auth login plus its user document"""
    try:
        data = _body()
        validate_request_data(data, ['email', 'password'])
        account_service = AccountService(_repo().users, _repo().audit)
        result = account_service.create_account(
            email=data['email'],
            password=data['password'],
            profile=data.get('profile', {}),
            actor={
                'uid': _actor().get('user_id') or _actor()['uid'],
                'name': _actor().get('name'),
                'email': _actor().get('email'),
            }
        )
        return jsonify(result), 201
    except Exception as e:
        return handle_error(e)

# ============= CLASS ENDPOINTS =============

@api_bp.route('/classes', methods=['GET'])
@require_auth
def list_classes():
    """List classes, optionally filtered by ?teacherId= and ?isActive="""
    try:
        classes = _repo().classes.get_all_classes(
            teacher_id=request.args.get('teacherId'),
            is_active=_bool_arg('isActive')
        )
        return jsonify({'classes': [cls.to_api() for cls in classes]})
    except Exception as e:
        return handle_error(e)

@api_bp.route('/classes/code/<class_code>', methods=['GET'])
@require_auth
def get_class_by_code(class_code):
    try:
        return jsonify(_found(_repo().classes.get_class_by_code(class_code), 'Class', class_code).to_api())
    except Exception as e:
        return handle_error(e)

@api_bp.route('/classes/<class_id>', methods=['GET'])
@require_auth
def get_class(class_id):
    try:
        return jsonify(_found(_repo().classes.get_class_by_id(class_id), 'Class', class_id).to_api())
    except Exception as e:
        return handle_error(e)

@api_bp.route('/classes', methods=['POST'])
@require_admin
def create_class():
    try:
        data = _body()
        class_id = _repo().classes.create_class(data)
        return _created(COLLECTION_CLASSES, class_id, data)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/classes/<class_id>', methods=['PUT'])
@require_admin
def update_class(class_id):
    try:
        data = _body()
        classes = _repo().classes
        _found(classes.get_class_by_id(class_id), 'Class', class_id)
        classes.update_class(class_id, data)
        return _updated(COLLECTION_CLASSES, class_id, data)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/classes/<class_id>', methods=['DELETE'])
@require_admin
def delete_class(class_id):
    try:
        classes = _repo().classes
        _found(classes.get_class_by_id(class_id), 'Class', class_id)
        classes.delete_class(class_id)
        return _deleted(COLLECTION_CLASSES, class_id)
    except Exception as e:
        return handle_error(e)

# ============= LEVEL ENDPOINTS =============

@api_bp.route('/levels', methods=['GET'])
@require_auth
def list_levels():
    """List levels in display order"""
    try:
        levels = _repo().levels.get_all_levels(is_active=_bool_arg('isActive'))
        return jsonify({'levels': [level.to_api() for level in levels]})
    except Exception as e:
        return handle_error(e)

@api_bp.route('/levels/<level_id>', methods=['GET'])
@require_auth
def get_level(level_id):
    try:
        return jsonify(_found(_repo().levels.get_level_by_id(level_id), 'Level', level_id).to_api())
    except Exception as e:
        return handle_error(e)

@api_bp.route('/levels', methods=['POST'])
@require_admin
def create_level():
    try:
        data = _body()
        level_id = _repo().levels.create_level(data)
        return _created(COLLECTION_LEVELS, level_id, data)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/levels/<level_id>', methods=['PUT'])
@require_admin
def update_level(level_id):
    try:
        data = _body()
        levels = _repo().levels
        _found(levels.get_level_by_id(level_id), 'Level', level_id)
        levels.update_level(level_id, data)
        return _updated(COLLECTION_LEVELS, level_id, data)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/levels/<level_id>', methods=['DELETE'])
@require_admin
def delete_level(level_id):
    try:
        levels = _repo().levels
        _found(levels.get_level_by_id(level_id), 'Level', level_id)
        levels.delete_level(level_id)
        return _deleted(COLLECTION_LEVELS, level_id)
    except Exception as e:
        return handle_error(e)

# ============= ASSIGNMENT ENDPOINTS =============

@api_bp.route('/classes/<class_id>/assignments', methods=['GET'])
@require_auth
def list_class_assignments(class_id):
    """Active assignments for a class"""
    try:
        assignments = _repo().assignments.get_assignments_by_class(class_id)
        return jsonify({'assignments': [assignment.to_api() for assignment in assignments]})
    except Exception as e:
        return handle_error(e)

@api_bp.route('/assignments/<assignment_id>', methods=['GET'])
@require_auth
def get_assignment(assignment_id):
    try:
        assignment = _repo().assignments.get_assignment_by_id(assignment_id)
        return jsonify(_found(assignment, 'Assignment', assignment_id).to_api())
    except Exception as e:
        return handle_error(e)

@api_bp.route('/assignments', methods=['POST'])
@require_teacher
def create_assignment():
    try:
        data = _body()
        if 'createdBy' not in data and 'created_by' not in data and _actor().get('user_id'):
            data['createdBy'] = _actor()['user_id']
        assignment_id = _repo().assignments.create_assignment(data)
        return _created(COLLECTION_ASSIGNMENTS, assignment_id, data)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/assignments/<assignment_id>', methods=['PUT'])
@require_teacher
def update_assignment(assignment_id):
    try:
        data = _body()
        assignments = _repo().assignments
        _found(assignments.get_assignment_by_id(assignment_id), 'Assignment', assignment_id)
        assignments.update_assignment(assignment_id, data)
        return _updated(COLLECTION_ASSIGNMENTS, assignment_id, data)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/assignments/<assignment_id>', methods=['DELETE'])
@require_teacher
def delete_assignment(assignment_id):
    try:
        assignments = _repo().assignments
        _found(assignments.get_assignment_by_id(assignment_id), 'Assignment', assignment_id)
        assignments.delete_assignment(assignment_id)
        return _deleted(COLLECTION_ASSIGNMENTS, assignment_id)
    except Exception as e:
        return handle_error(e)

# ============= SUBMISSION ENDPOINTS =============

@api_bp.route('/assignments/<assignment_id>/submissions', methods=['GET'])
@require_teacher
def list_assignment_submissions(assignment_id):
    try:
        submissions = _repo().submissions.get_submissions_by_assignment(assignment_id)
        return jsonify({'submissions': [submission.to_api() for submission in submissions]})
    except Exception as e:
        return handle_error(e)

@api_bp.route('/students/<student_id>/submissions', methods=['GET'])
@require_auth
def list_student_submissions(student_id):
    try:
        submissions = _repo().submissions.get_submissions_by_student(student_id)
        return jsonify({'submissions': [submission.to_api() for submission in submissions]})
    except Exception as e:
        return handle_error(e)

@api_bp.route('/submissions/<submission_id>', methods=['GET'])
@require_auth
def get_submission(submission_id):
    try:
        submission = _repo().submissions.get_submission_by_id(submission_id)
        return jsonify(_found(submission, 'Submission', submission_id).to_api())
    except Exception as e:
        return handle_error(e)

@api_bp.route('/submissions', methods=['POST'])
@require_auth
def create_submission():
    try:
        data = _body()
        submission_id = _repo().submissions.create_submission(data)
        return _created(COLLECTION_SUBMISSIONS, submission_id, data)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/submissions/<submission_id>/grade', methods=['POST'])
@require_teacher
def grade_submission(submission_id):
    """Record score and feedback for a submission"""
    try:
        data = _body()
        validate_request_data(data, ['score'])
        submissions = _repo().submissions
        _found(submissions.get_submission_by_id(submission_id), 'Submission', submission_id)
        submissions.grade_submission(submission_id, data['score'], data.get('feedback'))
        return _updated(COLLECTION_SUBMISSIONS, submission_id, data)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/submissions/<submission_id>', methods=['DELETE'])
@require_teacher
def delete_submission(submission_id):
    try:
        submissions = _repo().submissions
        _found(submissions.get_submission_by_id(submission_id), 'Submission', submission_id)
        submissions.delete_submission(submission_id)
        return _deleted(COLLECTION_SUBMISSIONS, submission_id)
    except Exception as e:
        return handle_error(e)

# ============= POTENTIAL STUDENT ENDPOINTS =============

@api_bp.route('/potential-students', methods=['GET'])
@require_admin
def list_potential_students():
    try:
        leads = _repo().potential_students.get_all_potential_students(status=request.args.get('status'))
        return jsonify({'potentialStudents': [lead.to_api() for lead in leads]})
    except Exception as e:
        return handle_error(e)

@api_bp.route('/potential-students/<potential_student_id>', methods=['GET'])
@require_admin
def get_potential_student(potential_student_id):
    try:
        lead = _repo().potential_students.get_potential_student_by_id(potential_student_id)
        return jsonify(_found(lead, 'Potential student', potential_student_id).to_api())
    except Exception as e:
        return handle_error(e)

@api_bp.route('/potential-students', methods=['POST'])
@require_admin
def create_potential_student():
    try:
        data = _body()
        lead_id = _repo().potential_students.create_potential_student(data)
        return _created(COLLECTION_POTENTIAL_STUDENTS, lead_id, data)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/potential-students/<potential_student_id>', methods=['PUT'])
@require_admin
def update_potential_student(potential_student_id):
    try:
        data = _body()
        leads = _repo().potential_students
        _found(leads.get_potential_student_by_id(potential_student_id), 'Potential student', potential_student_id)
        leads.update_potential_student(potential_student_id, data)
        return _updated(COLLECTION_POTENTIAL_STUDENTS, potential_student_id, data)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/potential-students/<potential_student_id>', methods=['DELETE'])
@require_admin
def delete_potential_student(potential_student_id):
    try:
        leads = _repo().potential_students
        _found(leads.get_potential_student_by_id(potential_student_id), 'Potential student', potential_student_id)
        leads.delete_potential_student(potential_student_id)
        return _deleted(COLLECTION_POTENTIAL_STUDENTS, potential_student_id)
    except Exception as e:
        return handle_error(e)

# ============= STUDENT RECORD ENDPOINTS =============

@api_bp.route('/students/<student_id>/records', methods=['GET'])
@require_auth
def list_student_records(student_id):
    try:
        records = _repo().student_records.get_student_records_by_student(student_id)
        return jsonify({'records': [record.to_api() for record in records]})
    except Exception as e:
        return handle_error(e)

@api_bp.route('/student-records/<record_id>', methods=['GET'])
@require_auth
def get_student_record(record_id):
    try:
        record = _repo().student_records.get_student_record_by_id(record_id)
        return jsonify(_found(record, 'Student record', record_id).to_api())
    except Exception as e:
        return handle_error(e)

@api_bp.route('/student-records', methods=['POST'])
@require_teacher
def create_student_record():
    try:
        data = _body()
        record_id = _repo().student_records.create_student_record(data)
        return _created(COLLECTION_STUDENT_RECORDS, record_id, data)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/student-records/<record_id>', methods=['PUT'])
@require_teacher
def update_student_record(record_id):
    try:
        data = _body()
        records = _repo().student_records
        _found(records.get_student_record_by_id(record_id), 'Student record', record_id)
        records.update_student_record(record_id, data)
        return _updated(COLLECTION_STUDENT_RECORDS, record_id, data)
    except Exception as e:
        return handle_error(e)

@api_bp.route('/student-records/<record_id>', methods=['DELETE'])
@require_teacher
def delete_student_record(record_id):
    try:
        records = _repo().student_records
        _found(records.get_student_record_by_id(record_id), 'Student record', record_id)
        records.delete_student_record(record_id)
        return _deleted(COLLECTION_STUDENT_RECORDS, record_id)
    except Exception as e:
        return handle_error(e)

# ============= LOG ENDPOINTS =============

@api_bp.route('/change-logs', methods=['GET'])
@require_admin
def list_change_logs():
    """Change logs, optionally for ?collection= and ?documentId="""
    try:
        logs = _repo().change_logs.get_change_logs(
            collection=request.args.get('collection'),
            document_id=request.args.get('documentId')
        )
        return jsonify({'changeLogs': [log.to_api() for log in logs]})
    except Exception as e:
        return handle_error(e)

@api_bp.route('/change-logs', methods=['POST'])
@require_auth
def create_change_log():
    try:
        data = _body()
        validate_request_data(data, ['action', 'collection', 'documentId'])
        log_id = _repo().change_logs.record(
            data['action'], data['collection'], data['documentId'], _actor(), changes=data.get('changes')
        )
        return jsonify({'id': log_id, 'message': 'Change log created successfully'}), 201
    except Exception as e:
        return handle_error(e)

@api_bp.route('/audit-logs', methods=['GET'])
@require_admin
def list_audit_logs():
    """Audit logs for ?date=YYYY-MM-DD and/or ?actorId="""
    try:
        logs = _repo().audit.get_audit_logs(
            date=request.args.get('date'),
            actor_id=request.args.get('actorId')
        )
        return jsonify({'auditLogs': [log.to_api() for log in logs]})
    except Exception as e:
        return handle_error(e)

@api_bp.route('/audit-logs', methods=['POST'])
@require_admin
def create_audit_log():
    try:
        data = _body()
        validate_request_data(data, ['action', 'targetType', 'targetId'])
        _audit(data['action'], data['targetType'], data['targetId'], data.get('details', {}))
        return jsonify({'message': 'Audit log recorded'}), 201
    except Exception as e:
        return handle_error(e)


def not_found(error):
    return jsonify({'error': 'Endpoint not found'}), 404

def method_not_allowed(error):
    return jsonify({'error': 'Method not allowed'}), 405

def internal_error(error):
    logger.error(f"Internal server error: {str(error)}")
    return jsonify({'error': 'Internal server error'}), 500

def create_app(repository=None):
    """
    Build the Flask app around a Repository; by default one backed by the
    process-wide Firestore client
    """
    if repository is None:
        repository = Repository(get_firestore_client(), check_references=Config.CHECK_REFERENCES)

    app = Flask(__name__)
    CORS(app, origins=Config.ALLOWED_ORIGINS)
    app.extensions['skillup_repository'] = repository
    app.register_blueprint(api_bp)

    app.register_error_handler(404, not_found)
    app.register_error_handler(405, method_not_allowed)
    app.register_error_handler(500, internal_error)

    logger.info(f"SkillUp API ready ({Config.ENVIRONMENT})")
    return app

_app = None

def _get_app():
    global _app
    if _app is None:
        _app = create_app()
    return _app

# Firebase Cloud Function wrapper
@https_fn.on_request(
    cors=options.CorsOptions(
        cors_origins=Config.ALLOWED_ORIGINS,
        cors_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
)
def api(req):
    """Main Cloud Function entry point"""
    flask_app = _get_app()
    with flask_app.request_context(req.environ):
        return flask_app.full_dispatch_request()

# For local development
if __name__ == '__main__':
    create_app().run(debug=Config.ENVIRONMENT == 'development', host='0.0.0.0', port=5000)
