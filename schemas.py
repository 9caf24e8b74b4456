"""
Database Schemas for SkillUp

Each Pydantic model below maps to a Firestore collection. Attributes are
snake_case in Python and camelCase in the stored documents; the camelCase
names are what every other consumer of these collections reads and writes.

Example:
- User -> "users"
- Class -> "classes"
- PotentialStudent -> "potentialStudents"
"""

from datetime import datetime
from typing import Annotated, Any, ClassVar, Dict, Iterator, List, Literal, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from utils.error_handler import ValidationError

COLLECTION_USERS = 'users'
COLLECTION_CLASSES = 'classes'
COLLECTION_LEVELS = 'levels'
COLLECTION_ASSIGNMENTS = 'assignments'
COLLECTION_SUBMISSIONS = 'submissions'
COLLECTION_POTENTIAL_STUDENTS = 'potentialStudents'
COLLECTION_STUDENT_RECORDS = 'studentRecords'
COLLECTION_CHANGE_LOGS = 'changeLogs'
COLLECTION_AUDIT_LOGS = 'auditLogs'

UserRole = Literal['student', 'teacher', 'admin', 'staff']
UserStatus = Literal['active', 'potential', 'contacted', 'studying', 'postponed', 'off', 'alumni']
Gender = Literal['male', 'female', 'other']
SubmissionStatus = Literal['submitted', 'graded', 'late']
LeadSource = Literal['admin_registration', 'website', 'referral', 'other']
LeadStatus = Literal['pending', 'contacted', 'enrolled', 'not_interested']
ChangeAction = Literal['create', 'update', 'delete']

# Written by the store, never by callers
SERVER_MANAGED_FIELDS = ('id', 'created_at', 'updated_at')


class Ref(NamedTuple):
    """A typed reference to a document in another collection."""
    collection: str
    id: str


_partial_adapters = {}


def _field_adapter(model, name):
    key = (model, name)
    if key not in _partial_adapters:
        info = model.model_fields[name]
        annotation = info.annotation
        if info.metadata:
            annotation = Annotated[(annotation, *info.metadata)]
        _partial_adapters[key] = TypeAdapter(annotation)
    return _partial_adapters[key]


class Document(BaseModel):
    """
    Base for every stored entity.

    Reads tolerate fields this schema does not know about; writes reject them.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='allow')

    collection_name: ClassVar[str] = ''
    # attribute name -> collection the id points into
    reference_fields: ClassVar[Dict[str, str]] = {}

    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def _field_name(cls, key):
        if key in cls.model_fields:
            return key
        for name, info in cls.model_fields.items():
            if info.alias == key:
                return name
        return None

    @classmethod
    def from_document(cls, data):
        """Parse a stored document (with its injected id) into an entity."""
        return cls.model_validate(data)

    @classmethod
    def coerce(cls, data):
        """
        Validate a full entity for writing. Accepts an instance of the model
        or a mapping keyed by attribute names or stored field names.
        """
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            raise ValidationError(f"{cls.__name__} data must be a mapping")

        unknown = [key for key in data if cls._field_name(key) is None]
        if unknown:
            raise ValidationError(
                f"Unknown {cls.__name__} fields: {', '.join(sorted(unknown))}",
                field=unknown[0]
            )
        return cls.model_validate(data)

    @classmethod
    def validate_partial(cls, changes):
        """
        Validate a partial update field by field.
        Returns the validated values keyed by attribute name.
        """
        if not isinstance(changes, dict):
            raise ValidationError(f"{cls.__name__} changes must be a mapping")

        validated = {}
        for key, value in changes.items():
            name = cls._field_name(key)
            if name is None:
                raise ValidationError(f"Unknown {cls.__name__} field: {key}", field=key)
            if name in SERVER_MANAGED_FIELDS:
                raise ValidationError(f"Field '{key}' is managed by the store", field=key)
            validated[name] = _field_adapter(cls, name).validate_python(value)

        cls.check_partial(validated)
        return validated

    @classmethod
    def check_partial(cls, validated):
        """Cross-item checks the per-field adapters cannot express."""

    @classmethod
    def dump_partial(cls, validated):
        """Dump validated partial values under their stored field names."""
        document = {}
        for name, value in validated.items():
            alias = cls.model_fields[name].alias or name
            document[alias] = _field_adapter(cls, name).dump_python(value, by_alias=True)
        return document

    @classmethod
    def references_in(cls, values):
        for name, collection in cls.reference_fields.items():
            value = values.get(name)
            if value is None:
                continue
            if isinstance(value, (list, tuple, set)):
                for item in value:
                    yield Ref(collection, item)
            else:
                yield Ref(collection, value)

    def references(self) -> Iterator[Ref]:
        """Yield every reference this entity holds to another document."""
        values = {name: getattr(self, name) for name in self.reference_fields}
        return self.references_in(values)

    def to_document(self) -> Dict[str, Any]:
        """Body to store: stored field names, no id, no server timestamps."""
        return self.model_dump(
            by_alias=True,
            exclude_none=True,
            exclude=set(SERVER_MANAGED_FIELDS),
        )

    def to_api(self) -> Dict[str, Any]:
        """JSON-safe representation including id and timestamps."""
        return self.model_dump(mode='json', by_alias=True, exclude_none=True)


# Identities

class User(Document):
    collection_name: ClassVar[str] = COLLECTION_USERS
    reference_fields: ClassVar[Dict[str, str]] = {'class_ids': COLLECTION_CLASSES}

    firebase_uid: Optional[str] = None
    username: Optional[str] = None
    name: Optional[str] = None
    display_name: Optional[str] = None
    email: str
    role: UserRole
    gender: Optional[Gender] = None
    english_name: Optional[str] = None
    dob: Optional[str] = None
    phone: Optional[str] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    notes: Optional[str] = None
    status: UserStatus = 'active'
    student_code: Optional[str] = None
    avatar_url: Optional[str] = None
    dice_bear_style: Optional[str] = None
    dice_bear_seed: Optional[str] = None
    class_ids: List[str] = Field(default_factory=list)


class PotentialStudent(Document):
    """A lead waiting to be enrolled; promoted to a User by hand."""
    collection_name: ClassVar[str] = COLLECTION_POTENTIAL_STUDENTS
    reference_fields: ClassVar[Dict[str, str]] = {'assigned_to': COLLECTION_USERS}

    name: str
    english_name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    gender: Optional[Gender] = None
    dob: Optional[str] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    source: LeadSource = 'other'
    status: LeadStatus = 'pending'
    notes: Optional[str] = None
    current_school: Optional[str] = None
    current_grade: Optional[str] = None
    english_level: Optional[str] = None
    parent_email: Optional[str] = None
    interested_programs: List[str] = Field(default_factory=list)
    assigned_to: Optional[str] = None


# Academic structure

class Level(Document):
    collection_name: ClassVar[str] = COLLECTION_LEVELS

    name: str
    description: Optional[str] = None
    order: int
    is_active: bool = True
    monthly_fee: Optional[float] = Field(None, ge=0)


class Class(Document):
    collection_name: ClassVar[str] = COLLECTION_CLASSES
    reference_fields: ClassVar[Dict[str, str]] = {
        'level_id': COLLECTION_LEVELS,
        'teacher_id': COLLECTION_USERS,
        'student_ids': COLLECTION_USERS,
    }

    name: str
    class_code: str
    level_id: Optional[str] = None
    description: Optional[str] = None
    teacher_id: Optional[str] = None
    student_ids: List[str] = Field(default_factory=list)
    is_active: bool = True


# Assignments

class MatchPair(BaseModel):
    model_config = ConfigDict(extra='allow')

    left: str
    right: str


class QuestionBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='allow')

    id: str
    question: str = ''
    image_url: Optional[str] = None
    audio_url: Optional[str] = None


class McqQuestion(QuestionBase):
    type: Literal['mcq']
    options: List[str] = Field(default_factory=list)
    answer: Optional[str] = None


class FillQuestion(QuestionBase):
    type: Literal['fill']
    answer: Optional[Union[str, List[str]]] = None


class MatchQuestion(QuestionBase):
    type: Literal['match']
    match_pairs: List[MatchPair] = Field(default_factory=list)
    answer: Optional[Union[str, List[str]]] = None


class EssayQuestion(QuestionBase):
    type: Literal['essay']


Question = Annotated[
    Union[McqQuestion, FillQuestion, MatchQuestion, EssayQuestion],
    Field(discriminator='type'),
]


def _duplicate_question_id(questions):
    seen = set()
    for question in questions:
        if question.id in seen:
            return question.id
        seen.add(question.id)
    return None


class Assignment(Document):
    collection_name: ClassVar[str] = COLLECTION_ASSIGNMENTS
    reference_fields: ClassVar[Dict[str, str]] = {
        'class_id': COLLECTION_CLASSES,
        'level_id': COLLECTION_LEVELS,
        'created_by': COLLECTION_USERS,
    }

    title: str
    description: Optional[str] = None
    class_id: str
    level_id: Optional[str] = None
    due_date: Optional[datetime] = None
    max_score: float = Field(..., ge=0)
    is_active: bool = True
    questions: List[Question] = Field(default_factory=list)
    answer_key: Dict[str, Union[str, List[str]]] = Field(default_factory=dict)
    created_by: Optional[str] = None

    @field_validator('questions')
    @classmethod
    def question_ids_unique(cls, questions):
        duplicate = _duplicate_question_id(questions)
        if duplicate is not None:
            raise ValueError(f"duplicate question id: {duplicate}")
        return questions

    @classmethod
    def check_partial(cls, validated):
        duplicate = _duplicate_question_id(validated.get('questions', []))
        if duplicate is not None:
            raise ValidationError(f"Duplicate question id: {duplicate}", field='questions')

    def question_ids(self):
        return [question.id for question in self.questions]

    def dangling_answer_keys(self):
        """
        Answer key entries with no matching question. The store accepts
        them; callers that care check this before saving.
        """
        ids = set(self.question_ids())
        return sorted(key for key in self.answer_key if key not in ids)


class Submission(Document):
    collection_name: ClassVar[str] = COLLECTION_SUBMISSIONS
    reference_fields: ClassVar[Dict[str, str]] = {
        'assignment_id': COLLECTION_ASSIGNMENTS,
        'student_id': COLLECTION_USERS,
        'class_id': COLLECTION_CLASSES,
    }

    assignment_id: str
    student_id: str
    class_id: str
    content: Optional[str] = None
    file_url: Optional[str] = None
    score: Optional[float] = None
    feedback: Optional[str] = None
    submitted_at: Optional[datetime] = None
    graded_at: Optional[datetime] = None
    status: SubmissionStatus = 'submitted'


# Reporting

class StudentRecord(Document):
    """Per-semester scores; final_grade is computed by the caller."""
    collection_name: ClassVar[str] = COLLECTION_STUDENT_RECORDS
    reference_fields: ClassVar[Dict[str, str]] = {
        'student_id': COLLECTION_USERS,
        'class_id': COLLECTION_CLASSES,
        'level_id': COLLECTION_LEVELS,
    }

    student_id: str
    class_id: str
    level_id: Optional[str] = None
    attendance: float
    participation: float
    homework: float
    exam: float
    final_grade: float
    notes: Optional[str] = None
    semester: str
    year: int


class ChangeLog(Document):
    collection_name: ClassVar[str] = COLLECTION_CHANGE_LOGS

    action: ChangeAction
    collection: str
    document_id: str
    user_id: str
    user_name: str
    changes: Dict[str, Any] = Field(default_factory=dict)
    timestamp: Optional[datetime] = None


class AuditLogEntry(Document):
    """Administrative action; timestamp is an ISO-8601 string from the client clock."""
    collection_name: ClassVar[str] = COLLECTION_AUDIT_LOGS

    admin_id: str
    admin_name: str
    action: str
    target_type: str
    target_id: str
    details: Dict[str, Any] = Field(default_factory=dict)
    timestamp: Optional[str] = None
