# /app/services/patient_service.py
import logging
from app.models.patient_models import Patient, GENDERS, STATUSES
from app.models.user_models import User
from app.services.base import BaseService, id_in_range
from app.services.clinical_service import ClinicalEntryStore
from app.services.critical_service import CriticalPatientClassifier
from app.utils.exceptions import ConflictError, ValidationError
from app.utils.validators import (
    parse_choice, parse_date, parse_int, parse_optional_string, parse_string,
    reject_unknown_fields, require_fields, require_json_object,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('name', 'email', 'phone', 'birth_date', 'gender', 'address', 'owner_user_id')
CREATE_FIELDS = REQUIRED_FIELDS + ('status', 'image')
# owner_user_id, id and clinical_entries are not writable through update
UPDATE_FIELDS = ('name', 'email', 'phone', 'birth_date', 'gender', 'address', 'status', 'image')

DUPLICATE_EMAIL = 'A patient with this email already exists'


def _clean_patient_fields(data):
    """Parses whichever demographic fields are present in ``data``."""
    cleaned = {}
    for field in ('name', 'email', 'phone', 'address'):
        if field in data:
            cleaned[field] = parse_string(data[field], field)
    if 'birth_date' in data:
        cleaned['birth_date'] = parse_date(data['birth_date'], 'birth_date')
    if 'gender' in data:
        cleaned['gender'] = parse_choice(data['gender'], GENDERS, 'gender')
    if 'status' in data:
        cleaned['status'] = parse_choice(data['status'], STATUSES, 'status')
    if 'image' in data:
        cleaned['image'] = parse_optional_string(data['image'], 'image')
    return cleaned


class PatientService(BaseService):
    """Whole-record patient lifecycle.

    Clinical entry operations and the critical query are delegated to
    ``self.clinical`` and ``self.classifier``, which share this session.
    """

    def __init__(self, session, thresholds=None):
        super().__init__(session)
        self.clinical = ClinicalEntryStore(session)
        self.classifier = CriticalPatientClassifier(session, thresholds)

    def _email_taken(self, email, exclude_id=None):
        with self.store_errors():
            query = self.session.query(Patient.id).filter(Patient.email == email)
            if exclude_id is not None:
                query = query.filter(Patient.id != exclude_id)
            return query.first() is not None

    def create(self, data):
        data = require_json_object(data)
        reject_unknown_fields(data, CREATE_FIELDS)
        require_fields(data, REQUIRED_FIELDS)

        values = _clean_patient_fields(data)
        owner_id = parse_int(data['owner_user_id'], 'owner_user_id')

        owner = None
        if id_in_range(owner_id):
            with self.store_errors():
                owner = self.session.get(User, owner_id)
        if owner is None:
            raise ValidationError("'owner_user_id' does not reference an existing user")
        if self._email_taken(values['email']):
            raise ConflictError(DUPLICATE_EMAIL)

        values.setdefault('status', 'Normal')
        patient = Patient(owner_user_id=owner_id, clinical_entries=[], **values)
        self.session.add(patient)
        self.commit(conflict_message=DUPLICATE_EMAIL)

        logger.info(f'Created patient {patient.id} for user {owner_id}')
        return patient

    def get(self, patient_id):
        return self.get_patient(patient_id)

    def list_all(self):
        with self.store_errors():
            return self.session.query(Patient).order_by(Patient.id).all()

    def update(self, patient_id, data):
        """Partial update; only the supplied allow-listed fields change."""
        patient = self.get_patient(patient_id)
        data = require_json_object(data)
        reject_unknown_fields(data, UPDATE_FIELDS)
        values = _clean_patient_fields(data)

        if 'email' in values and self._email_taken(values['email'], exclude_id=patient.id):
            raise ConflictError(DUPLICATE_EMAIL)

        for field, value in values.items():
            setattr(patient, field, value)
        self.commit(conflict_message=DUPLICATE_EMAIL)

        logger.info(f'Updated patient {patient_id}: {sorted(values)}')
        return patient

    def delete(self, patient_id):
        """Removes the patient row and, with it, every embedded clinical entry."""
        patient = self.get_patient(patient_id)
        self.session.delete(patient)
        self.commit()
        logger.info(f'Deleted patient {patient_id}')
