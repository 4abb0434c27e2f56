# /app/services/critical_service.py
"""Classifies patients as critical from their most recent clinical entry.

Only the latest entry (the highest index) is evaluated; older readings never
make a patient critical on their own. A patient whose stored status is
``Critical`` is always reported, whatever its readings, and the classifier
never writes that status back.
"""
import logging
from dataclasses import dataclass, fields
from typing import Optional
from app.models.patient_models import Patient
from app.services.base import BaseService

logger = logging.getLogger(__name__)

STATUS_FLAG_REASON = 'status flagged Critical'


@dataclass(frozen=True)
class CriticalThresholds:
    """Inclusive normal band per vital sign; a reading outside it is critical."""
    blood_pressure_high_max: int = 160
    blood_pressure_high_min: int = 90
    blood_pressure_low_max: int = 100
    blood_pressure_low_min: int = 50
    respiration_rate_max: int = 24
    respiration_rate_min: int = 10
    blood_oxygen_level_min: int = 94
    heart_beat_rate_max: int = 110
    heart_beat_rate_min: int = 50

    @classmethod
    def from_mapping(cls, mapping):
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (mapping or {}).items() if k in known})


# (entry field, label, upper-bound attribute, lower-bound attribute)
RULES = (
    ('blood_pressure_high', 'Systolic blood pressure', 'blood_pressure_high_max', 'blood_pressure_high_min'),
    ('blood_pressure_low', 'Diastolic blood pressure', 'blood_pressure_low_max', 'blood_pressure_low_min'),
    ('respiration_rate', 'Respiration rate', 'respiration_rate_max', 'respiration_rate_min'),
    ('blood_oxygen_level', 'Blood oxygen level', None, 'blood_oxygen_level_min'),
    ('heart_beat_rate', 'Heart beat rate', 'heart_beat_rate_max', 'heart_beat_rate_min'),
)


class CriticalPatientClassifier(BaseService):

    def __init__(self, session, thresholds: Optional[CriticalThresholds] = None):
        super().__init__(session)
        self.thresholds = thresholds or CriticalThresholds()

    def evaluate(self, entry: dict) -> list:
        """Returns one reason per breached bound; empty when every reading is in range."""
        reasons = []
        for field, label, upper_attr, lower_attr in RULES:
            value = entry.get(field)
            if value is None:
                continue
            if upper_attr and value > getattr(self.thresholds, upper_attr):
                reasons.append(f'{label} {value} above {getattr(self.thresholds, upper_attr)}')
            elif lower_attr and value < getattr(self.thresholds, lower_attr):
                reasons.append(f'{label} {value} below {getattr(self.thresholds, lower_attr)}')
        return reasons

    @staticmethod
    def latest_entry(patient: Patient) -> Optional[dict]:
        entries = patient.clinical_entries or []
        return entries[-1] if entries else None

    def classify(self, patient: Patient) -> list:
        reasons = []
        if patient.status == 'Critical':
            reasons.append(STATUS_FLAG_REASON)
        latest = self.latest_entry(patient)
        if latest is not None:
            reasons.extend(self.evaluate(latest))
        return reasons

    def find_critical(self) -> list:
        """Scans every patient in id order and returns ``(patient, reasons)`` pairs."""
        with self.store_errors():
            patients = self.session.query(Patient).order_by(Patient.id).all()

        critical = []
        for patient in patients:
            reasons = self.classify(patient)
            if reasons:
                critical.append((patient, reasons))

        logger.debug(f'Critical scan: {len(critical)} of {len(patients)} patients flagged')
        return critical
