# /app/services/clinical_service.py
"""Positional CRUD over the clinical entries embedded in a patient row.

Entries have no identifier of their own: index 0 is the oldest entry and
deleting one shifts every later entry down by one position, so an index is
only meaningful against the sequence it was read from.

Each operation re-reads the patient, builds a new list, assigns it back and
commits. The patient row is versioned, so if another request committed in
between, the commit fails with ConflictError instead of overwriting it.
"""
import logging
from sqlalchemy.orm.attributes import flag_modified
from app.services.base import BaseService
from app.utils.exceptions import IndexOutOfRangeError
from app.utils.validators import clean_clinical_entry

logger = logging.getLogger(__name__)


class ClinicalEntryStore(BaseService):

    @staticmethod
    def _check_index(entries, index):
        if index < 0 or index >= len(entries):
            raise IndexOutOfRangeError(
                f'Clinical entry index {index} is out of range for {len(entries)} entries'
            )

    def _save_entries(self, patient, entries):
        patient.clinical_entries = entries
        flag_modified(patient, 'clinical_entries')
        self.commit()

    def append(self, patient_id, data):
        """Validates a complete entry and appends it as the most recent one."""
        patient = self.get_patient(patient_id)
        entry = clean_clinical_entry(data)

        entries = list(patient.clinical_entries or [])
        entries.append(entry)
        self._save_entries(patient, entries)

        logger.info(f'Appended clinical entry {len(entries) - 1} to patient {patient_id}')
        return patient

    def fetch_by_index(self, patient_id, index):
        patient = self.get_patient(patient_id)
        entries = patient.clinical_entries or []
        self._check_index(entries, index)
        return dict(entries[index])

    def update_by_index(self, patient_id, index, data):
        """Merges the supplied fields into one entry; omitted fields keep their values."""
        patient = self.get_patient(patient_id)
        entries = list(patient.clinical_entries or [])
        self._check_index(entries, index)
        changes = clean_clinical_entry(data, partial=True)

        entries[index] = {**entries[index], **changes}
        self._save_entries(patient, entries)

        logger.info(f'Updated clinical entry {index} of patient {patient_id}: {sorted(changes)}')
        return patient

    def delete_by_index(self, patient_id, index):
        patient = self.get_patient(patient_id)
        entries = list(patient.clinical_entries or [])
        self._check_index(entries, index)

        del entries[index]
        self._save_entries(patient, entries)

        logger.info(f'Deleted clinical entry {index} of patient {patient_id}')
        return patient
