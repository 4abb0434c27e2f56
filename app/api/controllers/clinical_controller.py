from flask import request, jsonify
from app.extensions import db
from app.services.clinical_service import ClinicalEntryStore
from app.utils.validators import parse_index


def add_clinical_entry(patient_id):
    """Appends a clinical entry to the end of the patient's history."""
    patient = ClinicalEntryStore(db.session).append(patient_id, request.get_json(silent=True))
    return jsonify(patient.to_dict()), 200


def get_clinical_entry(patient_id, index):
    entry = ClinicalEntryStore(db.session).fetch_by_index(patient_id, parse_index(index))
    return jsonify(entry), 200


def update_clinical_entry(patient_id, index):
    patient = ClinicalEntryStore(db.session).update_by_index(
        patient_id, parse_index(index), request.get_json(silent=True)
    )
    return jsonify(patient.to_dict()), 200


def delete_clinical_entry(patient_id, index):
    """Removes one entry; every later entry moves down one position."""
    patient = ClinicalEntryStore(db.session).delete_by_index(patient_id, parse_index(index))
    return jsonify({
        'message': 'Clinical entry deleted successfully',
        'patient': patient.to_dict()
    }), 200
