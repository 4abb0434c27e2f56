from flask import request, jsonify, current_app
from app.extensions import db
from app.services.critical_service import CriticalThresholds
from app.services.patient_service import PatientService


def _service():
    thresholds = CriticalThresholds.from_mapping(current_app.config.get('CRITICAL_THRESHOLDS'))
    return PatientService(db.session, thresholds)


def create_patient():
    """Creates a patient record owned by an existing staff account."""
    patient = _service().create(request.get_json(silent=True))
    return jsonify(patient.to_dict()), 201


def get_all_patients():
    patients = _service().list_all()
    return jsonify([p.to_dict() for p in patients]), 200


def get_patient_by_id(patient_id):
    return jsonify(_service().get(patient_id).to_dict()), 200


def update_patient(patient_id):
    """Partially updates a patient's demographic fields."""
    patient = _service().update(patient_id, request.get_json(silent=True))
    return jsonify(patient.to_dict()), 200


def delete_patient(patient_id):
    _service().delete(patient_id)
    return '', 204


def get_critical_patients():
    """Lists patients whose latest readings breach a threshold or who are flagged Critical."""
    results = _service().classifier.find_critical()
    return jsonify([
        {**patient.to_dict(), 'critical_reasons': reasons}
        for patient, reasons in results
    ]), 200
