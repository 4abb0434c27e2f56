# /app/api/routes.py
from flask import current_app
from . import api_bp
from app.extensions import limiter
from app.utils.decorators import audit_log
from .controllers import patient_controller, clinical_controller, user_controller


# --- Patient Endpoints ---
@api_bp.route('/patients', methods=['GET'])
@audit_log("VIEW_ALL_PATIENTS", "patients")
def get_patients_route():
    return patient_controller.get_all_patients()

@api_bp.route('/patients/critical', methods=['GET'])
@audit_log("VIEW_CRITICAL_PATIENTS", "patients")
def get_critical_patients_route():
    return patient_controller.get_critical_patients()

@api_bp.route('/patients', methods=['POST'])
@audit_log("CREATE_PATIENT", "patients")
def create_patient_route():
    return patient_controller.create_patient()

@api_bp.route('/patients/<int:patient_id>', methods=['GET'])
@audit_log("VIEW_PATIENT_DETAIL", "patients")
def get_patient_route(patient_id):
    return patient_controller.get_patient_by_id(patient_id)

@api_bp.route('/patients/<int:patient_id>', methods=['PUT'])
@audit_log("UPDATE_PATIENT", "patients")
def update_patient_route(patient_id):
    return patient_controller.update_patient(patient_id)

@api_bp.route('/patients/<int:patient_id>', methods=['DELETE'])
@audit_log("DELETE_PATIENT", "patients")
def delete_patient_route(patient_id):
    return patient_controller.delete_patient(patient_id)


# --- Clinical Entry Endpoints ---
@api_bp.route('/patients/<int:patient_id>/clinical', methods=['POST'])
@audit_log("ADD_CLINICAL_ENTRY", "clinical_entries")
def add_clinical_entry_route(patient_id):
    return clinical_controller.add_clinical_entry(patient_id)

@api_bp.route('/patients/<int:patient_id>/clinical/<index>', methods=['GET'])
@audit_log("VIEW_CLINICAL_ENTRY", "clinical_entries")
def get_clinical_entry_route(patient_id, index):
    return clinical_controller.get_clinical_entry(patient_id, index)

@api_bp.route('/patients/<int:patient_id>/clinical/<index>', methods=['PUT'])
@audit_log("UPDATE_CLINICAL_ENTRY", "clinical_entries")
def update_clinical_entry_route(patient_id, index):
    return clinical_controller.update_clinical_entry(patient_id, index)

@api_bp.route('/patients/<int:patient_id>/clinical/<index>', methods=['DELETE'])
@audit_log("DELETE_CLINICAL_ENTRY", "clinical_entries")
def delete_clinical_entry_route(patient_id, index):
    return clinical_controller.delete_clinical_entry(patient_id, index)


# --- User Account Endpoints ---
@api_bp.route('/users', methods=['POST'])
@limiter.limit(lambda: current_app.config['USER_CREATE_RATE_LIMIT'])
@audit_log("USER_REGISTRATION", "users")
def create_user_route():
    return user_controller.create_user()

@api_bp.route('/users/<int:user_id>', methods=['GET'])
@audit_log("VIEW_USER", "users")
def get_user_route(user_id):
    return user_controller.get_user_by_id(user_id)

@api_bp.route('/users/<int:user_id>', methods=['PUT'])
@audit_log("UPDATE_USER", "users")
def update_user_route(user_id):
    return user_controller.update_user(user_id)

@api_bp.route('/users/<int:user_id>', methods=['DELETE'])
@audit_log("DELETE_USER", "users")
def delete_user_route(user_id):
    return user_controller.delete_user(user_id)
