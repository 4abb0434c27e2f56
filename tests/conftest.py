from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from flask import Flask
from flask.testing import FlaskClient

from app import create_app
from app.extensions import db
from app.models.patient_models import Patient
from app.models.user_models import User
from app.services.patient_service import PatientService
from app.services.user_service import UserService

NORMAL_READINGS = {
    'blood_pressure_high': 120,
    'blood_pressure_low': 80,
    'respiration_rate': 16,
    'blood_oxygen_level': 98,
    'heart_beat_rate': 72,
}


def make_entry(date: str = '2024-05-01T08:30:00', **overrides: int) -> dict:
    """A complete, in-range clinical entry; keyword overrides replace readings."""
    entry = {'date': date, **NORMAL_READINGS}
    entry.update(overrides)
    return entry


@pytest.fixture
def app() -> Iterator[Flask]:
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    return app.test_client()


@pytest.fixture
def user_service(app: Flask) -> UserService:
    return UserService(db.session)


@pytest.fixture
def patient_service(app: Flask) -> PatientService:
    return PatientService(db.session)


@pytest.fixture
def owner(user_service: UserService) -> User:
    return user_service.create({
        'name': 'Dana Reyes',
        'email': 'dana.reyes@clinic.test',
        'password': 'correct horse battery',
        'phone': '555-0100',
        'position': 'Nurse',
    })


@pytest.fixture
def patient_payload(owner: User) -> Callable[..., dict]:
    def _payload(**overrides: object) -> dict:
        payload = {
            'name': 'Sam Patel',
            'email': 'sam.patel@example.test',
            'phone': '555-0199',
            'birth_date': '1985-03-14',
            'gender': 'Male',
            'address': '12 Harbor Road',
            'owner_user_id': owner.id,
        }
        payload.update(overrides)
        return payload
    return _payload


@pytest.fixture
def patient(patient_service: PatientService, patient_payload: Callable[..., dict]) -> Patient:
    return patient_service.create(patient_payload())
