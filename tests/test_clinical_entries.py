"""
Tests for positional clinical entry operations in `app/services/clinical_service.py`.

Covers:
- Append then fetch of the last index
- Order preservation when deleting from the middle
- Out-of-range indices for empty and non-empty histories
- Partial update merging and validation
- Optimistic concurrency on the patient row
"""

from __future__ import annotations

from collections.abc import Callable

import pytest
from sqlalchemy import update

from app.extensions import db
from app.models.patient_models import Patient
from app.services.clinical_service import ClinicalEntryStore
from app.services.patient_service import PatientService
from app.utils.exceptions import (
    ConflictError,
    IndexOutOfRangeError,
    NotFoundError,
    ValidationError,
)
from conftest import make_entry


def _append_many(service: PatientService, patient_id: int, count: int) -> list[dict]:
    entries = [make_entry(date=f'2024-05-0{i + 1}T09:00:00', heart_beat_rate=70 + i) for i in range(count)]
    for entry in entries:
        service.clinical.append(patient_id, entry)
    return entries


def test_append_then_fetch_last_returns_entry(patient_service: PatientService, patient: Patient) -> None:
    _append_many(patient_service, patient.id, 2)
    entry = make_entry(date='2024-06-01T12:15:00', blood_oxygen_level=91)

    updated = patient_service.clinical.append(patient.id, entry)
    last = len(updated.clinical_entries) - 1

    assert last == 2
    assert patient_service.clinical.fetch_by_index(patient.id, last) == entry


def test_append_accepts_short_aliases_and_numeric_strings(patient_service: PatientService, patient: Patient) -> None:
    patient_service.clinical.append(patient.id, {
        'date': '2024-05-01T08:30:00Z',
        'bph': '130',
        'bpl': 85,
        'rr': 18.0,
        'bol': 97,
        'hbr': 66,
    })

    stored = patient_service.clinical.fetch_by_index(patient.id, 0)
    assert stored == {
        'date': '2024-05-01T08:30:00+00:00',
        'blood_pressure_high': 130,
        'blood_pressure_low': 85,
        'respiration_rate': 18,
        'blood_oxygen_level': 97,
        'heart_beat_rate': 66,
    }


@pytest.mark.parametrize('missing', ['date', 'blood_pressure_high', 'heart_beat_rate'])
def test_append_requires_every_field(patient_service: PatientService, patient: Patient, missing: str) -> None:
    entry = make_entry()
    del entry[missing]

    with pytest.raises(ValidationError):
        patient_service.clinical.append(patient.id, entry)

    assert patient_service.get(patient.id).clinical_entries == []


@pytest.mark.parametrize('bad', [
    {'heart_beat_rate': 'fast'},
    {'heart_beat_rate': True},
    {'blood_oxygen_level': 97.5},
    {'date': 'yesterday'},
    {'temperature': 37},
])
def test_append_rejects_malformed_entries(patient_service: PatientService, patient: Patient, bad: dict) -> None:
    with pytest.raises(ValidationError):
        patient_service.clinical.append(patient.id, {**make_entry(), **bad})


def test_append_to_unknown_patient_is_not_found(patient_service: PatientService) -> None:
    with pytest.raises(NotFoundError):
        patient_service.clinical.append(9999, make_entry())


def test_delete_shifts_later_entries_down(patient_service: PatientService, patient: Patient) -> None:
    entries = _append_many(patient_service, patient.id, 5)

    remaining = patient_service.clinical.delete_by_index(patient.id, 2).clinical_entries

    assert len(remaining) == 4
    assert remaining[:2] == entries[:2]
    assert remaining[2:] == entries[3:]


@pytest.mark.parametrize('k', [0, 3])
def test_delete_first_and_last(patient_service: PatientService, patient: Patient, k: int) -> None:
    entries = _append_many(patient_service, patient.id, 4)

    remaining = patient_service.clinical.delete_by_index(patient.id, k).clinical_entries

    assert remaining == entries[:k] + entries[k + 1:]


@pytest.mark.parametrize('count,index', [(0, 0), (0, -1), (0, 1), (3, 3), (3, -1), (3, 10)])
def test_out_of_range_indices_fail_without_mutation(
    patient_service: PatientService, patient: Patient, count: int, index: int
) -> None:
    entries = _append_many(patient_service, patient.id, count)
    store = patient_service.clinical

    with pytest.raises(IndexOutOfRangeError):
        store.fetch_by_index(patient.id, index)
    with pytest.raises(IndexOutOfRangeError):
        store.update_by_index(patient.id, index, {'heart_beat_rate': 60})
    with pytest.raises(IndexOutOfRangeError):
        store.delete_by_index(patient.id, index)

    assert patient_service.get(patient.id).clinical_entries == entries


def test_update_merges_supplied_fields(patient_service: PatientService, patient: Patient) -> None:
    entries = _append_many(patient_service, patient.id, 3)

    updated = patient_service.clinical.update_by_index(patient.id, 1, {'bph': 175, 'respiration_rate': 22})

    assert updated.clinical_entries[1] == {**entries[1], 'blood_pressure_high': 175, 'respiration_rate': 22}
    assert updated.clinical_entries[0] == entries[0]
    assert updated.clinical_entries[2] == entries[2]


@pytest.mark.parametrize('body', [{}, {'heart_beat_rate': None}, {'unknown': 1}, ['not', 'an', 'object']])
def test_update_rejects_invalid_bodies(patient_service: PatientService, patient: Patient, body: object) -> None:
    entries = _append_many(patient_service, patient.id, 1)

    with pytest.raises(ValidationError):
        patient_service.clinical.update_by_index(patient.id, 0, body)

    assert patient_service.get(patient.id).clinical_entries == entries


def test_deleted_patient_reports_not_found(patient_service: PatientService, patient: Patient) -> None:
    _append_many(patient_service, patient.id, 2)
    patient_id = patient.id

    patient_service.delete(patient_id)

    with pytest.raises(NotFoundError):
        patient_service.clinical.fetch_by_index(patient_id, 0)


@pytest.mark.parametrize('operation', [
    lambda store, pid: store.append(pid, make_entry()),
    lambda store, pid: store.update_by_index(pid, 0, {'heart_beat_rate': 99}),
    lambda store, pid: store.delete_by_index(pid, 0),
], ids=['append', 'update_by_index', 'delete_by_index'])
def test_concurrent_modification_is_rejected(
    patient_service: PatientService,
    patient: Patient,
    monkeypatch: pytest.MonkeyPatch,
    operation: Callable[[ClinicalEntryStore, int], Patient],
) -> None:
    store = patient_service.clinical
    patient_id = patient.id
    entries = _append_many(patient_service, patient_id, 2)
    load = store.get_patient
    table = Patient.__table__

    def load_then_bump(pid: int) -> Patient:
        # Another writer commits between our read and our write
        loaded = load(pid)
        db.session.execute(
            update(table).where(table.c.id == pid).values(version_id=table.c.version_id + 1)
        )
        return loaded

    monkeypatch.setattr(store, 'get_patient', load_then_bump)
    with pytest.raises(ConflictError):
        operation(store, patient_id)

    monkeypatch.undo()
    assert store.get_patient(patient_id).clinical_entries == entries


@pytest.mark.parametrize('patient_id', [0, -3, 10**20])
def test_out_of_range_patient_id_is_not_found(patient_service: PatientService, patient_id: int) -> None:
    with pytest.raises(NotFoundError):
        patient_service.clinical.fetch_by_index(patient_id, 0)
    with pytest.raises(NotFoundError):
        patient_service.get(patient_id)
