# /app/services/base.py
import logging
from contextlib import contextmanager
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError
from app.models.patient_models import Patient
from app.utils.exceptions import ConflictError, NotFoundError, StoreUnavailableError

logger = logging.getLogger(__name__)

# Primary keys are signed 32-bit INTEGER columns
MAX_ID = 2**31 - 1


def id_in_range(value):
    return isinstance(value, int) and not isinstance(value, bool) and 0 < value <= MAX_ID


class BaseService:
    """Shared plumbing for services that work against an injected SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    @contextmanager
    def store_errors(self):
        """Turns driver/ORM failures into StoreUnavailableError after a rollback."""
        try:
            yield
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception('Database operation failed')
            raise StoreUnavailableError()

    def commit(self, conflict_message='Record conflicts with an existing one'):
        try:
            self.session.commit()
        except StaleDataError:
            self.session.rollback()
            logger.warning('Concurrent modification detected, update rejected')
            raise ConflictError('Record was modified by another request, reload and try again')
        except IntegrityError as e:
            self.session.rollback()
            logger.info(f'Integrity violation: {e.orig}')
            raise ConflictError(conflict_message)
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception('Database commit failed')
            raise StoreUnavailableError()

    def get_patient(self, patient_id):
        """Always reads the current row; never returns a cached copy."""
        if not id_in_range(patient_id):
            raise NotFoundError('Patient not found')
        with self.store_errors():
            patient = self.session.get(Patient, patient_id, populate_existing=True)
        if patient is None:
            raise NotFoundError('Patient not found')
        return patient
