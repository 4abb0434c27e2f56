# /app/services/user_service.py
import logging
from app.models.user_models import User, POSITIONS
from app.services.base import BaseService, id_in_range
from app.utils.exceptions import ConflictError, NotFoundError
from app.utils.validators import (
    parse_choice, parse_string, reject_unknown_fields, require_fields, require_json_object,
)

logger = logging.getLogger(__name__)

USER_FIELDS = ('name', 'email', 'password', 'phone', 'position')
DUPLICATE_EMAIL = 'User already exists'


class UserService(BaseService):
    """CRUD for staff accounts; passwords are only ever stored as bcrypt hashes."""

    def _clean(self, data):
        cleaned = {}
        for field in ('name', 'email', 'phone'):
            if field in data:
                cleaned[field] = parse_string(data[field], field)
        if 'password' in data:
            parse_string(data['password'], 'password')
            cleaned['password'] = data['password']
        if 'position' in data:
            cleaned['position'] = parse_choice(data['position'], POSITIONS, 'position')
        return cleaned

    def _email_taken(self, email, exclude_id=None):
        with self.store_errors():
            query = self.session.query(User.id).filter(User.email == email)
            if exclude_id is not None:
                query = query.filter(User.id != exclude_id)
            return query.first() is not None

    def create(self, data):
        data = require_json_object(data)
        reject_unknown_fields(data, USER_FIELDS)
        require_fields(data, USER_FIELDS)
        values = self._clean(data)

        if self._email_taken(values['email']):
            raise ConflictError(DUPLICATE_EMAIL)

        password = values.pop('password')
        user = User(**values)
        user.set_password(password)
        self.session.add(user)
        self.commit(conflict_message=DUPLICATE_EMAIL)

        logger.info(f'Created {user.position} account {user.id}')
        return user

    def get(self, user_id):
        if not id_in_range(user_id):
            raise NotFoundError('User not found')
        with self.store_errors():
            user = self.session.get(User, user_id)
        if user is None:
            raise NotFoundError('User not found')
        return user

    def update(self, user_id, data):
        user = self.get(user_id)
        data = require_json_object(data)
        reject_unknown_fields(data, USER_FIELDS)
        values = self._clean(data)

        if 'email' in values and self._email_taken(values['email'], exclude_id=user.id):
            raise ConflictError(DUPLICATE_EMAIL)

        password = values.pop('password', None)
        if password:
            user.set_password(password)
        for field, value in values.items():
            setattr(user, field, value)
        self.commit(conflict_message=DUPLICATE_EMAIL)
        return user

    def delete(self, user_id):
        user = self.get(user_id)
        with self.store_errors():
            owns_patients = user.patients.first() is not None
        if owns_patients:
            raise ConflictError('User still manages patients, reassign or delete them first')
        self.session.delete(user)
        self.commit()
        logger.info(f'Deleted user {user_id}')
