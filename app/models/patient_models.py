from datetime import datetime
from app.extensions import db

GENDERS = ('Male', 'Female', 'Other')
STATUSES = ('Critical', 'Normal')

# Keys of one embedded clinical entry, in wire order
VITAL_SIGN_FIELDS = (
    'blood_pressure_high',
    'blood_pressure_low',
    'respiration_rate',
    'blood_oxygen_level',
    'heart_beat_rate',
)
CLINICAL_ENTRY_FIELDS = ('date',) + VITAL_SIGN_FIELDS


class Patient(db.Model):
    """Patient demographics with the clinical history embedded as an ordered JSON array."""
    __tablename__ = 'patients'

    id = db.Column(db.Integer, primary_key=True)

    # The caregiver/doctor/nurse account managing this patient
    owner_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(50), nullable=False)
    birth_date = db.Column(db.Date, nullable=False)
    gender = db.Column(db.String(10), nullable=False)
    address = db.Column(db.String(1024), nullable=False)
    status = db.Column(db.String(10), nullable=False, default='Normal')
    image = db.Column(db.String(1024))

    # Index 0 is the oldest entry; entries are addressed only by position
    clinical_entries = db.Column(db.JSON, nullable=False, default=list)

    # Optimistic concurrency counter, bumped on every UPDATE
    version_id = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    owner = db.relationship('User', back_populates='patients')

    __mapper_args__ = {'version_id_col': version_id}

    def to_dict(self):
        """Serializes the patient and its clinical entries for API responses."""
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'birth_date': self.birth_date.isoformat() if self.birth_date else None,
            'gender': self.gender,
            'address': self.address,
            'status': self.status,
            'image': self.image,
            'owner_user_id': self.owner_user_id,
            'clinical_entries': [dict(entry) for entry in (self.clinical_entries or [])],
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Patient {self.id} entries={len(self.clinical_entries or [])}>'
