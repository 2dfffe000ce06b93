import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()

# All timestamps are stored in UTC. SQLite drops tzinfo, so values read back
# from SQLite are naive and should be treated as UTC.
APP_TIMEZONE = timezone.utc


def now():
    """Return current datetime in application timezone (UTC, timezone-aware)."""
    return datetime.now(APP_TIMEZONE)


def generate_id():
    """Generate a random UUID4 string used as primary key."""
    return str(uuid.uuid4())


class Participant(Base):
    """One completed research submission.

    Rows are written once by the intake endpoint and never updated; only
    linked images are added afterwards.
    """
    __tablename__ = 'participants'
    id = Column(String(36), primary_key=True, nullable=False, default=generate_id)
    name = Column(Text, nullable=False)
    age = Column(Integer, nullable=False)
    gender = Column(Text, nullable=False)
    city = Column(Text, nullable=False)
    country = Column(Text, nullable=False)
    hair_type = Column(Text, nullable=False)
    hair_length = Column(Text, nullable=False)
    hair_density = Column(Text, nullable=False)
    hair_condition = Column(Text, nullable=False)
    scalp_type = Column(Text, nullable=False)
    recent_treatments = Column(Text, nullable=False)
    treatment_details = Column(Text)
    scalp_conditions = Column(Text, nullable=False)
    condition_details = Column(Text)
    submitted_at = Column(DateTime, default=now, nullable=False)
    images = relationship('ParticipantImage', backref='participant', lazy='select',
                          order_by='ParticipantImage.uploaded_at')

    __table_args__ = (
        CheckConstraint('age >= 0', name='chk_participant_age_non_negative'),
    )

Index('idx_participant_submitted_at', Participant.submitted_at)


class ParticipantImage(Base):
    __tablename__ = 'participant_images'
    id = Column(String(36), primary_key=True, nullable=False, default=generate_id)
    participant_id = Column(String(36), ForeignKey('participants.id'), nullable=False, index=True)
    image_type = Column(String(20), nullable=False)  # ImageSlot value
    filename = Column(String(500), nullable=False)  # storage key, local or object store
    original_name = Column(String(500), nullable=False)
    mime_type = Column(String(100), nullable=False)
    file_size = Column(Integer, nullable=False)
    hash_value = Column(String(64), server_default="")
    uploaded_at = Column(DateTime, default=now, nullable=False)

    __table_args__ = (
        UniqueConstraint('participant_id', 'image_type', name='uq_participant_image_type'),
        CheckConstraint('file_size >= 0', name='chk_participant_image_size'),
        CheckConstraint("length(hash_value) = 64 OR hash_value = ''", name='chk_participant_image_hash_length'),
    )

Index('idx_participant_image_uploaded_at', ParticipantImage.uploaded_at)
