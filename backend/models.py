from flask_sqlalchemy import SQLAlchemy
import logging
from shared.models import Base, Participant, ParticipantImage

logger = logging.getLogger(__name__)
db = SQLAlchemy(model_class=Base)

__all__ = ['db', 'Participant', 'ParticipantImage']
