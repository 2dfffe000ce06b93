import enum


class SlotCategory(str, enum.Enum):
    """Photo categories a slot belongs to."""
    HAIR = "hair"
    SKIN = "skin"


class ImageSlot(str, enum.Enum):
    """Fixed set of photo slots every participant must fill.

    The value is the multipart field name on the wire and the image_type
    stored with each ParticipantImage row.
    """
    SKIN1 = "skin1"
    SKIN2 = "skin2"
    SKIN3 = "skin3"
    HAIR1 = "hair1"
    HAIR2 = "hair2"

    @property
    def label(self):
        return SLOT_DETAILS[self][0]

    @property
    def view(self):
        return SLOT_DETAILS[self][1]

    @property
    def category(self):
        return SLOT_DETAILS[self][2]

    @classmethod
    def keys(cls):
        return [slot.value for slot in cls]


SLOT_DETAILS = {
    ImageSlot.SKIN1: ("Skin Photo 1", "Front View", SlotCategory.SKIN),
    ImageSlot.SKIN2: ("Skin Photo 2", "Left View", SlotCategory.SKIN),
    ImageSlot.SKIN3: ("Skin Photo 3", "Right View", SlotCategory.SKIN),
    ImageSlot.HAIR1: ("Hair/Scalp Photo 1", "Top View", SlotCategory.HAIR),
    ImageSlot.HAIR2: ("Hair/Scalp Photo 2", "Back View", SlotCategory.HAIR),
}


class YesNo(str, enum.Enum):
    """Answers for the treatment and scalp-condition flags."""
    NO = "no"
    YES = "yes"


class CompletionStatus(str, enum.Enum):
    """Progress of one section of the intake form."""
    COMPLETE = "complete"
    PARTIAL = "partial"
    PENDING = "pending"


class DeploymentMode(str, enum.Enum):
    """Deployment modes; production stores images in object storage."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"
