import enum


class UserRole(str, enum.Enum):
    CLIENT = "CLIENT"
    ADMIN = "ADMIN"


class CameraStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ERROR = "ERROR"


class DetectionType(str, enum.Enum):
    HELMET = "HELMET"
    GUN = "GUN"
    MANUAL = "MANUAL"


class AlertStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    RESOLVED = "RESOLVED"


class SirenAction(str, enum.Enum):
    ON = "ON"
    OFF = "OFF"


# triggered_by value for siren activations raised by the detection webhook
SYSTEM_TRIGGER = "SYSTEM"
