from .user import User
from .store import Store
from .camera import Camera
from .alert import Alert
from .siren_log import SirenLog
from .enums import UserRole, CameraStatus, DetectionType, AlertStatus, SirenAction, SYSTEM_TRIGGER

__all__ = [
    'User', 'Store', 'Camera', 'Alert', 'SirenLog',
    'UserRole', 'CameraStatus', 'DetectionType', 'AlertStatus', 'SirenAction', 'SYSTEM_TRIGGER',
]
