from agro_monitor.database import Base
from .company import Company
from .profile import Profile
from .zone import Zone
from .sensor import Sensor
from .notification import Notification

__all__ = [
    "Base",
    "Company",
    "Profile",
    "Zone",
    "Sensor",
    "Notification"
]
