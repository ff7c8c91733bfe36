# SwiftGate package
# Customer and employee auth, payment intake and the verify/submit pipeline

from swiftgate.config import Settings, get_settings
from swiftgate.errors import SwiftGateError

__all__ = ["Settings", "get_settings", "SwiftGateError"]
