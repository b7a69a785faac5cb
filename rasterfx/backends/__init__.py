# rasterfx processing backends
"""
Backends the selector tries in order: native (Pillow/OpenCV), software
(numpy effect pipeline) and passthrough (original bytes).
"""

from .base import Backend, BackendAttempt, ProcessingOutcome
from .native import NativeBackend
from .passthrough import PassthroughBackend
from .software import SoftwareBackend

__all__ = [
    'Backend',
    'BackendAttempt',
    'ProcessingOutcome',
    'NativeBackend',
    'SoftwareBackend',
    'PassthroughBackend',
]
