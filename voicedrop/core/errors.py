"""Error taxonomy shared by the engine, codec and store."""


class VoiceDropError(Exception):
    """Base class for all VoiceDrop errors."""


class DeviceUnavailable(VoiceDropError):
    """No compatible input or output line could be opened."""


class DeviceIOError(VoiceDropError):
    """A read or write failed while a line was open."""


class AlreadyCapturing(VoiceDropError):
    """A capture session is already running."""


class CodecFailure(VoiceDropError):
    """A payload could not be decoded or inflated."""


class ConstraintViolation(VoiceDropError):
    """A foreign-key or uniqueness rule rejected a write."""


class StoreConnectionError(VoiceDropError):
    """The mailbox database is unreachable or already closed."""


class NoCounterpartSelected(VoiceDropError):
    """A recipient or sender must be chosen before this operation."""
