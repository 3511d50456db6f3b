"""Exception types shared across layers."""


class BlueprintError(Exception):
    """Base class for errors raised by blueprint components"""
    pass


class AssistantError(BlueprintError):
    """Raised when the assistant endpoint cannot produce a reply"""
    pass


class TranscriptionError(BlueprintError):
    """Raised when audio cannot be turned into text"""
    pass


class StoreError(BlueprintError):
    """Raised by entity store adapters when a mutation cannot be applied"""
    pass


class NotFoundError(StoreError):
    """Raised when a referenced entity does not exist"""
    pass
