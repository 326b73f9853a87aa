from typing import Any, List, Optional


class ConditionalCheckFailedException(Exception):
    """A conditional put was rejected because the current item failed its condition."""

    def __init__(self, message: str, key: Optional[Any] = None, attributes: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.key = key
        self.attributes = list(attributes or [])


class InvalidItemKeyError(ValueError):
    """The item handed to a put does not carry a usable composite key."""

    def __init__(self, message: str, attribute: Optional[str] = None):
        super().__init__(message)
        self.attribute = attribute


class ConfigError(ValueError):
    pass
