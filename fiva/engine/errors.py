"""
Error codes and EngineError exception for rule violations.
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    ERR_INVALID_POSITION = "ERR_INVALID_POSITION"
    ERR_TARGET_OCCUPIED = "ERR_TARGET_OCCUPIED"
    ERR_NOT_MATCHING_CARD = "ERR_NOT_MATCHING_CARD"
    ERR_NO_CHIP_TO_REMOVE = "ERR_NO_CHIP_TO_REMOVE"
    ERR_CANNOT_REMOVE_OWN_CHIP = "ERR_CANNOT_REMOVE_OWN_CHIP"
    ERR_CHIP_PROTECTED = "ERR_CHIP_PROTECTED"
    ERR_CARD_NOT_IN_HAND = "ERR_CARD_NOT_IN_HAND"
    ERR_CARD_NOT_DEAD = "ERR_CARD_NOT_DEAD"
    ERR_NO_CARD_SELECTED = "ERR_NO_CARD_SELECTED"
    ERR_INVALID_HAND_INDEX = "ERR_INVALID_HAND_INDEX"
    ERR_GAME_NOT_STARTED = "ERR_GAME_NOT_STARTED"
    ERR_GAME_OVER = "ERR_GAME_OVER"


class EngineError(Exception):
    """Rejected command or rule violation.

    Attributes:
        code: ErrorCode enum
        message: human readable reason (for logs and the presentation layer)
        details: optional structured data (e.g. {'position': 42, 'card': 'AS'})
    """

    def __init__(
        self,
        code: ErrorCode,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message or code.value
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "message": self.message, "details": self.details}
