from typing import Any, Dict, Optional


class ScoringError(Exception):
    # Base for everything the engine raises on purpose

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class InvalidField(ScoringError):
    # A field on an activity record is missing or malformed

    def __init__(self, field: str, value: Any = None, tx_hash: Optional[str] = None) -> None:
        self.field = field
        details: Dict[str, Any] = {"field": field}
        if value is not None:
            details["value"] = repr(value)
        if tx_hash:
            details["tx_hash"] = tx_hash
        super().__init__(f"invalid field: {field}", details)


class UndefinedRatio(ScoringError):
    # balance_change requested while total_cost is zero

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(
            f"balance change undefined for {address}: total cost is zero",
            {"address": address},
        )
