"""Input validation package."""

from paisapal.validation.validator import InputRejectedError, InputValidator

__all__ = ["InputRejectedError", "InputValidator"]
