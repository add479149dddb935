"""Input validation package."""

from messbill.validation.validator import InputValidator

__all__ = ["InputValidator"]
