"""Parameter binding — request data to handler keyword arguments."""

from finch.binding.binder import BindingFailure, BindResult, FailureReason, ParameterBinder
from finch.binding.convert import coerce, empty_value, normalize_hint, type_name
from finch.binding.extraction import extract_dataclass, is_extractable_dataclass

__all__ = [
    "BindResult",
    "BindingFailure",
    "FailureReason",
    "ParameterBinder",
    "coerce",
    "empty_value",
    "extract_dataclass",
    "is_extractable_dataclass",
    "normalize_hint",
    "type_name",
]
