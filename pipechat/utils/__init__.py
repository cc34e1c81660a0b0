from .ansi import (
    Ansi,
    ERROR_LABEL,
    WARNING_LABEL,
    console,
    model_prompt,
)
from .spinner import Spinner

__all__ = [
    "Ansi",
    "ERROR_LABEL",
    "WARNING_LABEL",
    "console",
    "model_prompt",
    "Spinner",
]
