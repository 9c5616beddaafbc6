"""
Decode configuration.

Options may be passed explicitly or read from the environment:

    DMM_ROW_SPLIT             run | fixed_width   (default: run)
    DMM_VALIDATE_REFERENCES   true | false        (default: true)
"""

import os
from dataclasses import dataclass
from enum import Enum


class RowSplitPolicy(Enum):
    """How the letters inside a grid entry are cut into keys."""
    RUN = "run"                  # One maximal alphabetic run is one key
    FIXED_WIDTH = "fixed_width"  # Each run is cut into KEY_WIDTH-letter keys


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    raw = raw.strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{name} must be one of {sorted(_TRUE | _FALSE)}, got {raw!r}")


@dataclass(frozen=True)
class DecodeOptions:
    """
    Options for the decode pipeline.

    Properties:
        row_split:
            Row tokenization policy for grid entries. RUN matches files that
            put one key per line; FIXED_WIDTH handles lines that pack several
            keys together.

        validate_references:
            If True, every grid key must have a dictionary entry once the
            model is built, otherwise UnknownKeyError is raised at decode time.
    """

    row_split: RowSplitPolicy = RowSplitPolicy.RUN
    validate_references: bool = True

    @classmethod
    def from_env(cls) -> "DecodeOptions":
        """Build options from DMM_* environment variables."""
        row_split = os.getenv("DMM_ROW_SPLIT", RowSplitPolicy.RUN.value).strip().lower()
        try:
            policy = RowSplitPolicy(row_split)
        except ValueError:
            raise ValueError(
                f"DMM_ROW_SPLIT must be one of {[p.value for p in RowSplitPolicy]}, got {row_split!r}"
            ) from None
        return cls(
            row_split=policy,
            validate_references=_env_flag("DMM_VALIDATE_REFERENCES", True),
        )
