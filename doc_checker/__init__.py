"""Smart Doc Checker: flag contradictions across a handful of uploaded documents."""

__version__ = "0.1.0"
