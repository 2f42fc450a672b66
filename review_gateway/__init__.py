"""AI review gateway: LLM-backed SAME/DIFFERENT decisions for entity pairs."""

__version__ = "0.1.0"
