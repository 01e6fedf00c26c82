"""Client core for the journal app: mention-aware editor and resilient API access."""

__version__ = "0.1.0"
