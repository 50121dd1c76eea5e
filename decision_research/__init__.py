"""Decision research: multi-pass web research with an evidence gate."""

__version__ = "0.1.0"
