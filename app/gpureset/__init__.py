"""gpureset - reset third-party AMD GPU driver stacks to distribution defaults."""

__version__ = "0.3.0"
