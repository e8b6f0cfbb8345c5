"""Block Rise: a sliding block puzzle with rising rows, and neuroevolution training for it."""

__version__ = "0.1.0"
