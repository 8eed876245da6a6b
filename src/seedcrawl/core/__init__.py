from .random import RandomStream

__all__ = ["RandomStream"]
