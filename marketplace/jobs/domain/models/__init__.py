from .application import JobApplication


__all__ = [
    "JobApplication",
]
