from .difference_in_means import estimate, confidence_interval, covers

__all__ = ["estimate", "confidence_interval", "covers"]
