from .dispatch import DispatchReport, dispatch

__all__ = ["DispatchReport", "dispatch"]
