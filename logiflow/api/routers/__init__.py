from logiflow.api.routers import approvals, health

__all__ = ["approvals", "health"]
