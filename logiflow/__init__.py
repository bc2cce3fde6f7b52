"""LogiFlow: multi-level approval workflow engine for logistics documents."""

__version__ = "0.1.0"
