"""Core configuration, logging and approval engine."""
