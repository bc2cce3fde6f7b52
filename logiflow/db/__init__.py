"""Database layer for LogiFlow."""
