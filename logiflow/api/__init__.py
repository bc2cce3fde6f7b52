"""HTTP surface of the LogiFlow approval engine."""
