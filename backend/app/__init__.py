"""Day Route Optimizer backend."""
