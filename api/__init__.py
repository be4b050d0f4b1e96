"""HTTP layer over the fleet status engine."""
