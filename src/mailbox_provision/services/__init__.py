"""Service, schedule and certificate registration."""
