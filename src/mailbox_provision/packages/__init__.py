"""Package installation collaborators."""
