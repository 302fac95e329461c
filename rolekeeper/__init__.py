"""rolekeeper: role-based access control permission resolution."""

__version__ = "0.1.0"
