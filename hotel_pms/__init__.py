"""Hotel property-management core: reservations, room state and analytics."""

__version__ = "0.1.0"
