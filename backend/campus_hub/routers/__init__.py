# API Routers
from campus_hub.routers import auth, facilities, bookings, tickets, comments, notifications

__all__ = ['auth', 'facilities', 'bookings', 'tickets', 'comments', 'notifications']
