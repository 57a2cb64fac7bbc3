# Ontology Models
from campus_hub.models.ontology import (
    User, Facility, AvailabilityWindow, Booking, Ticket, Comment, Notification
)

__all__ = [
    'User', 'Facility', 'AvailabilityWindow', 'Booking',
    'Ticket', 'Comment', 'Notification'
]
