# Business Services
from campus_hub.services.facility_service import FacilityService
from campus_hub.services.booking_service import BookingService
from campus_hub.services.ticket_service import TicketService
from campus_hub.services.comment_service import CommentService
from campus_hub.services.notification_service import NotificationService
from campus_hub.services.user_service import UserService
from campus_hub.services.file_storage import FileStorage

__all__ = [
    'FacilityService', 'BookingService', 'TicketService',
    'CommentService', 'NotificationService', 'UserService', 'FileStorage'
]
