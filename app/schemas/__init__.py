# app/schemas/__init__.py
from .task_payloads import (
    BookingEmailPayload,
    NotificationRecordPayload
)

from .booking import (
    BookingCreateRequest,
    BookingUserSummary,
    BookingRestaurantSummary,
    BookingResponse
)

from .restaurant import (
    ManagerSummary,
    AddressSchema,
    HoursSchema,
    RestaurantSummary,
    TableDefinitionOut,
    DateAvailabilityOut,
    RestaurantDetail,
    SearchResponse,
    RestaurantCreateRequest,
    RestaurantUpdateRequest,
    TableDefinitionIn,
    DateAvailabilityRequest,
    ConsistencyFaultResponse
)
