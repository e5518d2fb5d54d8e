from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"

    def __str__(self):
        return self.value


class BookingType(str, Enum):
    P2P = "p2p"
    HOURLY = "hourly"
    AIRPORT = "airport"

    def __str__(self):
        return self.value


class TierKind(str, Enum):
    FIXED = "fixed"
    PER_MILE = "per_mile"

    def __str__(self):
        return self.value


class PricingStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

    def __str__(self):
        return self.value


class LocationType(str, Enum):
    AIRPORT = "airport"
    STADIUM = "stadium"
    CIRCUIT = "circuit"
    VENUE = "venue"
    OTHER = "other"

    def __str__(self):
        return self.value


class AuditAction(str, Enum):
    CREATE_VEHICLE = "create_vehicle"
    UPDATE_VEHICLE = "update_vehicle"
    DELETE_VEHICLE = "delete_vehicle"
    CREATE_PRICING = "create_pricing"
    UPDATE_PRICING = "update_pricing"
    DELETE_PRICING = "delete_pricing"
    CREATE_AIRPORT_PRICING = "create_airport_pricing"
    UPDATE_AIRPORT_PRICING = "update_airport_pricing"
    DELETE_AIRPORT_PRICING = "delete_airport_pricing"
    CREATE_LOCATION = "create_location"
    UPDATE_LOCATION = "update_location"
    DELETE_LOCATION = "delete_location"
    LOGIN = "login"

    def __str__(self):
        return self.value
