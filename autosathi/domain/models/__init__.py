"""Domain models for AutoSathi"""
from .user import User
from .vehicle import Vehicle
from .fuel_entry import FuelEntry
from .insurance import Insurance
from .puc import PucCertificate
from .service_record import ServiceRecord
from .notification import Notification

__all__ = [
    "User",
    "Vehicle",
    "FuelEntry",
    "Insurance",
    "PucCertificate",
    "ServiceRecord",
    "Notification",
]
