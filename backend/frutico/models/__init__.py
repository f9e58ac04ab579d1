from .base import BaseModel
from .order import Order, OrderStatus, VisitLocation
