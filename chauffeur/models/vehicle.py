from sqlalchemy import Column, String, Integer, Boolean, Text
from chauffeur.models.base import BaseModel


class Vehicle(BaseModel):
    __tablename__ = "vehicles"
    category_name = Column(String(120), nullable=False)
    category_details = Column(Text, nullable=True)
    vehicle_type = Column(String(60), nullable=True)
    number_of_passengers = Column(Integer, nullable=False, default=4)
    number_of_big_luggage = Column(Integer, nullable=False, default=0)
    number_of_small_luggage = Column(Integer, nullable=False, default=0)
    list_priority = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False)
