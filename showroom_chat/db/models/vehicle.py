from sqlalchemy import Boolean, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from showroom_chat.db.session import Base


class Shop(Base):
    __tablename__ = "shops"

    id = Column(String(36), primary_key=True)
    name = Column(String(100), nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)

    vehicles = relationship("Vehicle", back_populates="shop")


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True)
    shop_id = Column(String(36), ForeignKey("shops.id"), index=True, nullable=False)
    brand = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)

    shop = relationship("Shop", back_populates="vehicles")
    photos = relationship("VehiclePhoto", back_populates="vehicle", order_by="VehiclePhoto.display_order")


class VehiclePhoto(Base):
    __tablename__ = "vehicle_photos"

    id = Column(Integer, primary_key=True, index=True)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), index=True, nullable=False)
    url = Column(String(1000), nullable=False)
    display_order = Column(Integer, default=0, nullable=False)

    vehicle = relationship("Vehicle", back_populates="photos")
