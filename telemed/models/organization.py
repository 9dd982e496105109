from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.orm import relationship
from telemed.config.database import Base


class Hospital(Base):
    __tablename__ = "hospitals"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    location = Column(String(200))
    phone = Column(String(20))
    is_verified = Column(Boolean, default=False)

    doctors = relationship("Doctor", back_populates="hospital")


class Pharmacy(Base):
    __tablename__ = "pharmacies"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    location = Column(String(200))
    phone = Column(String(20))
    is_verified = Column(Boolean, default=False)


class Laboratory(Base):
    __tablename__ = "laboratories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    location = Column(String(200))
    phone = Column(String(20))
    is_verified = Column(Boolean, default=False)
