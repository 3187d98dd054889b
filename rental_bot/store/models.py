"""Relational schema for clients and bookings."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class ClientRow(Base):
    __tablename__ = "clients"
    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100))
    phone_number = Column(String(32), index=True)
    email = Column(String(255), nullable=False, unique=True)
    address = Column(String(500))
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.now)
    bookings = relationship("BookingRow", back_populates="client")


class BookingRow(Base):
    __tablename__ = "bookings"
    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    service_name = Column(String(255), nullable=False)
    booking_date = Column(DateTime, nullable=False, index=True)
    address = Column(String(500))
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
    client = relationship("ClientRow", back_populates="bookings")
