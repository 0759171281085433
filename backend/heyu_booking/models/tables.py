from sqlalchemy import Column, Integer, Text, text

from sqlalchemy.orm import declarative_base

Base = declarative_base()
metadata = Base.metadata


class Services(Base):
    __tablename__ = 'services'

    id = Column(Integer, primary_key=True)
    name_cn = Column(Text, nullable=False, server_default=text("''"))
    name_en = Column(Text, nullable=False, server_default=text("''"))
    category = Column(Text)
    duration = Column(Text)
    duration_en = Column(Text)
    duration_hours = Column(Integer, nullable=False, server_default=text('3'))
    price = Column(Text)
    description = Column(Text)
    description_cn = Column(Text)
    is_add_on = Column(Integer, nullable=False, server_default=text('0'))
    is_active = Column(Integer, nullable=False, server_default=text('1'))


class Bookings(Base):
    __tablename__ = 'bookings'

    id = Column(Integer, primary_key=True)
    booking_id = Column(Text, nullable=False, unique=True, index=True)
    # JSON snapshot of the service at booking time
    service = Column(Text, nullable=False, server_default=text("'{}'"))
    duration_hours = Column(Integer, nullable=False, server_default=text('3'))
    selected_date = Column(Text, nullable=False, index=True)
    selected_time = Column(Text)
    name = Column(Text, nullable=False)
    wechat_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    wechat = Column(Text, nullable=False, server_default=text("''"))
    status = Column(Text, nullable=False, server_default=text("'confirmed'"))
    created_at = Column(Text, nullable=False)


class BlockedDates(Base):
    __tablename__ = 'blocked_dates'

    date = Column(Text, primary_key=True)
    # JSON list of "HH:MM"; '[]' = whole day blocked
    times = Column(Text, nullable=False, server_default=text("'[]'"))
