from sqlalchemy import Column, ForeignKey, Text
from college_events.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Text, primary_key=True)
    title = Column(Text, nullable=False)
    type = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    date = Column(Text, nullable=False)
    location = Column(Text)
    image_url = Column(Text)
    created_by = Column(Text, ForeignKey("users.id"), nullable=False)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
