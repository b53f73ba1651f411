from sqlalchemy import Column, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import relationship
from app.database import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True)
    uuid = Column(Text, nullable=False, unique=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    rate = Column(Numeric(10, 2))
    expeditate_rate = Column(Numeric(10, 2))
    min_words = Column(Integer, nullable=False, default=0)
    revision_number = Column(Integer, nullable=False, default=0)
    delivery_guarantee = Column(Integer)
    delivery_expeditate = Column(Integer)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(Text, nullable=False, default="inactive")
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    user = relationship("User", back_populates="jobs")
    category = relationship("Category", back_populates="jobs")
    banners = relationship("Banner", back_populates="job", passive_deletes=True)
