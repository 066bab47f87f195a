from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from readrival.core.database import Base, generate_uuid
from readrival.utils.date_utils import utcnow


class ReadingActivity(Base):
    """Append-only log of progress updates."""

    __tablename__ = "reading_activities"
    __table_args__ = (
        Index("idx_reading_activities_user_id", "user_id"),
        Index("idx_reading_activities_created_at", "created_at"),
    )

    id = Column(String(64), primary_key=True, default=generate_uuid)
    user_id = Column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    book_id = Column(String(64), ForeignKey("books.id"), nullable=False)
    library_entry_id = Column(
        String(64), ForeignKey("library_entries.id", ondelete="SET NULL"), nullable=True
    )

    pages_read = Column(Integer, nullable=False, default=0)
    minutes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    book = relationship("Book")

    def __repr__(self):
        return (
            f"<ReadingActivity(user_id='{self.user_id}', book_id='{self.book_id}', "
            f"pages={self.pages_read}, minutes={self.minutes})>"
        )
