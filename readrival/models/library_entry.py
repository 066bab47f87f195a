import enum

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from readrival.core.database import Base, generate_uuid


class ReadingStatus(str, enum.Enum):
    WANT_TO_READ = "want_to_read"
    CURRENTLY_READING = "currently_reading"
    COMPLETED = "completed"


class LibraryEntry(Base):
    __tablename__ = "library_entries"

    id = Column(String(64), primary_key=True, index=True, default=generate_uuid)

    user_id = Column(
        String(64),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Weak reference: removing an entry never touches the book
    book_id = Column(String(64), ForeignKey("books.id"), nullable=False, index=True)

    status = Column(String, nullable=False, default=ReadingStatus.WANT_TO_READ.value)

    # Progress tracking
    current_page = Column(Integer, nullable=False, default=0)
    total_pages = Column(Integer, nullable=True)
    progress_percentage = Column(Integer, nullable=False, default=0)
    reading_time_minutes = Column(Integer, nullable=False, default=0)

    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)

    personal_rating = Column(Integer, nullable=True)
    personal_review = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    user = relationship("Profile", back_populates="library_entries")
    book = relationship("Book")

    # One entry per user per book
    __table_args__ = (
        UniqueConstraint("user_id", "book_id", name="unique_user_book_entry"),
    )

    def __repr__(self):
        return (
            f"<LibraryEntry(id='{self.id}', user_id='{self.user_id}', "
            f"book_id='{self.book_id}', progress={self.progress_percentage}%)>"
        )
