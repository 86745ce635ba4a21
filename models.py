from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class MediaItem(Base):
    __tablename__ = 'media_item'

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Indexed for the gallery's search and type filters
    original_url = Column(Text, nullable=False, index=True)
    media_url = Column(Text, nullable=False)
    media_type = Column('type', String(16), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    def __repr__(self):
        return (
            f"<MediaItem(id={self.id}, type='{self.media_type}', "
            f"original_url='{self.original_url}', media_url='{self.media_url[:40]}')>"
        )
