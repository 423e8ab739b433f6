from sqlalchemy import Column, Integer, String, DateTime, Boolean, Float, ForeignKey, Text, JSON, Uuid, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from .database import Base
import uuid


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=True)

    # photographer | enthusiast | moderator
    role = Column(String(20), default="enthusiast", nullable=False)
    is_active = Column(Boolean, default=True)

    # Profile fields
    display_name = Column(String(100), nullable=False)
    avatar_url = Column(String, nullable=True)
    bio = Column(String(500), nullable=True)

    # Photographer-only profile fields
    company_name = Column(String(100), nullable=True)
    website_url = Column(String, nullable=True)
    social_links = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    photos = relationship("Photo", back_populates="user", cascade="all, delete-orphan")
    favorites = relationship("Favorite", back_populates="user", cascade="all, delete-orphan")


class Photo(Base):
    __tablename__ = "photos"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(30), nullable=False, index=True)
    season = Column(String(20), nullable=True)
    time_of_day = Column(String(30), nullable=True)

    file_url = Column(String, nullable=False)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(50), nullable=True)

    # Exact GPS coordinates (private to owner/moderator)
    exact_latitude = Column(Float, nullable=False)
    exact_longitude = Column(Float, nullable=False)
    # Public coordinates, blurred once at upload when requested
    public_latitude = Column(Float, nullable=False, index=True)
    public_longitude = Column(Float, nullable=False, index=True)
    blur_location = Column(Boolean, default=False, nullable=False)
    blur_radius = Column(Integer, nullable=True)

    # pending | approved | rejected
    status = Column(String(20), default="pending", nullable=False, index=True)
    exif = Column(JSON, nullable=True)
    gear = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    user = relationship("User", back_populates="photos")
    photo_tags = relationship("PhotoTag", back_populates="photo", cascade="all, delete-orphan")
    favorites = relationship("Favorite", back_populates="photo", cascade="all, delete-orphan")


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(30), unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class PhotoTag(Base):
    __tablename__ = "photo_tags"

    photo_id = Column(Uuid, ForeignKey("photos.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)

    # Relationships
    photo = relationship("Photo", back_populates="photo_tags")
    tag = relationship("Tag")


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "photo_id", name="uq_favorites_user_photo"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    photo_id = Column(Uuid, ForeignKey("photos.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="favorites")
    photo = relationship("Photo", back_populates="favorites")
