# iptv_channels/models.py
import enum
import uuid
from datetime import datetime, timezone
from sqlalchemy.orm import declared_attr
from . import db


def utcnow():
    return datetime.now(timezone.utc)


def new_uuid():
    return str(uuid.uuid4())


class GroupTitle(db.Model):
    """Lookup table normalizing the playlist `group-title` across channels, series and media."""
    __tablename__ = 'group_titles'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String, nullable=False, unique=True)  # Original M3U value, e.g. "US| ENTERTAINMENT"
    alias = db.Column(db.String)  # Friendly display name, e.g. "Entertainment"

    @property
    def display_name(self):
        return self.alias or self.name


class StreamMixin:
    """Columns shared by every entity kind; the console reads them uniformly."""
    id = db.Column(db.String(36), primary_key=True, default=new_uuid)

    # From the M3U file
    tvg_id = db.Column(db.String)
    tvg_name = db.Column(db.String, nullable=False)
    tvg_logo = db.Column(db.String)

    # CMS fields
    name = db.Column(db.String)
    favourite = db.Column(db.Boolean, nullable=False, default=False, index=True)
    active = db.Column(db.Boolean, nullable=False, default=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    @declared_attr
    def group_title_id(cls):
        return db.Column(db.Integer, db.ForeignKey('group_titles.id'), index=True)

    def to_dict(self):
        data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, datetime):
                value = value.isoformat()
            data[column.key] = value
        return data


class Channel(StreamMixin, db.Model):
    __tablename__ = 'channels'
    stream_url = db.Column(db.String)

    # Kodi PVR channel id used for playback
    content_id = db.Column(db.Integer)

    country_code = db.Column(db.String(2), index=True)
    script_alias = db.Column(db.String)  # Key of the Home Assistant script, e.g. "channel_abc"


class Series(StreamMixin, db.Model):
    __tablename__ = 'series'
    # Denormalized, recomputed on every episode mutation
    episode_count = db.Column(db.Integer, nullable=False, default=0)


class Media(StreamMixin, db.Model):
    """A movie (series_id is NULL) or a single series episode."""
    __tablename__ = 'media'
    stream_url = db.Column(db.String)
    series_id = db.Column(db.String(36), db.ForeignKey('series.id'), index=True)

    # Derived from the playlist entry
    media_type = db.Column(db.String)  # "movie" | "series"
    year = db.Column(db.Integer)
    season = db.Column(db.Integer)
    episode = db.Column(db.Integer)


class EntityKind(str, enum.Enum):
    CHANNELS = 'channels'
    MEDIA = 'media'
    SERIES = 'series'

    @property
    def model(self):
        return _MODELS[self]


_MODELS = {
    EntityKind.CHANNELS: Channel,
    EntityKind.MEDIA: Media,
    EntityKind.SERIES: Series,
}
