# iptv_channels/seed.py
"""Bulk import of an M3U playlist into an empty (or reset) database."""
import json
import logging
from pathlib import Path
from . import db
from .models import Channel, Series, Media
from .group_titles import resolve_group_title_id
from .m3u_parser import parse_m3u_content

logger = logging.getLogger(__name__)

BATCH_SIZE = 100


def load_content_ids(path):
    """
    Reads a saved Kodi `PVR.GetChannels` response (contentid.json) into a
    lowercased channel name -> channelid map.
    """
    payload = json.loads(Path(path).read_text(encoding='utf-8'))
    content_ids = {}
    for channel in (payload.get('result') or {}).get('channels', []):
        label = channel.get('label') or channel.get('channel')
        if label and channel.get('channelid') is not None:
            content_ids[label.lower()] = channel['channelid']
    logger.info(f"Loaded {len(content_ids)} content ID mappings from {path}.")
    return content_ids


def clear_streams():
    """Deletes every channel, series and media row. Group titles are kept."""
    media_deleted = Media.query.delete()
    series_deleted = Series.query.delete()
    channels_deleted = Channel.query.delete()
    db.session.commit()
    logger.info(f"Cleared {channels_deleted} channels, {series_deleted} series and {media_deleted} media rows.")


class _GroupTitleCache:
    def __init__(self):
        self._ids = {}

    def __call__(self, name):
        if not name:
            return None
        if name not in self._ids:
            self._ids[name] = resolve_group_title_id(name)
        return self._ids[name]


def _insert_in_batches(rows, label):
    for i in range(0, len(rows), BATCH_SIZE):
        db.session.add_all(rows[i:i + BATCH_SIZE])
        db.session.commit()
    logger.info(f"Inserted {len(rows)} {label}.")


def seed_database(m3u_content, content_ids=None, mode='all', replace=False):
    """
    Parses a playlist and inserts its channels, movies and series.

    Episodes are grouped into one Series per base name (the title without its
    "S01 E02" suffix). Returns a summary of what was inserted and skipped.
    """
    content_ids = content_ids or {}
    result = parse_m3u_content(m3u_content, mode)
    logger.info(
        f"Parsed {len(result.channels)} channels and {len(result.media)} media entries, "
        f"skipped {result.skipped}."
    )
    if result.stopped_at_line:
        logger.info(f"Channel parsing stopped at line {result.stopped_at_line} (first media entry).")

    if replace:
        clear_streams()

    group_title_id = _GroupTitleCache()

    channels = [
        Channel(
            tvg_id=parsed.tvg_id,
            tvg_name=parsed.tvg_name,
            tvg_logo=parsed.tvg_logo,
            group_title_id=group_title_id(parsed.group_title),
            stream_url=parsed.stream_url,
            content_id=content_ids.get(parsed.tvg_name.lower()),
            name=parsed.tvg_name,
            active=False,
            favourite=False,
        )
        for parsed in result.channels
    ]
    _insert_in_batches(channels, 'channels')

    movies = []
    episodes_by_series = {}
    for parsed in result.media:
        if parsed.series_base_name:
            episodes_by_series.setdefault(parsed.series_base_name, []).append(parsed)
        else:
            movies.append(Media(
                tvg_id=parsed.tvg_id,
                tvg_name=parsed.tvg_name,
                tvg_logo=parsed.tvg_logo,
                group_title_id=group_title_id(parsed.group_title),
                stream_url=parsed.stream_url,
                media_type=parsed.media_type,
                year=parsed.year,
                name=parsed.tvg_name,
            ))
    _insert_in_batches(movies, 'movies')

    episode_total = 0
    for base_name, episodes in episodes_by_series.items():
        first = episodes[0]
        series = Series(
            tvg_id=first.tvg_id,
            tvg_name=base_name,
            tvg_logo=first.tvg_logo,
            group_title_id=group_title_id(first.group_title),
            name=base_name,
            episode_count=len(episodes),
        )
        db.session.add(series)
        db.session.flush()
        db.session.add_all([
            Media(
                tvg_id=parsed.tvg_id,
                tvg_name=parsed.tvg_name,
                tvg_logo=parsed.tvg_logo,
                group_title_id=group_title_id(parsed.group_title),
                stream_url=parsed.stream_url,
                series_id=series.id,
                media_type=parsed.media_type,
                year=parsed.year,
                season=parsed.season,
                episode=parsed.episode,
            )
            for parsed in episodes
        ])
        db.session.commit()
        episode_total += len(episodes)
    logger.info(f"Inserted {len(episodes_by_series)} series with {episode_total} episodes.")

    return {
        'channels': len(channels),
        'movies': len(movies),
        'series': len(episodes_by_series),
        'episodes': episode_total,
        'skipped': result.skipped,
        'stopped_at_line': result.stopped_at_line,
    }


def reset_database():
    """Drops and recreates every table."""
    db.drop_all()
    db.create_all()
    logger.info("Database reset complete.")
