# iptv_channels/services/series.py
import logging
from sqlalchemy import select, update, delete, func, asc
from .. import db
from ..models import EntityKind, Series, Media, GroupTitle, utcnow
from ..exporters import generate_m3u
from ..group_titles import effective_group_title_expr
from .streams import (
    commit, with_group_title, resolve_group_title_update, apply_alias_update,
    writable_fields, create_stream, list_streams,
)

logger = logging.getLogger(__name__)

EPISODE_FIELDS = ('season', 'episode', 'year', 'stream_url', 'name')


def episode_tvg_name(series_name, season, episode):
    """Builds e.g. "Show S02 E11"; the bare series name when season or episode is missing."""
    if season is not None and episode is not None:
        return f"{series_name} S{season:02d} E{episode:02d}"
    return series_name


def count_episodes(series_id):
    return db.session.execute(
        select(func.count()).select_from(Media).where(Media.series_id == series_id)
    ).scalar_one()


def set_series_active(series_id, active):
    """
    Sets `active` on a series and on every one of its episodes in one transaction.
    Returns {id, active} or None when the series does not exist.
    """
    series = db.session.get(Series, series_id)
    if series is None:
        return None

    cascade_active(series, active)
    commit()
    return {'id': series.id, 'active': series.active}


def cascade_active(series, active):
    """Sets `active` on the series and all of its episodes. The caller commits."""
    now = utcnow()
    series.active = active
    series.updated_at = now
    result = db.session.execute(
        update(Media)
        .where(Media.series_id == series.id)
        .values(active=active, updated_at=now)
        .execution_options(synchronize_session='fetch')
    )
    logger.info(f"Series '{series.tvg_name}' set active={active}, cascaded to {result.rowcount} episodes.")


def replace_episodes(series, episodes):
    """
    Makes the series' episodes match `episodes`: rows missing from the list are
    deleted, rows with a known id updated, the rest inserted. The denormalized
    episode_count is recomputed last. The caller commits.
    """
    existing_ids = set(db.session.execute(
        select(Media.id).where(Media.series_id == series.id)
    ).scalars())
    incoming_ids = {ep['id'] for ep in episodes if ep.get('id')}

    stale_ids = existing_ids - incoming_ids
    if stale_ids:
        db.session.execute(
            delete(Media).where(Media.id.in_(stale_ids)).execution_options(synchronize_session='fetch')
        )

    now = utcnow()
    for ep in episodes:
        values = {field: ep.get(field) for field in EPISODE_FIELDS}
        values['stream_url'] = values['stream_url'] or None
        values['name'] = values['name'] or None

        if ep.get('id') in existing_ids:
            episode = db.session.get(Media, ep['id'])
            for key, value in values.items():
                setattr(episode, key, value)
            episode.updated_at = now
        else:
            db.session.add(Media(
                tvg_name=episode_tvg_name(series.tvg_name, values['season'], values['episode']),
                tvg_logo=series.tvg_logo,
                group_title_id=series.group_title_id,
                series_id=series.id,
                media_type='series',
                active=bool(series.active),
                **values
            ))

    db.session.flush()
    series.episode_count = count_episodes(series.id)
    logger.info(
        f"Series '{series.tvg_name}': removed {len(stale_ids)} episodes, "
        f"now {series.episode_count}."
    )


def update_series(series_id, data):
    """
    Same group title handling as update_stream, plus an optional full
    replacement `episodes` list. Everything is committed together.
    """
    series = db.session.get(Series, series_id)
    if series is None:
        return None

    try:
        group_title_id = resolve_group_title_update(data, series.group_title_id)
        apply_alias_update(data, group_title_id)

        values = writable_fields(Series, data)
        # Episodes follow their series
        active = values.pop('active', None)
        for key, value in values.items():
            setattr(series, key, value)
        series.group_title_id = group_title_id
        series.updated_at = utcnow()

        if data.get('episodes') is not None:
            replace_episodes(series, data['episodes'])
        if active is not None:
            cascade_active(series, active)
    except Exception:
        db.session.rollback()
        raise

    commit()
    return with_group_title(series)


def create_series(data):
    return create_stream(EntityKind.SERIES, data)


def list_series(**kwargs):
    return list_streams(EntityKind.SERIES, **kwargs)


def get_series_with_episodes(series_id):
    series = db.session.get(Series, series_id)
    if series is None:
        return None

    episodes = db.session.execute(
        select(Media)
        .where(Media.series_id == series_id)
        .order_by(asc(Media.season), asc(Media.episode))
    ).scalars()

    data = with_group_title(series)
    data['episodes'] = [episode.to_dict() for episode in episodes]
    return data


def export_active_series_m3u():
    """Every episode of the active series, grouped under the series' group title."""
    stmt = (
        select(
            Media.tvg_id, Media.tvg_name, Media.tvg_logo, Media.stream_url, Media.name,
            effective_group_title_expr.label('group_title'),
        )
        .join(Series, Media.series_id == Series.id)
        .outerjoin(GroupTitle, Series.group_title_id == GroupTitle.id)
        .where(Series.active.is_(True))
        .order_by(asc(Series.name), asc(Media.season), asc(Media.episode))
    )
    episodes = [dict(row._mapping) for row in db.session.execute(stmt)]
    return {'m3u': generate_m3u(episodes), 'count': len([ep for ep in episodes if ep['stream_url']])}
