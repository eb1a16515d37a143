# iptv_channels/services/streams.py
"""
Create/update/list logic shared by channels, media and series.

Every write to a category goes through the group title resolver so no row
ever stores a raw group-title string.
"""
import logging
from sqlalchemy import select, func, asc, desc
from flask import current_app
from .. import db
from ..models import EntityKind, Channel, Media, GroupTitle, utcnow
from ..group_titles import (
    resolve_group_title_id, set_group_title_alias, get_group_title_fields,
    effective_group_title_expr,
)
from ..exporters import generate_m3u, generate_home_assistant_yaml

logger = logging.getLogger(__name__)

# Stored as NULL rather than an empty string
URL_FIELDS = ('tvg_logo', 'stream_url')
# series_id and episode_count only change through replace_episodes
PROTECTED_FIELDS = ('id', 'group_title_id', 'series_id', 'episode_count', 'created_at', 'updated_at')
SORT_COLUMNS = ('name', 'created_at')


def commit():
    """Commits the session, rolling back before re-raising on failure."""
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def with_group_title(entity):
    data = entity.to_dict()
    data.update(get_group_title_fields(entity.group_title_id))
    return data


def resolve_group_title_update(data, current_id=None):
    """
    Works out the group_title_id an update should store.

    An explicit id wins, then non-empty group title text (resolved, created if
    needed), then an empty string which clears the category. With neither,
    the current id is kept.
    """
    if data.get('group_title_id') is not None:
        return data['group_title_id']
    group_title = data.get('group_title')
    if group_title:
        return resolve_group_title_id(group_title)
    if group_title == '':
        return None
    return current_id


def apply_alias_update(data, group_title_id):
    # Nothing to attach the alias to without a category
    if 'group_title_alias' in data and group_title_id:
        set_group_title_alias(group_title_id, data['group_title_alias'])


def writable_fields(model, data):
    """Column values from `data` the caller may set directly, URLs normalized."""
    columns = {column.key for column in model.__table__.columns}
    values = {}
    for key, value in data.items():
        if key not in columns or key in PROTECTED_FIELDS:
            continue
        if key in URL_FIELDS:
            value = value or None
        values[key] = value
    return values


def _apply(entity, values):
    for key, value in values.items():
        setattr(entity, key, value)


def update_stream(kind, stream_id, data):
    """
    Applies a partial update to one channel/media/series row.

    Returns the row as a dict with `group_title` and `group_title_alias`
    attached, or None when no row has this id.
    """
    kind = EntityKind(kind)
    entity = db.session.get(kind.model, stream_id)
    if entity is None:
        logger.info(f"Update of {kind.value} '{stream_id}' skipped: not found.")
        return None

    group_title_id = resolve_group_title_update(data, entity.group_title_id)
    apply_alias_update(data, group_title_id)

    _apply(entity, writable_fields(kind.model, data))
    entity.group_title_id = group_title_id
    entity.updated_at = utcnow()
    commit()
    return with_group_title(entity)


def create_stream(kind, data):
    kind = EntityKind(kind)
    group_title_id = data.get('group_title_id') or resolve_group_title_id(data.get('group_title'))

    entity = kind.model(**writable_fields(kind.model, data))
    entity.group_title_id = group_title_id
    db.session.add(entity)
    commit()
    logger.info(f"Created {kind.value} '{entity.tvg_name}' ({entity.id}).")
    return with_group_title(entity)


def get_stream(kind, stream_id):
    entity = db.session.get(EntityKind(kind).model, stream_id)
    return with_group_title(entity) if entity else None


def build_filters(kind, group_title_id=None, active=None, favourite=None, countries=None):
    model = kind.model
    filters = []
    if active is not None:
        filters.append(model.active == active)
    if favourite is not None:
        filters.append(model.favourite == favourite)
    if group_title_id:
        filters.append(model.group_title_id == group_title_id)
    if kind is EntityKind.CHANNELS and countries:
        filters.append(Channel.country_code.in_(countries))
    # Episodes are listed under their series, the media list only shows movies
    if kind is EntityKind.MEDIA:
        filters.append(Media.series_id.is_(None))
    return filters


def list_streams(kind, cursor=0, limit=None, sort_by='name', sort_direction='asc',
                 group_title_id=None, active=None, favourite=None, countries=None):
    """One page of rows with the effective group title, plus the filtered total."""
    kind = EntityKind(kind)
    model = kind.model
    if limit is None:
        limit = current_app.config['PAGE_SIZE']
    if sort_by not in SORT_COLUMNS:
        raise ValueError(f"Cannot sort by '{sort_by}'")

    filters = build_filters(kind, group_title_id, active, favourite, countries)
    total_count = db.session.execute(
        select(func.count()).select_from(model).where(*filters)
    ).scalar_one()

    sort_column = getattr(model, sort_by)
    order = desc(sort_column) if sort_direction == 'desc' else asc(sort_column)
    stmt = (
        select(model, effective_group_title_expr.label('group_title'))
        .outerjoin(GroupTitle, model.group_title_id == GroupTitle.id)
        .where(*filters)
        .order_by(order, asc(model.id))
        .offset(cursor)
        .limit(limit)
    )

    data = []
    for entity, group_title in db.session.execute(stmt):
        row = entity.to_dict()
        row['group_title'] = group_title
        data.append(row)
    return {'data': data, 'total_count': total_count}


def toggle_active(kind, stream_id, active):
    kind = EntityKind(kind)
    if kind is EntityKind.SERIES:
        # Episodes follow their series
        from .series import set_series_active
        return set_series_active(stream_id, active)
    return _set_flag(kind, stream_id, 'active', active)


def toggle_favourite(kind, stream_id, favourite):
    return _set_flag(EntityKind(kind), stream_id, 'favourite', favourite)


def _set_flag(kind, stream_id, flag, value):
    entity = db.session.get(kind.model, stream_id)
    if entity is None:
        return None
    setattr(entity, flag, value)
    entity.updated_at = utcnow()
    commit()
    return {'id': entity.id, flag: getattr(entity, flag)}


def list_country_codes():
    stmt = (
        select(Channel.country_code)
        .where(Channel.country_code.isnot(None))
        .distinct()
        .order_by(Channel.country_code)
    )
    return [code for code in db.session.execute(stmt).scalars() if code]


def export_active_m3u(kind):
    """M3U of the active channels or active movies, ordered by name."""
    kind = EntityKind(kind)
    if kind is EntityKind.SERIES:
        raise ValueError("Series are exported through export_active_series_m3u")
    model = kind.model

    filters = [model.active.is_(True)]
    if kind is EntityKind.MEDIA:
        filters.append(Media.series_id.is_(None))

    stmt = (
        select(
            model.tvg_id, model.tvg_name, model.tvg_logo, model.stream_url, model.name,
            effective_group_title_expr.label('group_title'),
        )
        .outerjoin(GroupTitle, model.group_title_id == GroupTitle.id)
        .where(*filters)
        .order_by(asc(model.name))
    )
    items = [dict(row._mapping) for row in db.session.execute(stmt)]
    m3u = generate_m3u(items)
    return {'m3u': m3u, 'count': len([item for item in items if item['stream_url']])}


def export_active_channels_yaml():
    stmt = (
        select(Channel.script_alias, Channel.name, Channel.tvg_name, Channel.content_id, Channel.tvg_logo)
        .where(Channel.active.is_(True))
        .order_by(asc(Channel.name))
    )
    channels = [dict(row._mapping) for row in db.session.execute(stmt)]
    return generate_home_assistant_yaml(channels)
