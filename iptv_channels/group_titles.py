# iptv_channels/group_titles.py
import logging
from sqlalchemy import select, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from . import db
from .models import GroupTitle

logger = logging.getLogger(__name__)

# Dialects with a native "INSERT ... ON CONFLICT DO NOTHING"
_CONFLICT_INSERTS = {
    'sqlite': sqlite.insert,
    'postgresql': postgresql.insert,
}

# alias when set, else the original playlist value
effective_group_title_expr = func.coalesce(func.nullif(GroupTitle.alias, ''), GroupTitle.name)


def effective_group_title(group_title):
    if group_title is None:
        return None
    return group_title.display_name


def resolve_group_title_id(group_title):
    """
    Maps a playlist group-title to its lookup row id, creating the row on first sight.

    Concurrent callers may race on the insert for a new name: the loser's insert
    is a no-op and it reads the winner's row instead.
    """
    if not group_title:
        return None

    conflict_insert = _CONFLICT_INSERTS.get(db.session.get_bind().dialect.name)
    if conflict_insert is not None:
        stmt = conflict_insert(GroupTitle).values(name=group_title).on_conflict_do_nothing(
            index_elements=['name']
        )
        db.session.execute(stmt)
    else:
        try:
            with db.session.begin_nested():
                db.session.add(GroupTitle(name=group_title))
        except IntegrityError:
            logger.debug(f"Group title '{group_title}' was created concurrently, reading it back.")

    return db.session.execute(
        select(GroupTitle.id).where(GroupTitle.name == group_title)
    ).scalar_one_or_none()


def set_group_title_alias(group_title_id, alias):
    """Overwrites the alias; an empty string clears it. Returns None for unknown ids."""
    group_title = db.session.get(GroupTitle, group_title_id)
    if group_title is None:
        return None
    group_title.alias = alias or None
    return group_title


def get_group_title_fields(group_title_id):
    """The read-only `group_title` / `group_title_alias` fields attached to entities."""
    group_title = db.session.get(GroupTitle, group_title_id) if group_title_id else None
    return {
        'group_title': group_title.name if group_title else None,
        'group_title_alias': group_title.alias if group_title else None,
    }


def list_group_titles(kind):
    """Distinct group titles referenced by at least one row of the given entity kind."""
    model = kind.model
    stmt = (
        select(GroupTitle)
        .join(model, model.group_title_id == GroupTitle.id)
        .distinct()
        .order_by(GroupTitle.name)
    )
    return [
        {'id': gt.id, 'name': gt.name, 'alias': gt.alias, 'display_name': gt.display_name}
        for gt in db.session.execute(stmt).scalars()
    ]
