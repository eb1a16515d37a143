# iptv_channels/routes/series.py
from flask import Blueprint, jsonify, current_app
from .. import db
from ..models import EntityKind
from ..forms import SeriesForm, validate_json, validate_episodes
from ..group_titles import list_group_titles
from ..services import (
    create_series, update_series, get_series_with_episodes, list_series,
    set_series_active, toggle_favourite,
)
from .common import list_args, json_payload, validation_error, not_found, requested_flag

series_bp = Blueprint('series', __name__)
KIND = EntityKind.SERIES


@series_bp.route('/', methods=['GET'])
def list_all_series():
    return jsonify(list_series(**list_args()))


@series_bp.route('/<series_id>', methods=['GET'])
def get_series(series_id):
    """A series with its episodes ordered by season and episode."""
    series = get_series_with_episodes(series_id)
    if series is None:
        return not_found('series', series_id)
    return jsonify(series)


@series_bp.route('/add', methods=['POST'])
def add_series():
    data, errors = validate_json(SeriesForm, json_payload())
    if errors:
        return validation_error(errors)
    try:
        series = create_series(data)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error adding series: {e}", exc_info=True)
        return jsonify({'error': 'Could not create the series.'}), 500
    return jsonify(series), 201


@series_bp.route('/edit/<series_id>', methods=['POST'])
def edit_series(series_id):
    """
    Partial update of the series. When `episodes` is given it replaces the
    whole episode list: missing episodes are deleted, new ones created.
    """
    payload = json_payload()
    data, errors = validate_json(SeriesForm, payload, partial=True)
    if 'episodes' in payload:
        episodes, episode_errors = validate_episodes(payload['episodes'])
        errors.update(episode_errors)
        data['episodes'] = episodes
    if errors:
        return validation_error(errors)

    try:
        series = update_series(series_id, data)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating series {series_id}: {e}", exc_info=True)
        return jsonify({'error': 'Could not update the series.'}), 500
    if series is None:
        return not_found('series', series_id)
    return jsonify(series)


@series_bp.route('/toggle/<series_id>', methods=['POST'])
def toggle_series(series_id):
    """Sets `active` on the series and all of its episodes."""
    active = requested_flag(KIND, series_id, 'active')
    try:
        result = set_series_active(series_id, active) if active is not None else None
    except Exception as e:
        current_app.logger.error(f"Error toggling series {series_id}: {e}", exc_info=True)
        return jsonify({'error': 'Could not update the series and its episodes.'}), 500
    if result is None:
        return not_found('series', series_id)
    return jsonify({'status': 'success', **result})


@series_bp.route('/favourite/<series_id>', methods=['POST'])
def favourite_series(series_id):
    favourite = requested_flag(KIND, series_id, 'favourite')
    result = toggle_favourite(KIND, series_id, favourite) if favourite is not None else None
    if result is None:
        return not_found('series', series_id)
    return jsonify({'status': 'success', **result})


@series_bp.route('/group-titles', methods=['GET'])
def series_group_titles():
    return jsonify(list_group_titles(KIND))
