# iptv_channels/routes/media.py
from flask import Blueprint, jsonify, current_app
from .. import db
from ..models import EntityKind
from ..forms import MediaForm, validate_json
from ..group_titles import list_group_titles
from ..services import create_stream, update_stream, get_stream, list_streams, toggle_active, toggle_favourite
from .common import list_args, json_payload, validation_error, not_found, requested_flag

media_bp = Blueprint('media', __name__)
KIND = EntityKind.MEDIA


@media_bp.route('/', methods=['GET'])
def list_movies():
    """Paginated movie list; series episodes are only reachable through their series."""
    return jsonify(list_streams(KIND, **list_args()))


@media_bp.route('/<media_id>', methods=['GET'])
def get_media(media_id):
    media = get_stream(KIND, media_id)
    if media is None:
        return not_found('media', media_id)
    return jsonify(media)


@media_bp.route('/add', methods=['POST'])
def add_movie():
    data, errors = validate_json(MediaForm, json_payload())
    if errors:
        return validation_error(errors)
    data['media_type'] = 'movie'
    try:
        movie = create_stream(KIND, data)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error adding movie: {e}", exc_info=True)
        return jsonify({'error': 'Could not create the movie.'}), 500
    return jsonify(movie), 201


@media_bp.route('/edit/<media_id>', methods=['POST'])
def edit_media(media_id):
    data, errors = validate_json(MediaForm, json_payload(), partial=True)
    if errors:
        return validation_error(errors)
    try:
        media = update_stream(KIND, media_id, data)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating media {media_id}: {e}", exc_info=True)
        return jsonify({'error': 'Could not update the media.'}), 500
    if media is None:
        return not_found('media', media_id)
    return jsonify(media)


@media_bp.route('/toggle/<media_id>', methods=['POST'])
def toggle_media(media_id):
    active = requested_flag(KIND, media_id, 'active')
    result = toggle_active(KIND, media_id, active) if active is not None else None
    if result is None:
        return not_found('media', media_id)
    return jsonify({'status': 'success', **result})


@media_bp.route('/favourite/<media_id>', methods=['POST'])
def favourite_media(media_id):
    favourite = requested_flag(KIND, media_id, 'favourite')
    result = toggle_favourite(KIND, media_id, favourite) if favourite is not None else None
    if result is None:
        return not_found('media', media_id)
    return jsonify({'status': 'success', **result})


@media_bp.route('/group-titles', methods=['GET'])
def media_group_titles():
    return jsonify(list_group_titles(KIND))
