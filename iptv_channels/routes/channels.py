# iptv_channels/routes/channels.py
from flask import Blueprint, request, jsonify, current_app
from .. import db
from ..models import EntityKind
from ..forms import ChannelForm, validate_json
from ..group_titles import list_group_titles
from ..kodi import KodiClient, KodiError, sync_content_ids
from ..services import (
    create_stream, update_stream, get_stream, list_streams,
    toggle_active, toggle_favourite, list_country_codes,
)
from .common import list_args, json_payload, validation_error, not_found, requested_flag

channels_bp = Blueprint('channels', __name__)
KIND = EntityKind.CHANNELS


@channels_bp.route('/', methods=['GET'])
def list_channels():
    """Paginated channel list. Filters: active, favourite, group_title_id, country (repeatable)."""
    args = list_args()
    args['countries'] = [code.upper() for code in request.args.getlist('country') if code]
    return jsonify(list_streams(KIND, **args))


@channels_bp.route('/<channel_id>', methods=['GET'])
def get_channel(channel_id):
    channel = get_stream(KIND, channel_id)
    if channel is None:
        return not_found('channel', channel_id)
    return jsonify(channel)


@channels_bp.route('/add', methods=['POST'])
def add_channel():
    data, errors = validate_json(ChannelForm, json_payload())
    if errors:
        return validation_error(errors)
    try:
        channel = create_stream(KIND, data)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error adding channel: {e}", exc_info=True)
        return jsonify({'error': 'Could not create the channel.'}), 500
    return jsonify(channel), 201


@channels_bp.route('/edit/<channel_id>', methods=['POST'])
def edit_channel(channel_id):
    """Partial update; only the fields present in the body are changed."""
    data, errors = validate_json(ChannelForm, json_payload(), partial=True)
    if errors:
        return validation_error(errors)
    try:
        channel = update_stream(KIND, channel_id, data)
    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f"Error updating channel {channel_id}: {e}", exc_info=True)
        return jsonify({'error': 'Could not update the channel.'}), 500
    if channel is None:
        return not_found('channel', channel_id)
    return jsonify(channel)


@channels_bp.route('/toggle/<channel_id>', methods=['POST'])
def toggle_channel(channel_id):
    """Sets `active` from the body, or flips it when the body has none."""
    active = requested_flag(KIND, channel_id, 'active')
    result = toggle_active(KIND, channel_id, active) if active is not None else None
    if result is None:
        return not_found('channel', channel_id)
    return jsonify({'status': 'success', **result})


@channels_bp.route('/favourite/<channel_id>', methods=['POST'])
def favourite_channel(channel_id):
    favourite = requested_flag(KIND, channel_id, 'favourite')
    result = toggle_favourite(KIND, channel_id, favourite) if favourite is not None else None
    if result is None:
        return not_found('channel', channel_id)
    return jsonify({'status': 'success', **result})


@channels_bp.route('/group-titles', methods=['GET'])
def channel_group_titles():
    return jsonify(list_group_titles(KIND))


@channels_bp.route('/country-codes', methods=['GET'])
def country_codes():
    return jsonify(list_country_codes())


@channels_bp.route('/sync-kodi', methods=['POST'])
def sync_kodi():
    """Copies Kodi PVR channel ids into content_id by channel name."""
    try:
        client = KodiClient.from_config(current_app.config)
        summary = sync_content_ids(client)
    except KodiError as e:
        current_app.logger.error(f"Kodi sync failed: {e}")
        return jsonify({'error': str(e)}), 502
    current_app.logger.info(f"Kodi sync finished: {summary}")
    return jsonify(summary)
