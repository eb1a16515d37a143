# iptv_channels/routes/common.py
from flask import request, jsonify, abort, current_app
from ..services.streams import SORT_COLUMNS, get_stream


def parse_bool_arg(name):
    """?active=true|false -> bool; absent or anything else -> None (no filter)."""
    value = request.args.get(name, '').strip().lower()
    if value in ('true', '1', 'yes'):
        return True
    if value in ('false', '0', 'no'):
        return False
    return None


def list_args():
    """Common filter/sort/pagination query arguments of the list endpoints."""
    page_size = current_app.config['PAGE_SIZE']
    page = max(1, request.args.get('page', type=int, default=1))
    limit = min(max(1, request.args.get('limit', type=int, default=page_size)), 500)
    sort_by = request.args.get('sort_by', default='name')
    if sort_by not in SORT_COLUMNS:
        abort(400, description=f"sort_by must be one of {', '.join(SORT_COLUMNS)}")
    sort_direction = 'desc' if request.args.get('sort_direction', default='asc').lower() == 'desc' else 'asc'
    return {
        'cursor': request.args.get('cursor', type=int, default=(page - 1) * limit),
        'limit': limit,
        'sort_by': sort_by,
        'sort_direction': sort_direction,
        'group_title_id': request.args.get('group_title_id', type=int),
        'active': parse_bool_arg('active'),
        'favourite': parse_bool_arg('favourite'),
    }


def json_payload():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, description="Expected a JSON object body.")
    return payload


def validation_error(errors):
    return jsonify({'error': 'Validation failed', 'fields': errors}), 400


def not_found(kind, stream_id):
    return jsonify({'error': f"No {kind} with id '{stream_id}'."}), 404


def flag_value(payload, flag):
    """The explicit new value of a toggle; anything but a JSON boolean is a 400."""
    value = payload.get(flag)
    if not isinstance(value, bool):
        abort(400, description=f"'{flag}' must be true or false.")
    return value


def requested_flag(kind, stream_id, flag):
    """
    The value a toggle endpoint should set: the JSON body's `flag` when given,
    otherwise the opposite of the stored value. None when the row is missing.
    """
    payload = request.get_json(silent=True) or {}
    if flag in payload:
        return flag_value(payload, flag)
    current = get_stream(kind, stream_id)
    if current is None:
        return None
    return not current[flag]
