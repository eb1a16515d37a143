# iptv_channels/routes/main.py
from flask import Blueprint, redirect, url_for, abort, current_app, jsonify
from flask_wtf.csrf import generate_csrf
from ..models import EntityKind
from ..services import export_active_m3u, export_active_series_m3u, export_active_channels_yaml

main_bp = Blueprint('main', __name__)

M3U_HEADERS = {'Content-Type': 'application/vnd.apple.mpegurl; charset=utf-8'}


def _attachment(filename, headers):
    return {**headers, 'Content-Disposition': f'attachment; filename="{filename}"'}


@main_bp.route('/')
def index():
    """Redirects the root URL to the channel list."""
    return redirect(url_for('channels.list_channels'))


@main_bp.route('/health')
def health_check():
    return jsonify({'status': 'ok', 'service': 'iptv-channels'})


@main_bp.route('/csrf-token')
def csrf_token():
    """Token for the X-CSRFToken header of state-changing requests."""
    return jsonify({'csrf_token': generate_csrf()})


@main_bp.route('/export/<kind>.m3u')
def export_m3u(kind):
    """Serves the active channels, movies or series episodes as an M3U playlist."""
    if kind == EntityKind.SERIES.value:
        result = export_active_series_m3u()
    elif kind in (EntityKind.CHANNELS.value, EntityKind.MEDIA.value):
        result = export_active_m3u(kind)
    else:
        abort(404, description=f"Nothing to export for '{kind}'.")

    current_app.logger.info(f"Exported {result['count']} active {kind} entries to M3U.")
    return result['m3u'].encode('utf-8'), 200, _attachment(f'{kind}.m3u', M3U_HEADERS)


@main_bp.route('/export/home-assistant.yaml')
def export_home_assistant_yaml():
    """Home Assistant `script:` block for the active channels; skipped channels go to the log."""
    result = export_active_channels_yaml()
    for skipped in result['skipped']:
        current_app.logger.warning(f"YAML export skipped '{skipped['channel']}': {skipped['reason']}")
    return result['yaml'].encode('utf-8'), 200, _attachment(
        'scripts.yaml', {'Content-Type': 'application/x-yaml; charset=utf-8', 'X-Export-Count': str(result['count'])}
    )


@main_bp.route('/export/home-assistant.json')
def export_home_assistant_summary():
    """Same export as JSON, including why channels were skipped."""
    return jsonify(export_active_channels_yaml())
