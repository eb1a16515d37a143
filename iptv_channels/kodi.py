# iptv_channels/kodi.py
import logging
import requests
from . import db
from .models import Channel, utcnow

logger = logging.getLogger(__name__)

GET_CHANNELS_REQUEST = {
    'jsonrpc': '2.0',
    'method': 'PVR.GetChannels',
    'params': {'channelgroupid': 'alltv'},
    'id': 1,
}


class KodiError(Exception):
    """Kodi could not be reached or answered with something unusable."""


class KodiClient:
    """Minimal client for the Kodi JSON-RPC API."""

    def __init__(self, host, port, timeout=30, session=None):
        if not host or not port:
            raise KodiError("KODI_HOST and KODI_PORT must be configured")
        self.url = f"http://{host}:{port}/jsonrpc"
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_config(cls, config):
        return cls(config.get('KODI_HOST'), config.get('KODI_PORT'), config.get('KODI_TIMEOUT', 30))

    def get_channels(self):
        """Returns the PVR channel list as dicts with `channelid` and `label`."""
        try:
            headers = {'User-Agent': 'IPTV-Channels/1.0'}
            response = self.session.post(self.url, json=GET_CHANNELS_REQUEST, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise KodiError(f"Kodi request to {self.url} failed: {e}") from e
        except ValueError as e:
            raise KodiError(f"Kodi returned invalid JSON: {e}") from e

        if payload.get('error'):
            raise KodiError(f"Kodi API error: {payload['error']}")
        channels = (payload.get('result') or {}).get('channels')
        if channels is None:
            raise KodiError("No channels returned from Kodi")
        for channel in channels:
            if not isinstance(channel, dict) or not isinstance(channel.get('label'), str) \
                    or channel.get('channelid') is None:
                raise KodiError(f"Malformed channel in Kodi response: {channel!r}")
        return channels


def sync_content_ids(client):
    """
    Copies Kodi channel ids into Channel.content_id by case-insensitive tvg_name match.

    Each update is committed as it is made, so a failure part way keeps the
    channels already updated. Channels are never created or deleted.
    """
    kodi_channels = client.get_channels()
    kodi_map = {channel['label'].lower(): channel['channelid'] for channel in kodi_channels}

    local_channels = Channel.query.all()
    matched, updated = [], []
    for channel in local_channels:
        kodi_id = kodi_map.get(channel.tvg_name.lower())
        if kodi_id is None:
            continue
        matched.append(channel.tvg_name)
        if kodi_id != channel.content_id:
            channel.content_id = kodi_id
            channel.updated_at = utcnow()
            db.session.commit()
            updated.append(channel.tvg_name)

    logger.info(f"Kodi sync matched {len(matched)} channels.")
    if updated:
        logger.info(f"Kodi sync updated content ids for: {updated}")

    return {
        'total': len(local_channels),
        'kodi_channels': len(kodi_channels),
        'matched': len(matched),
        'updated': len(updated),
        'skipped': len(local_channels) - len(matched),
    }
