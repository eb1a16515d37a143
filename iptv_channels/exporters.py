# iptv_channels/exporters.py
"""Serializers for the two export formats: M3U playlists and Home Assistant scripts."""

HA_ICON = 'mdi:view-stream'
HA_SERVICE = 'script.play_channel'
HA_EMPTY_PLACEHOLDER = '# No channels with scriptAlias and contentId found'


def generate_m3u(entries):
    """
    Builds an M3U playlist from mappings with tvg_id, tvg_name, tvg_logo,
    group_title and stream_url keys. Entries without a stream URL are dropped.
    """
    lines = ['#EXTM3U']

    for entry in entries:
        stream_url = entry.get('stream_url')
        if not stream_url:
            continue

        extinf_parts = ['#EXTINF:-1']
        if entry.get('tvg_id'): extinf_parts.append(f'tvg-id="{entry["tvg_id"]}"')
        extinf_parts.append(f'tvg-name="{entry["tvg_name"]}"')
        if entry.get('tvg_logo'): extinf_parts.append(f'tvg-logo="{entry["tvg_logo"]}"')
        if entry.get('group_title'): extinf_parts.append(f'group-title="{entry["group_title"]}"')

        lines.append(" ".join(extinf_parts) + f",{entry['tvg_name']}")
        lines.append(stream_url)

    return "\n".join(lines) + "\n"


def generate_home_assistant_yaml(channels):
    """
    Builds the `script:` section of a Home Assistant configuration, one script
    per channel, keyed by its script_alias.

    Returns a dict with the yaml text, the number of exported channels and the
    skipped channels with the reason they were left out.
    """
    yaml_lines = []
    skipped = []

    for channel in channels:
        channel_name = channel.get('name') or channel['tvg_name']

        if not channel.get('script_alias'):
            skipped.append({'reason': 'missing scriptAlias', 'channel': channel_name})
            continue
        # 0 means Kodi never assigned an id
        if not channel.get('content_id'):
            skipped.append({'reason': 'missing contentId', 'channel': channel_name})
            continue

        thumbnail = channel.get('tvg_logo') or ''

        yaml_lines.append(f'  {channel["script_alias"]}:')
        yaml_lines.append(f'    alias: "{channel_name}"')
        yaml_lines.append(f'    icon: {HA_ICON}')
        yaml_lines.append('    sequence:')
        yaml_lines.append(f'      - service: {HA_SERVICE}')
        yaml_lines.append('        data:')
        yaml_lines.append(f'          content_id: {channel["content_id"]}')
        yaml_lines.append(f'          channel_title: "{channel["tvg_name"]}"')
        yaml_lines.append(f'          channel_thumbnail: "{thumbnail}"')

    if yaml_lines:
        yaml = "script:\n" + "\n".join(yaml_lines)
    else:
        yaml = HA_EMPTY_PLACEHOLDER

    return {
        'yaml': yaml,
        'count': len(channels) - len(skipped),
        'skipped': skipped,
    }
