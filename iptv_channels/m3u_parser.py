# iptv_channels/m3u_parser.py
"""
M3U playlist parsing for seed/import operations.

Playlists come from third-party providers and are messy, so nothing in here
raises on bad input: broken entries are counted in `ParseResult.skipped`.
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional

EXTINF_PREFIX = '#EXTINF:'
MEDIA_EXTENSIONS = ('.mp4', '.mkv')
PARSE_MODES = ('channels', 'media', 'all')

ATTRIBUTES = {
    'tvg_id': 'tvg-id',
    'tvg_name': 'tvg-name',
    'tvg_logo': 'tvg-logo',
    'group_title': 'group-title',
}

YEAR_RE = re.compile(r'\((\d{4})\)')
SEASON_EPISODE_RE = re.compile(r'[Ss](\d{1,4})\s*[Ee](\d{1,4})')
SEASON_EPISODE_SUFFIX_RE = re.compile(r'\s*[Ss]\d{1,4}\s*[Ee]\d{1,4}\s*$')
LINE_SPLIT_RE = re.compile(r'\r?\n')


@dataclass
class M3uEntry:
    extinf: str
    url: str


@dataclass
class ParsedChannel:
    tvg_id: Optional[str]
    tvg_name: str
    tvg_logo: Optional[str]
    group_title: Optional[str]
    stream_url: str


@dataclass
class ParsedMedia(ParsedChannel):
    media_type: Optional[str] = None
    year: Optional[int] = None
    season: Optional[int] = None
    episode: Optional[int] = None
    series_base_name: Optional[str] = None


@dataclass
class ParseResult:
    channels: List[ParsedChannel] = field(default_factory=list)
    media: List[ParsedMedia] = field(default_factory=list)
    skipped: int = 0
    stopped_at_line: Optional[int] = None


def _get_attr(line, key):
    match = re.search(rf'{re.escape(key)}="([^"]*)"', line)
    # An empty value is treated exactly like a missing attribute
    return match.group(1) or None if match else None


def parse_extinf(line):
    """Extracts the tvg-*/group-title attributes from an EXTINF line."""
    info = {field_name: _get_attr(line, key) for field_name, key in ATTRIBUTES.items()}
    info['tvg_name'] = info['tvg_name'] or ''
    return info


def is_media_url(url):
    """True for on-demand files (movies, episodes) as opposed to live streams."""
    return url.endswith(MEDIA_EXTENSIONS)


def parse_media_type(url):
    if '/movie/' in url:
        return 'movie'
    if '/series/' in url:
        return 'series'
    return None


def parse_year(title):
    """Year from a title like "The Shawshank Redemption (1994)"; the first match wins."""
    match = YEAR_RE.search(title)
    return int(match.group(1)) if match else None


def parse_season_episode(title):
    """
    Season/episode from "S02 E11", "S02E11", "s01e05" or "S2024 E6942".
    Returns a (season, episode) tuple, (None, None) when absent.
    """
    match = SEASON_EPISODE_RE.search(title)
    if match:
        return int(match.group(1)), int(match.group(2))
    return None, None


def parse_series_base_name(title):
    """
    "DE - Senran Kagura (2013) (Ger Sub) S02 E11" -> "DE - Senran Kagura (2013) (Ger Sub)"
    """
    return SEASON_EPISODE_SUFFIX_RE.sub('', title).strip()


def is_valid_entry(entry):
    if not entry.extinf.startswith(EXTINF_PREFIX):
        return False
    if not entry.url.startswith('http'):
        return False
    return bool(parse_extinf(entry.extinf)['tvg_name'])


def parse_channel(entry):
    if not is_valid_entry(entry) or is_media_url(entry.url):
        return None
    return ParsedChannel(stream_url=entry.url, **parse_extinf(entry.extinf))


def parse_media(entry):
    if not is_valid_entry(entry) or not is_media_url(entry.url):
        return None

    info = parse_extinf(entry.extinf)
    season, episode = parse_season_episode(info['tvg_name'])
    media_type = parse_media_type(entry.url)
    series_base_name = None
    if media_type == 'series' and season is not None:
        series_base_name = parse_series_base_name(info['tvg_name'])

    return ParsedMedia(
        stream_url=entry.url,
        media_type=media_type,
        year=parse_year(info['tvg_name']),
        season=season,
        episode=episode,
        series_base_name=series_base_name,
        **info
    )


def parse_m3u_content(content, mode='all'):
    """
    Parses full M3U content into channels and media.

    mode "channels" stops at the first media entry (providers list live
    channels first) and records the 1-based line in `stopped_at_line`,
    "media" only parses media, "all" parses both.
    """
    if mode not in PARSE_MODES:
        raise ValueError(f"Unknown parse mode '{mode}', expected one of {PARSE_MODES}")

    result = ParseResult()
    current_extinf = None

    for index, raw_line in enumerate(LINE_SPLIT_RE.split(content)):
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith(EXTINF_PREFIX):
            # The previous EXTINF never got its URL
            if current_extinf is not None:
                result.skipped += 1
            current_extinf = line
            continue

        if line.startswith('#'):
            continue

        if current_extinf is None:
            # Orphan URL
            result.skipped += 1
            continue

        entry = M3uEntry(extinf=current_extinf, url=line)
        current_extinf = None

        if is_media_url(line):
            if mode == 'channels':
                result.stopped_at_line = index + 1
                break
            parsed = parse_media(entry)
            if parsed:
                result.media.append(parsed)
            else:
                result.skipped += 1
        elif mode != 'media':
            parsed = parse_channel(entry)
            if parsed:
                result.channels.append(parsed)
            else:
                result.skipped += 1

    if current_extinf is not None:
        result.skipped += 1

    return result
