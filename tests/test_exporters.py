from dataclasses import asdict

from iptv_channels.exporters import generate_m3u, generate_home_assistant_yaml, HA_EMPTY_PLACEHOLDER
from iptv_channels.m3u_parser import parse_m3u_content


class TestGenerateM3u:
    def test_full_entry(self):
        m3u = generate_m3u([{
            'tvg_id': 'CNN.us',
            'tvg_name': 'US| CNN HD',
            'tvg_logo': 'https://example.com/cnn.png',
            'group_title': 'News',
            'stream_url': 'http://example.com/live/cnn.ts',
        }])
        assert m3u == (
            '#EXTM3U\n'
            '#EXTINF:-1 tvg-id="CNN.us" tvg-name="US| CNN HD" tvg-logo="https://example.com/cnn.png" '
            'group-title="News",US| CNN HD\n'
            'http://example.com/live/cnn.ts\n'
        )

    def test_absent_attributes_are_omitted(self):
        m3u = generate_m3u([{'tvg_id': None, 'tvg_name': 'Bare', 'tvg_logo': '', 'stream_url': 'http://x/1.ts'}])
        assert m3u == '#EXTM3U\n#EXTINF:-1 tvg-name="Bare",Bare\nhttp://x/1.ts\n'
        assert 'tvg-id' not in m3u
        assert 'group-title' not in m3u

    def test_entries_without_stream_url_are_dropped(self):
        m3u = generate_m3u([
            {'tvg_name': 'No URL', 'stream_url': None},
            {'tvg_name': 'Empty URL', 'stream_url': ''},
            {'tvg_name': 'Kept', 'stream_url': 'http://x/kept.ts'},
        ])
        assert 'No URL' not in m3u
        assert 'Empty URL' not in m3u
        assert 'Kept' in m3u

    def test_empty_list_is_header_only(self):
        assert generate_m3u([]) == '#EXTM3U\n'

    def test_round_trip(self, sample_m3u):
        channels = parse_m3u_content(sample_m3u, 'channels').channels
        reparsed = parse_m3u_content(generate_m3u([asdict(c) for c in channels])).channels
        assert [asdict(c) for c in reparsed] == [asdict(c) for c in channels]


class TestGenerateHomeAssistantYaml:
    def test_generates_scripts(self):
        result = generate_home_assistant_yaml([
            {'script_alias': 'channel_abc', 'name': 'ABC', 'tvg_name': 'US| ABC HD',
             'content_id': 754, 'tvg_logo': 'http://example.com/abc.png'},
            {'script_alias': 'channel_cnn', 'name': None, 'tvg_name': 'US| CNN',
             'content_id': 2147, 'tvg_logo': None},
        ])
        assert result['count'] == 2
        assert result['skipped'] == []
        assert result['yaml'] == (
            'script:\n'
            '  channel_abc:\n'
            '    alias: "ABC"\n'
            '    icon: mdi:view-stream\n'
            '    sequence:\n'
            '      - service: script.play_channel\n'
            '        data:\n'
            '          content_id: 754\n'
            '          channel_title: "US| ABC HD"\n'
            '          channel_thumbnail: "http://example.com/abc.png"\n'
            '  channel_cnn:\n'
            '    alias: "US| CNN"\n'
            '    icon: mdi:view-stream\n'
            '    sequence:\n'
            '      - service: script.play_channel\n'
            '        data:\n'
            '          content_id: 2147\n'
            '          channel_title: "US| CNN"\n'
            '          channel_thumbnail: ""'
        )

    def test_empty_list(self):
        result = generate_home_assistant_yaml([])
        assert result == {'yaml': HA_EMPTY_PLACEHOLDER, 'count': 0, 'skipped': []}
        assert result['yaml'] == '# No channels with scriptAlias and contentId found'

    def test_missing_script_alias(self):
        result = generate_home_assistant_yaml([
            {'script_alias': None, 'name': 'Missing Alias', 'tvg_name': 'US| Missing',
             'content_id': 123, 'tvg_logo': None},
        ])
        assert result['count'] == 0
        assert result['skipped'] == [{'reason': 'missing scriptAlias', 'channel': 'Missing Alias'}]

    def test_missing_or_zero_content_id(self):
        result = generate_home_assistant_yaml([
            {'script_alias': 'a', 'name': None, 'tvg_name': 'US| A', 'content_id': None, 'tvg_logo': None},
            {'script_alias': 'b', 'name': 'B', 'tvg_name': 'US| B', 'content_id': 0, 'tvg_logo': None},
            {'script_alias': 'c', 'name': 'C', 'tvg_name': 'US| C', 'content_id': 7, 'tvg_logo': None},
        ])
        assert result['count'] == 1
        assert result['skipped'] == [
            {'reason': 'missing contentId', 'channel': 'US| A'},
            {'reason': 'missing contentId', 'channel': 'B'},
        ]
        assert '  c:\n' in result['yaml']
        assert '  b:' not in result['yaml']
