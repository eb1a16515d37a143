from unittest.mock import patch

import pytest

from iptv_channels import db
from iptv_channels.models import Series, Media, EntityKind
from iptv_channels.services import (
    create_series, update_series, get_series_with_episodes, set_series_active,
    toggle_active, export_active_series_m3u, list_series,
)
from iptv_channels.services.series import episode_tvg_name


@pytest.fixture
def series(app):
    created = create_series({'tvg_name': 'Show', 'name': 'Show', 'group_title': '|DE| SERIES',
                             'tvg_logo': 'http://x/poster.jpg'})
    db.session.add_all([
        Media(tvg_name='Show S01 E01', series_id=created['id'], season=1, episode=1, media_type='series',
              stream_url='http://x/series/1.mkv'),
        Media(tvg_name='Show S01 E02', series_id=created['id'], season=1, episode=2, media_type='series',
              stream_url='http://x/series/2.mkv'),
    ])
    db.session.get(Series, created['id']).episode_count = 2
    db.session.commit()
    return created


def episodes_of(series_id):
    return Media.query.filter_by(series_id=series_id).order_by(Media.season, Media.episode).all()


def test_episode_tvg_name():
    assert episode_tvg_name('Show', 2, 11) == 'Show S02 E11'
    assert episode_tvg_name('Show', 1, None) == 'Show'
    assert episode_tvg_name('Show', None, None) == 'Show'


class TestSetSeriesActive:
    def test_cascades_to_episodes(self, series):
        assert set_series_active(series['id'], True) == {'id': series['id'], 'active': True}
        assert db.session.get(Series, series['id']).active is True
        assert all(episode.active is True for episode in episodes_of(series['id']))

        set_series_active(series['id'], False)
        assert all(episode.active is False for episode in episodes_of(series['id']))

    def test_generic_toggle_cascades(self, series):
        toggle_active(EntityKind.SERIES, series['id'], True)
        assert all(episode.active for episode in episodes_of(series['id']))

    def test_missing_series(self, app):
        assert set_series_active('missing', True) is None

    def test_failure_is_rolled_back_and_raised(self, series):
        with patch('iptv_channels.services.series.commit', side_effect=RuntimeError("db down")):
            with pytest.raises(RuntimeError):
                set_series_active(series['id'], True)
        db.session.rollback()
        assert db.session.get(Series, series['id']).active is False
        assert not any(episode.active for episode in episodes_of(series['id']))


class TestUpdateSeries:
    def test_replaces_episode_list(self, series):
        first_id, second_id = [episode.id for episode in episodes_of(series['id'])]
        updated = update_series(series['id'], {'episodes': [
            {'id': first_id, 'season': 1, 'episode': 1, 'name': 'Pilot', 'stream_url': 'http://x/series/1b.mkv'},
            {'season': 2, 'episode': 11, 'stream_url': 'http://x/series/211.mkv'},
            {'season': None, 'episode': None},
        ]})

        assert updated['episode_count'] == 3
        assert db.session.get(Media, second_id) is None

        episodes = {episode.tvg_name: episode for episode in episodes_of(series['id'])}
        assert episodes['Show S01 E01'].name == 'Pilot'
        assert episodes['Show S01 E01'].stream_url == 'http://x/series/1b.mkv'
        new_episode = episodes['Show S02 E11']
        assert new_episode.media_type == 'series'
        assert new_episode.tvg_logo == 'http://x/poster.jpg'
        assert new_episode.group_title_id == series['group_title_id']
        assert 'Show' in episodes

    def test_new_episodes_inherit_active(self, series):
        set_series_active(series['id'], True)
        update_series(series['id'], {'episodes': [{'season': 3, 'episode': 1}]})
        assert [episode.active for episode in episodes_of(series['id'])] == [True]

    def test_empty_list_removes_everything(self, series):
        updated = update_series(series['id'], {'episodes': []})
        assert updated['episode_count'] == 0
        assert episodes_of(series['id']) == []

    def test_without_episodes_keeps_them(self, series):
        updated = update_series(series['id'], {'name': 'Renamed', 'group_title_alias': 'Series'})
        assert updated['name'] == 'Renamed'
        assert updated['group_title_alias'] == 'Series'
        assert updated['episode_count'] == 2
        assert len(episodes_of(series['id'])) == 2

    def test_active_cascades_to_episodes(self, series):
        updated = update_series(series['id'], {'name': 'Show', 'active': True})
        assert updated['active'] is True
        assert [episode.active for episode in episodes_of(series['id'])] == [True, True]

        update_series(series['id'], {'active': False})
        assert not any(episode.active for episode in episodes_of(series['id']))

    def test_active_applies_to_replaced_episodes(self, series):
        update_series(series['id'], {'active': True, 'episodes': [{'season': 4, 'episode': 1}]})
        assert [episode.active for episode in episodes_of(series['id'])] == [True]

    def test_episode_count_is_not_writable(self, series):
        updated = update_series(series['id'], {'episode_count': 99})
        assert updated['episode_count'] == 2

    def test_missing_series(self, app):
        assert update_series('missing', {'episodes': []}) is None


class TestReadAndExport:
    def test_get_series_with_episodes(self, series):
        result = get_series_with_episodes(series['id'])
        assert result['group_title'] == '|DE| SERIES'
        assert [episode['episode'] for episode in result['episodes']] == [1, 2]
        assert get_series_with_episodes('missing') is None

    def test_list_series(self, series):
        result = list_series()
        assert result['total_count'] == 1
        assert result['data'][0]['episode_count'] == 2

    def test_export_only_active_series(self, series):
        assert export_active_series_m3u()['count'] == 0
        set_series_active(series['id'], True)
        result = export_active_series_m3u()
        assert result['count'] == 2
        assert 'group-title="|DE| SERIES",Show S01 E01\nhttp://x/series/1.mkv' in result['m3u']
