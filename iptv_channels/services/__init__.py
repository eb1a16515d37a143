from .streams import (
    create_stream, update_stream, get_stream, list_streams,
    toggle_active, toggle_favourite, list_country_codes,
    export_active_m3u, export_active_channels_yaml,
)
from .series import (
    create_series, update_series, get_series_with_episodes, list_series,
    set_series_active, replace_episodes, export_active_series_m3u,
)
