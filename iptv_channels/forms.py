# iptv_channels/forms.py
from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import StringField, URLField, IntegerField, BooleanField
from wtforms.validators import DataRequired, Optional, URL, Length, AnyOf, NumberRange, Regexp
from .countries import COUNTRY_CODES

# JSON bodies carry real booleans
FALSE_VALUES = (False, 'false', '')


def _upper(value):
    return value.upper() if isinstance(value, str) else value


class StreamForm(FlaskForm):
    """Fields every entity kind shares."""
    tvg_id = StringField('EPG ID (tvg-id)', validators=[Optional()])
    tvg_name = StringField('Display Name', validators=[DataRequired(message="Display name is required")])
    tvg_logo = URLField('Logo URL', validators=[Optional(), URL()])
    group_title = StringField('Group Title', validators=[Optional(), Length(max=255)])
    group_title_id = IntegerField('Group Title ID', validators=[Optional()])
    group_title_alias = StringField('Group Title Alias', validators=[Optional(), Length(max=255)])
    name = StringField('Custom Name', validators=[Optional(), Length(max=255)])
    favourite = BooleanField('Favourite', false_values=FALSE_VALUES)
    active = BooleanField('Active', false_values=FALSE_VALUES)


class ChannelForm(StreamForm):
    stream_url = URLField('Stream URL', validators=[Optional(), URL()])
    content_id = IntegerField('Kodi Content ID', validators=[Optional()])
    country_code = StringField('Country Code', filters=[_upper], validators=[
        Optional(),
        Length(min=2, max=2, message="Country code must be 2 characters"),
        AnyOf(COUNTRY_CODES, message="Unknown ISO-3166-1 country code"),
    ])
    script_alias = StringField('Script Alias', validators=[
        Optional(),
        Regexp(r'^[a-z0-9_]+$', message="Use lowercase letters, digits and underscores only"),
    ])


class MediaForm(StreamForm):
    stream_url = URLField('Stream URL', validators=[Optional(), URL()])
    media_type = StringField('Media Type', validators=[Optional(), AnyOf(['movie', 'series'])])
    year = IntegerField('Year', validators=[Optional(), NumberRange(min=1800, max=3000)])
    season = IntegerField('Season', validators=[Optional(), NumberRange(min=0)])
    episode = IntegerField('Episode', validators=[Optional(), NumberRange(min=0)])


class SeriesForm(StreamForm):
    pass


class EpisodeForm(FlaskForm):
    """One row of the series edit form's episode list."""
    id = StringField('Episode ID', validators=[Optional()])
    season = IntegerField('Season', validators=[Optional(), NumberRange(min=0)])
    episode = IntegerField('Episode', validators=[Optional(), NumberRange(min=0)])
    year = IntegerField('Year', validators=[Optional(), NumberRange(min=1800, max=3000)])
    stream_url = URLField('Stream URL', validators=[Optional(), URL()])
    name = StringField('Custom Name', validators=[Optional(), Length(max=255)])


def validate_json(form_class, payload, partial=False):
    """
    Validates a JSON object with a WTForms form.

    Only keys present in `payload` end up in the returned data, so updates stay
    partial. Explicit nulls pass through as None. With partial=True, errors on
    fields the payload does not mention (e.g. a required tvg_name) are ignored.
    Returns (data, errors).
    """
    scalars = {
        key: value for key, value in payload.items()
        if value is not None and not isinstance(value, (list, dict))
    }
    form = form_class(formdata=MultiDict(scalars), meta={'csrf': False})
    form.validate()

    errors = {
        name: messages for name, messages in form.errors.items()
        if not partial or name in payload
    }
    data = {}
    for key, value in payload.items():
        if key in form:
            data[key] = form[key].data if value is not None else None
    return data, errors


def validate_episodes(episodes):
    """Validates a list of episode objects; errors are keyed like "episodes[0].season"."""
    if not isinstance(episodes, list):
        return None, {'episodes': ["Must be a list"]}

    cleaned, errors = [], {}
    for index, episode in enumerate(episodes):
        if not isinstance(episode, dict):
            errors[f'episodes[{index}]'] = ["Must be an object"]
            continue
        data, episode_errors = validate_json(EpisodeForm, episode, partial=True)
        for name, messages in episode_errors.items():
            errors[f'episodes[{index}].{name}'] = messages
        cleaned.append(data)
    return cleaned, errors
