"""
elevata forms - Semantic Form Helpers for Django
Copyright © 2025 Ilona Tag

This file is part of elevata forms.

elevata forms is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as
published by the Free Software Foundation, either version 3 of
the License, or (at your option) any later version.

elevata forms is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
GNU Affero General Public License for more details.

You should have received a copy of the GNU Affero General Public License
along with elevata forms. If not, see <https://www.gnu.org/licenses/>.

Contact: <https://github.com/elevata-labs/elevata>.
"""

from __future__ import annotations

"""
Input style renderers.

Each renderer takes (builder, method, options) and returns the markup
inside the `<li>` wrapper: usually a label followed by a Django widget.
Renderers are looked up by input style in INPUT_RENDERERS; custom styles
can be added with @register_input.
"""

import datetime
import zoneinfo
from typing import Callable, Dict

from django import forms
from django.core.exceptions import ImproperlyConfigured
from django.utils import timezone

from semantic_forms.exceptions import UnknownInputType
from semantic_forms.html import content_tag, join_markup, tag
from semantic_forms.i18n import is_text

Renderer = Callable[..., str]

INPUT_RENDERERS: Dict[str, Renderer] = {}

_UNSET = object()


def register_input(*styles: str):
  """Register a renderer for one or more input styles."""
  def decorator(fn: Renderer) -> Renderer:
    for style in styles:
      INPUT_RENDERERS[style] = fn
    return fn
  return decorator


def get_input_renderer(style) -> Renderer:
  try:
    return INPUT_RENDERERS[str(style)]
  except KeyError:
    raise UnknownInputType(style) from None


class TelInput(forms.TextInput):
  input_type = "tel"


class SearchInput(forms.TextInput):
  input_type = "search"


class DateInput(forms.DateInput):
  input_type = "date"


class DateTimeLocalInput(forms.DateTimeInput):
  input_type = "datetime-local"


class TimeInput(forms.TimeInput):
  input_type = "time"


# ------------------------------------------------------------
# Helpers
# ------------------------------------------------------------
def _input_html(builder, method, options, **defaults):
  """Widget attrs (id, defaults, input_html) and an explicit value, if any."""
  attrs = {"id": builder.input_id(method)}
  attrs.update({k: v for k, v in defaults.items() if v is not None})
  attrs.update(options.get("input_html") or {})
  value = attrs.pop("value", _UNSET)
  return attrs, value


def _render_widget(builder, method, options, widget_class, widget_kwargs=None, multiple=False, **defaults):
  attrs, value = _input_html(builder, method, options, **defaults)
  if value is _UNSET:
    value = builder.value_for(method, multiple=multiple)
  widget = widget_class(attrs=attrs, **(widget_kwargs or {}))
  widget.is_required = bool(options.get("required"))
  return widget.render(builder.input_name(method), value)


def _label_and_widget(builder, method, options, widget_class, **kwargs):
  return join_markup([
    builder.label(method, options),
    _render_widget(builder, method, options, widget_class, **kwargs),
  ])


def _text_length(builder, method):
  column = builder.column_for(method)
  return column.limit if column is not None else None


def _legend(builder, method, options):
  text = builder.label_text(method, options)
  if text is None:
    return None
  return content_tag("legend", content_tag("label", text), {"class": "label"})


def _choice_value(value) -> str:
  return "" if value is None else str(value)


def _with_priority(choices, priority):
  """Move the choices named in `priority` (by value or label) to the front."""
  if not priority:
    return list(choices)
  wanted = [str(p) for p in priority]
  first = []
  for name in wanted:
    for choice in choices:
      if name in (str(choice[0]), str(choice[1])) and choice not in first:
        first.append(choice)
  return first + [c for c in choices if c not in first]


def _select(builder, method, options, choices, multiple=False):
  if not multiple:
    include_blank = options.get("include_blank", builder.config.include_blank_for_select_by_default)
    prompt = options.get("prompt")
    if prompt or include_blank:
      blank_label = prompt if is_text(prompt) else (include_blank if is_text(include_blank) else "")
      choices = [("", blank_label)] + list(choices)

  widget_class = forms.SelectMultiple if multiple else forms.Select
  return _label_and_widget(
    builder, method, options, widget_class,
    widget_kwargs={"choices": choices},
    multiple=multiple,
  )


# ------------------------------------------------------------
# Text-like inputs
# ------------------------------------------------------------
@register_input("string")
def string_input(builder, method, options):
  return _label_and_widget(
    builder, method, options, forms.TextInput,
    maxlength=_text_length(builder, method),
    size=builder.config.default_text_field_size,
  )


@register_input("password")
def password_input(builder, method, options):
  return _label_and_widget(
    builder, method, options, forms.PasswordInput,
    widget_kwargs={"render_value": False},
    maxlength=_text_length(builder, method),
    size=builder.config.default_text_field_size,
  )


@register_input("email")
def email_input(builder, method, options):
  return _label_and_widget(
    builder, method, options, forms.EmailInput,
    maxlength=_text_length(builder, method),
    size=builder.config.default_text_field_size,
  )


@register_input("url")
def url_input(builder, method, options):
  return _label_and_widget(
    builder, method, options, forms.URLInput,
    maxlength=_text_length(builder, method),
    size=builder.config.default_text_field_size,
  )


@register_input("phone")
def phone_input(builder, method, options):
  return _label_and_widget(
    builder, method, options, TelInput,
    maxlength=_text_length(builder, method),
    size=builder.config.default_text_field_size,
  )


@register_input("search")
def search_input(builder, method, options):
  return _label_and_widget(
    builder, method, options, SearchInput,
    maxlength=_text_length(builder, method),
    size=builder.config.default_text_field_size,
  )


@register_input("numeric")
def numeric_input(builder, method, options):
  column = builder.column_for(method)
  step = "any" if column is not None and column.type in ("float", "decimal") else None
  return _label_and_widget(builder, method, options, forms.NumberInput, step=step)


@register_input("text")
def text_input(builder, method, options):
  return _label_and_widget(
    builder, method, options, forms.Textarea,
    rows=builder.config.default_text_area_height,
    cols=builder.config.default_text_area_width,
  )


@register_input("hidden")
def hidden_input(builder, method, options):
  return _render_widget(builder, method, options, forms.HiddenInput)


@register_input("file")
def file_input(builder, method, options):
  return _label_and_widget(builder, method, options, forms.ClearableFileInput)


# ------------------------------------------------------------
# Dates and times (HTML5 inputs)
# ------------------------------------------------------------
@register_input("date")
def date_input(builder, method, options):
  return _label_and_widget(
    builder, method, options, DateInput,
    widget_kwargs={"format": "%Y-%m-%d"},
  )


@register_input("datetime")
def datetime_input(builder, method, options):
  attrs, value = _input_html(builder, method, options)
  if value is _UNSET:
    value = builder.value_for(method)
  if isinstance(value, datetime.datetime) and timezone.is_aware(value):
    value = timezone.localtime(value)
  widget = DateTimeLocalInput(attrs=attrs, format="%Y-%m-%dT%H:%M")
  return join_markup([
    builder.label(method, options),
    widget.render(builder.input_name(method), value),
  ])


@register_input("time")
def time_input(builder, method, options):
  return _label_and_widget(
    builder, method, options, TimeInput,
    widget_kwargs={"format": "%H:%M"},
  )


# ------------------------------------------------------------
# Choices
# ------------------------------------------------------------
@register_input("select")
def select_input(builder, method, options):
  reflection = builder.reflection_for(method)
  multiple = options.get("multiple", bool(reflection is not None and reflection.is_collection))
  return _select(builder, method, options, builder.collection_for(method, options), multiple=multiple)


@register_input("boolean")
def boolean_input(builder, method, options):
  attrs, value = _input_html(builder, method, options)
  if value is _UNSET:
    value = builder.value_for(method)
  checkbox = forms.CheckboxInput(attrs=attrs).render(builder.input_name(method), value)

  text = builder.label_text(method, options)
  if text is None:
    return checkbox
  label_html = {"for": attrs["id"], **(options.get("label_html") or {})}
  return content_tag("label", join_markup([checkbox, text], " "), label_html)


@register_input("check_boxes")
def check_boxes_input(builder, method, options):
  attrs, value = _input_html(builder, method, options)
  if value is _UNSET:
    value = builder.value_for(method, multiple=True)
  selected = {str(v) for v in (value or [])}
  base_id = attrs.pop("id")
  name = builder.input_name(method)

  items = []
  for index, (choice_value, choice_label) in enumerate(builder.collection_for(method, options)):
    input_id = f"{base_id}_{index}"
    checkbox = forms.CheckboxInput(
      attrs={**attrs, "id": input_id},
      check_test=lambda v: str(v) in selected,
    ).render(name, _choice_value(choice_value))
    label = content_tag("label", join_markup([checkbox, choice_label], " "), {"for": input_id})
    items.append(content_tag("li", label))

  return content_tag("fieldset", join_markup([
    _legend(builder, method, options),
    content_tag("ol", join_markup(items)),
  ]))


@register_input("radio")
def radio_input(builder, method, options):
  attrs, value = _input_html(builder, method, options)
  if value is _UNSET:
    value = builder.value_for(method)
  current = "" if value is None else str(value)
  base_id = attrs.pop("id")
  name = builder.input_name(method)

  items = []
  for index, (choice_value, choice_label) in enumerate(builder.collection_for(method, options)):
    input_id = f"{base_id}_{index}"
    radio = tag("input", {
      **attrs,
      "type": "radio",
      "name": name,
      "value": _choice_value(choice_value),
      "id": input_id,
      "checked": str(choice_value) == current,
    })
    label = content_tag("label", join_markup([radio, choice_label], " "), {"for": input_id})
    items.append(content_tag("li", label))

  return content_tag("fieldset", join_markup([
    _legend(builder, method, options),
    content_tag("ol", join_markup(items)),
  ]))


@register_input("country")
def country_input(builder, method, options):
  countries = options.get("collection") or builder.config.countries
  if not countries:
    raise ImproperlyConfigured(
      "The country input needs a list of countries: pass collection=... "
      "or set SEMANTIC_FORMS['countries']."
    )
  priority = options.get("priority_countries", builder.config.priority_countries)
  choices = _with_priority(builder.normalize_collection(countries), priority)
  return _select(builder, method, options, choices)


@register_input("time_zone")
def time_zone_input(builder, method, options):
  if options.get("collection") is not None:
    zones = builder.normalize_collection(options["collection"])
  else:
    zones = [(z, z) for z in sorted(zoneinfo.available_timezones())]
  priority = options.get("priority_zones", builder.config.priority_time_zones)
  return _select(builder, method, options, _with_priority(zones, priority))
