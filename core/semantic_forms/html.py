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

import re

from django.forms.utils import flatatt
from django.utils.html import conditional_escape, format_html
from django.utils.safestring import SafeString, mark_safe

_OBJECT_NAME_CHARS = re.compile(r"\]\[|[^-a-zA-Z0-9:.]")


def css_class(*parts) -> str:
  """Join class names, flattening lists and dropping empty parts."""
  names = []
  for part in parts:
    if part is None or part is False:
      continue
    if isinstance(part, (list, tuple)):
      names.extend(css_class(*part).split())
      continue
    part = str(part).strip()
    if part:
      names.append(part)
  return " ".join(names)


def _attrs(attrs) -> dict:
  cleaned = {}
  for key, value in (attrs or {}).items():
    if value is None or value is False:
      continue
    if key == "class" and isinstance(value, (list, tuple)):
      value = css_class(*value)
    key = str(key)
    if key.startswith(("data_", "aria_")):
      key = key.replace("_", "-")
    cleaned[key] = value
  return cleaned


def content_tag(tag_name: str, content="", attrs=None) -> SafeString:
  """`<tag attrs>content</tag>`; content is escaped unless already safe."""
  if content is None:
    content = ""
  return format_html(
    "<{}{}>{}</{}>",
    mark_safe(tag_name),
    flatatt(_attrs(attrs)),
    content,
    mark_safe(tag_name),
  )


def tag(tag_name: str, attrs=None) -> SafeString:
  """Void element, e.g. `<input ...>`."""
  return format_html("<{}{}>", mark_safe(tag_name), flatatt(_attrs(attrs)))


def is_blank(value) -> bool:
  return value is None or (isinstance(value, str) and not value.strip())


def join_markup(parts, sep: str = "\n") -> SafeString:
  """Join markup fragments, skipping None and blank strings."""
  return mark_safe(sep.join(conditional_escape(p) for p in parts if not is_blank(p)))


def sanitized_id(value) -> str:
  """`post[author_attributes]` -> `post_author_attributes`."""
  return _OBJECT_NAME_CHARS.sub("_", str(value)).rstrip("_")
