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

from typing import Optional

from django.utils.functional import Promise
from django.utils.text import capfirst
from django.utils.translation import gettext

LABEL = "label"
HINT = "hint"
TITLE = "title"


def is_text(value) -> bool:
  """Plain or lazily translated text (as opposed to a lookup flag)."""
  return isinstance(value, (str, Promise))


def humanize(key) -> str:
  """`first_name` -> `First name`, `author_id` -> `Author`."""
  key = str(key)
  if key.endswith("_id"):
    key = key[:-3]
  return capfirst(key.replace("_", " ").strip())


def localized_string(key, value, kind: str, config, object_name: Optional[str] = None):
  """
  Resolve label/hint/title text.

  Text values are returned unchanged and False disables the lookup. True
  (or None with `i18n_lookups_by_default`) looks the key up in
  `config.i18n`, first scoped to the form, then globally:

    "labels.post.title", then "labels.title"

  Returns None when nothing is found.
  """
  if is_text(value):
    return value
  if value is False:
    return None

  use_i18n = value is True or (value is None and config.i18n_lookups_by_default)
  if not use_i18n:
    return None

  key = str(key)
  candidates = []
  if object_name:
    candidates.append(f"{kind}s.{object_name}.{key}")
  candidates.append(f"{kind}s.{key}")

  for candidate in candidates:
    text = config.i18n.get(candidate)
    if text:
      return gettext(text)
  return None
