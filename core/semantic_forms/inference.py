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

import re
from typing import Any, Mapping, Optional, Sequence

from semantic_forms.reflection import ModelIntrospector, default_introspector

DEFAULT_FILE_METHODS = ("url", "path", "chunks")

# Name heuristics for string columns, first match wins.
STRING_NAME_HINTS = (
  (re.compile(r"password"), "password"),
  (re.compile(r"country$"), "country"),
  (re.compile(r"time_zone"), "time_zone"),
  (re.compile(r"email"), "email"),
  (re.compile(r"^url$|^website$|_url$"), "url"),
  (re.compile(r"(phone|fax)"), "phone"),
  (re.compile(r"^search$"), "search"),
)

_PASSWORD = re.compile(r"password")


def _responds_to(value, method_name: str) -> bool:
  # Checked on the type so properties that raise for empty files are not evaluated.
  return hasattr(type(value), method_name) or method_name in getattr(value, "__dict__", {})


def is_file(obj, method, options: Optional[Mapping[str, Any]] = None,
            file_methods: Sequence[str] = DEFAULT_FILE_METHODS) -> bool:
  """Whether the attribute holds an uploaded file (or is forced to be one)."""
  options = options or {}
  if options.get("as") == "file":
    return True
  if obj is None:
    return False
  value = getattr(obj, str(method), None)
  if value is None:
    return False
  return any(_responds_to(value, m) for m in file_methods)


def default_input_type(obj, method, options: Optional[Mapping[str, Any]] = None,
                       introspector: Optional[ModelIntrospector] = None,
                       file_methods: Sequence[str] = DEFAULT_FILE_METHODS) -> str:
  """
  Best guess for the input style of `method`.

  Columns mostly map to their type (a "string" column becomes a string
  input), with a few special cases: numeric types collapse to "numeric",
  integer columns that are associations become "select", and string
  columns are refined by their name (password, email, url, ...). Virtual
  attributes without a column default to "string".
  """
  options = options or {}
  introspector = introspector or default_introspector
  name = str(method)

  column = introspector.column_for(obj, name)
  if column is not None:
    if column.type == "string":
      for pattern, input_type in STRING_NAME_HINTS:
        if pattern.search(name):
          return input_type
    elif column.type == "integer":
      if introspector.reflection_for(obj, name):
        return "select"
      return "numeric"
    elif column.type in ("float", "decimal"):
      return "numeric"
    elif column.type == "timestamp":
      return "datetime"

    # Enum-like strings: a collection passed in, or choices on the model field
    if column.type == "string" and ("collection" in options or getattr(column.field, "choices", None)):
      return "select"
    return column.type

  if obj is not None:
    if introspector.reflection_for(obj, name):
      return "select"
    if is_file(obj, name, options, file_methods):
      return "file"

  if "collection" in options:
    return "select"
  if _PASSWORD.search(name):
    return "password"
  return "string"
