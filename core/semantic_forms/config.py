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

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from utils.env import env_bool, env_choice, env_json, env_list

INLINE_ERROR_MODES = ("sentence", "list", "first", "none")

# Columns never rendered by a quick form.
RESERVED_COLUMNS = (
  "created_at",
  "updated_at",
  "created_on",
  "updated_on",
  "lock_version",
  "version",
)


@dataclass(frozen=True)
class FormConfig:
  """
  Rendering configuration for semantic form builders.

  A FormConfig is handed to every builder explicitly; nested builders
  inherit the config of their parent.
  """
  all_fields_required_by_default: bool = True
  required_string: str = '<abbr title="required">*</abbr>'
  optional_string: str = ""

  inline_errors: str = "sentence"
  inline_order: Tuple[str, ...] = ("input", "hints", "errors")
  custom_inline_order: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

  default_text_field_size: Optional[int] = None
  default_text_area_height: int = 20
  default_text_area_width: Optional[int] = None
  include_blank_for_select_by_default: bool = True

  collection_label_methods: Tuple[str, ...] = (
    "to_label", "display_name", "full_name", "name", "title", "username", "login", "value",
  )
  collection_value_methods: Tuple[str, ...] = ("pk", "id")
  file_methods: Tuple[str, ...] = ("url", "path", "chunks")

  countries: Tuple[Any, ...] = ()
  priority_countries: Tuple[str, ...] = ()
  priority_time_zones: Tuple[str, ...] = ()

  i18n_lookups_by_default: bool = False
  i18n: Mapping[str, str] = field(default_factory=dict)
  escape_html_entities_in_hints_and_labels: bool = True

  default_hint_class: str = "inline-hints"
  default_inline_error_class: str = "inline-errors"
  default_error_list_class: str = "errors"

  def __post_init__(self):
    if self.inline_errors not in INLINE_ERROR_MODES:
      raise ImproperlyConfigured(
        f"SEMANTIC_FORMS['inline_errors'] must be one of {', '.join(INLINE_ERROR_MODES)}, "
        f"got {self.inline_errors!r}"
      )

  @property
  def render_inline_errors(self) -> bool:
    return self.inline_errors != "none"

  def order_for(self, input_type: str) -> Tuple[str, ...]:
    """Inline part order for an input style."""
    return tuple(self.custom_inline_order.get(input_type) or self.inline_order)

  def with_options(self, **overrides) -> "FormConfig":
    return replace(self, **_normalize(overrides))

  @classmethod
  def from_settings(cls, **overrides) -> "FormConfig":
    """
    Build a config from (in order):

    1. settings.SEMANTIC_FORMS
    2. environment overrides (SEMANTIC_FORMS_*)
    3. explicit keyword overrides
    """
    values: Dict[str, Any] = dict(getattr(settings, "SEMANTIC_FORMS", {}) or {})

    known = {f.name for f in fields(cls)}
    unknown = set(values) - known
    if unknown:
      raise ImproperlyConfigured(
        f"Unknown SEMANTIC_FORMS option(s): {', '.join(sorted(unknown))}"
      )

    values.update(_env_overrides())
    values.update(overrides)
    return cls(**_normalize(values))


def _env_overrides() -> Dict[str, Any]:
  env: Dict[str, Any] = {
    "all_fields_required_by_default": env_bool("SEMANTIC_FORMS_ALL_FIELDS_REQUIRED"),
    "i18n_lookups_by_default": env_bool("SEMANTIC_FORMS_I18N_LOOKUPS"),
    "inline_errors": env_choice("SEMANTIC_FORMS_INLINE_ERRORS", INLINE_ERROR_MODES),
    "priority_countries": env_list("SEMANTIC_FORMS_PRIORITY_COUNTRIES"),
    "priority_time_zones": env_list("SEMANTIC_FORMS_PRIORITY_TIME_ZONES"),
    "i18n": env_json("SEMANTIC_FORMS_I18N", None, transform=dict),
  }
  return {k: v for k, v in env.items() if v is not None}


def _normalize(values: Dict[str, Any]) -> Dict[str, Any]:
  """Lists from settings become tuples."""
  out = {}
  for key, value in values.items():
    if key == "custom_inline_order" and value:
      value = {k: tuple(v) for k, v in value.items()}
    elif isinstance(value, list):
      value = tuple(value)
    out[key] = value
  return out


def get_config(**overrides) -> FormConfig:
  """Shortcut used by builders and template tags."""
  return FormConfig.from_settings(**overrides)
