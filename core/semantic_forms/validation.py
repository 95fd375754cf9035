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
Requiredness inference.

Two shapes of validation reflection are understood:

- legacy: the model class has `reflect_on_validations_for(attribute)`
  returning objects with `macro`, `name` and `options`
  (macro is "validates_presence_of" or "validates_inclusion_of")
- modern: the model class has `validators_on(attribute)` returning
  objects with `kind` ("presence" / "inclusion") and `options`

Plain Django models get a modern-style list derived from their fields
(`blank=False` -> presence, `choices` -> inclusion).
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from django.core.exceptions import FieldDoesNotExist

log = logging.getLogger(__name__)

PRESENCE = "presence"
INCLUSION = "inclusion"
REQUIRING_KINDS = (PRESENCE, INCLUSION)
REQUIRING_MACROS = ("validates_presence_of", "validates_inclusion_of")

_FK_SUFFIX = re.compile(r"_id$")

# Python spellings of reserved words in validation options.
_OPTION_ALIASES = {"if_": "if", "unless_": "unless"}


@dataclass(frozen=True)
class Validation:
  kind: str
  attribute: str
  options: Mapping[str, Any] = field(default_factory=dict)

  @property
  def macro(self) -> str:
    return f"validates_{self.kind}_of"

  @property
  def name(self) -> str:
    return self.attribute


def _normalize_options(options: Mapping[str, Any]) -> Dict[str, Any]:
  return {_OPTION_ALIASES.get(k, k): v for k, v in options.items()}


def validates_presence_of(*attributes, **options) -> List[Validation]:
  """
  Declare presence validations, e.g.

    semantic_validations = [
      *validates_presence_of("summary", if_="is_published"),
    ]
  """
  opts = _normalize_options(options)
  return [Validation(PRESENCE, str(a), opts) for a in attributes]


def validates_inclusion_of(*attributes, **options) -> List[Validation]:
  opts = _normalize_options(options)
  return [Validation(INCLUSION, str(a), opts) for a in attributes]


def field_validations(model, attribute) -> List[Validation]:
  """Validations implied by a Django model field definition."""
  try:
    model_field = model._meta.get_field(attribute)
  except (FieldDoesNotExist, AttributeError):
    return []

  # Django forms never require booleans, and non-editable fields are not form input.
  if not getattr(model_field, "editable", True) or model_field.get_internal_type() in ("BooleanField", "NullBooleanField"):
    return []
  if getattr(model_field, "auto_created", False) and not getattr(model_field, "concrete", True):
    return []

  validations = []
  if not getattr(model_field, "blank", True):
    validations.append(Validation(PRESENCE, attribute))
  if getattr(model_field, "choices", None):
    validations.append(Validation(INCLUSION, attribute, {"allow_blank": bool(model_field.blank)}))
  return validations


class ValidationReflectionMixin:
  """
  Model mixin exposing `validators_on()`: field-derived validations plus
  the ones declared in `semantic_validations`.
  """
  semantic_validations: List[Validation] = []

  @classmethod
  def validators_on(cls, attribute) -> List[Validation]:
    attribute = str(attribute)
    declared = [v for v in cls.semantic_validations if v.attribute == attribute]
    return field_validations(cls, attribute) + declared


def options_require_validation(options: Mapping[str, Any], obj) -> bool:
  """
  Whether a validation with the given options applies to `obj`.

  `allow_blank` decides on its own when present. Otherwise the `if`
  (or `unless`) condition is evaluated: a callable is called with the
  object, a string naming an attribute of the object is read (and called
  when it is a method), anything else is taken literally.
  """
  options = _normalize_options(options)

  allow_blank = options.get("allow_blank")
  if allow_blank is not None:
    return not allow_blank

  if_condition = options.get("if") is not None
  condition = options["if"] if if_condition else options.get("unless")

  if callable(condition):
    condition = condition(obj)
  elif isinstance(condition, str) and hasattr(obj, condition):
    condition = getattr(obj, condition)
    if callable(condition):
      condition = condition()

  return bool(condition) if if_condition else not condition


def _applies(options, obj) -> bool:
  return options_require_validation(options, obj) if options else True


def method_required(obj, attribute, default_required=True, introspector=None) -> bool:
  """
  Whether `attribute` must be filled in on the form of `obj`.

  A trailing `_id` is stripped so foreign key columns resolve to their
  association. Falls back to `default_required` when the object offers no
  validation reflection.
  """
  attribute = _FK_SUFFIX.sub("", str(attribute))

  if obj is not None and hasattr(type(obj), "reflect_on_validations_for"):
    return any(
      v.macro in REQUIRING_MACROS
      and str(v.name) == attribute
      and _applies(v.options, obj)
      for v in type(obj).reflect_on_validations_for(attribute)
    )

  if introspector is not None:
    validators = introspector.validators_on(obj, attribute)
  elif obj is not None and hasattr(type(obj), "validators_on"):
    validators = list(type(obj).validators_on(attribute))
  else:
    validators = None

  if validators is None:
    log.debug("No validation reflection for %r, using default required=%s", attribute, default_required)
    return default_required

  return any(
    v.kind in REQUIRING_KINDS and _applies(v.options, obj)
    for v in validators
  )
