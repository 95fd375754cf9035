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
Model metadata provider.

Everything the form builder knows about a model (columns, relations,
validations) goes through a ModelIntrospector. The default implementation
reads Django's `_meta` API; other persistence layers can plug in by
implementing the same methods.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from django.apps import apps
from django.core.exceptions import FieldDoesNotExist

from semantic_forms import validation

log = logging.getLogger(__name__)

# Django internal type -> column type name used by input inference.
COLUMN_TYPES = {
  "CharField": "string",
  "SlugField": "string",
  "EmailField": "string",
  "URLField": "string",
  "GenericIPAddressField": "string",
  "IPAddressField": "string",
  "UUIDField": "string",
  "FilePathField": "string",
  "DurationField": "string",
  "TextField": "text",
  "JSONField": "text",
  "AutoField": "integer",
  "BigAutoField": "integer",
  "SmallAutoField": "integer",
  "IntegerField": "integer",
  "BigIntegerField": "integer",
  "SmallIntegerField": "integer",
  "PositiveIntegerField": "integer",
  "PositiveBigIntegerField": "integer",
  "PositiveSmallIntegerField": "integer",
  "ForeignKey": "integer",
  "OneToOneField": "integer",
  "FloatField": "float",
  "DecimalField": "decimal",
  "DateTimeField": "datetime",
  "DateField": "date",
  "TimeField": "time",
  "BooleanField": "boolean",
  "NullBooleanField": "boolean",
  "FileField": "file",
  "ImageField": "file",
  "BinaryField": "binary",
}

BELONGS_TO = "belongs_to"
HAS_ONE = "has_one"
HAS_MANY = "has_many"
HAS_AND_BELONGS_TO_MANY = "has_and_belongs_to_many"

COLLECTION_MACROS = (HAS_MANY, HAS_AND_BELONGS_TO_MANY)


@dataclass(frozen=True)
class Column:
  name: str
  type: str
  field: Any = None

  @property
  def limit(self) -> Optional[int]:
    return getattr(self.field, "max_length", None)


@dataclass(frozen=True)
class Reflection:
  """An association on a model, named by what the form sees."""
  name: str
  macro: str
  klass: Any
  field: Any = None
  accessor: Optional[str] = None

  @property
  def is_collection(self) -> bool:
    return self.macro in COLLECTION_MACROS


def column_type_for_field(field) -> str:
  internal_type = field.get_internal_type()
  if internal_type in COLUMN_TYPES:
    return COLUMN_TYPES[internal_type]
  # Custom fields: "TimestampField" -> "timestamp"
  name = internal_type[:-len("Field")] if internal_type.endswith("Field") else internal_type
  return name.lower()


def macro_for_field(field) -> Optional[str]:
  if not getattr(field, "is_relation", False):
    return None
  if field.many_to_many:
    return HAS_AND_BELONGS_TO_MANY
  if field.one_to_many:
    return HAS_MANY
  if field.many_to_one:
    return BELONGS_TO
  if field.one_to_one:
    return BELONGS_TO if field.concrete else HAS_ONE
  return None


def _model_meta(model):
  return getattr(model, "_meta", None)


class ModelIntrospector:
  """Default metadata provider, backed by Django's model `_meta` API."""

  def resolve_model(self, obj=None, model=None):
    """
    Resolve the model class for a form.

    `model` may be a model class or an "app_label.ModelName" label; if it
    is not given the class of `obj` is used. Returns None when nothing
    resolves.
    """
    if model is not None:
      if isinstance(model, str):
        try:
          return apps.get_model(model)
        except (LookupError, ValueError):
          log.warning("Could not resolve model %r for semantic form", model)
          return None
      return model if _model_meta(model) is not None else None
    if obj is not None and _model_meta(obj) is not None:
      return type(obj)
    return None

  def _get_field(self, model, name):
    meta = _model_meta(model)
    if meta is None:
      return None
    try:
      return meta.get_field(name)
    except FieldDoesNotExist:
      return None

  def column_for(self, obj, name) -> Optional[Column]:
    """Column metadata for a concrete model field (also resolves `<fk>_id`)."""
    if obj is None:
      return None
    field = self._get_field(type(obj), str(name))
    if field is None or not getattr(field, "concrete", False) or field.many_to_many:
      return None
    return Column(name=str(name), type=column_type_for_field(field), field=field)

  def reflections(self, obj=None, model=None) -> List[Reflection]:
    """
    All associations of the model. Forward relations come in declaration
    order, reverse relations are named by their accessor (e.g. `task_set`).
    """
    model = self.resolve_model(obj, model)
    meta = _model_meta(model)
    if meta is None:
      return []
    forward, reverse = [], []
    for field in meta.get_fields():
      macro = macro_for_field(field)
      if macro is None:
        continue
      if field.auto_created and not field.concrete:
        accessor = field.get_accessor_name()
        if not accessor:
          continue
        reverse.append(Reflection(accessor, macro, field.related_model, field, accessor))
      else:
        forward.append(Reflection(field.name, macro, field.related_model, field, field.name))
    return forward + reverse

  def reflection_for(self, obj, name, model=None) -> Optional[Reflection]:
    """Association reflection for a relation named exactly `name`."""
    name = str(name)
    for reflection in self.reflections(obj, model):
      if reflection.name == name:
        return reflection
    return None

  def association_columns(self, obj, *macros, model=None) -> List[str]:
    """Association names, optionally filtered by macro (e.g. "belongs_to")."""
    return [
      r.name for r in self.reflections(obj, model)
      if not macros or r.macro in macros
    ]

  def content_columns(self, obj=None, model=None) -> List[str]:
    """
    Plain (non-relation) columns, excluding the primary key and
    `*_id` / `*_count` columns.
    """
    model = self.resolve_model(obj, model)
    if model is None:
      return []
    try:
      concrete = model._meta.concrete_fields
    except AttributeError:
      log.warning("Model %r exposes no column metadata", model)
      return []
    return [
      f.name for f in concrete
      if not f.primary_key
      and not f.is_relation
      and not f.name.endswith(("_id", "_count"))
    ]

  def validators_on(self, obj, attribute):
    """
    Validator list for `attribute`, or None when the object offers no
    validation reflection at all.
    """
    if obj is None:
      return None
    klass = type(obj)
    if hasattr(klass, "validators_on"):
      return list(klass.validators_on(attribute))
    if _model_meta(klass) is not None:
      return validation.field_validations(klass, attribute)
    return None


default_introspector = ModelIntrospector()
