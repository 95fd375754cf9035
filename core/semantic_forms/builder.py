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
Semantic form builder.

    f = semantic_form_for(post)
    f.inputs()                                  # quick form, one input per column
    f.inputs("title", "body", name="Details")   # field list in a titled fieldset
    f.input("email", hint="We never share it")  # a single <li>

Inputs are wrapped in `<li>` items inside `<fieldset class="inputs"><ol>`.
Input styles, requiredness, labels and hints are inferred from the model
unless given explicitly.
"""

import inspect
import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional

from django.core.exceptions import ImproperlyConfigured, ValidationError
from django.utils.functional import Promise
from django.utils.html import conditional_escape
from django.utils.safestring import SafeString, mark_safe
from django.utils.text import capfirst
from django.utils.translation import gettext

from semantic_forms import inference, validation
from semantic_forms.config import RESERVED_COLUMNS, FormConfig, get_config
from semantic_forms.exceptions import NestedInputsConfigurationError
from semantic_forms.html import content_tag, css_class, is_blank, join_markup, sanitized_id
from semantic_forms.i18n import HINT, LABEL, TITLE, humanize, localized_string
from semantic_forms.inputs import get_input_renderer
from semantic_forms.reflection import BELONGS_TO, ModelIntrospector, default_introspector

log = logging.getLogger(__name__)

# Python spellings of option names that are reserved words.
OPTION_ALIASES = {"as_": "as", "for_": "for", "class_": "class"}

# Options consumed by the builder; never rendered as fieldset attributes.
FIELDSET_INTERNAL_OPTIONS = ("name", "parent", "builder", "for", "for_options")


def _normalize_options(options: Mapping) -> Dict[str, Any]:
  return {OPTION_ALIASES.get(k, k): v for k, v in options.items()}


def _block_arity(block: Callable) -> int:
  """Number of positional arguments a block accepts (-1 for *args)."""
  try:
    params = inspect.signature(block).parameters.values()
  except (TypeError, ValueError):
    return -1
  count = 0
  for p in params:
    if p.kind == p.VAR_POSITIONAL:
      return -1
    if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD):
      count += 1
  return count


def _call_block(block: Callable, builder) -> str:
  return block(builder) if _block_arity(block) != 0 else block()


def _as_markup(contents) -> SafeString:
  if contents is None:
    return mark_safe("")
  if isinstance(contents, (list, tuple)):
    return join_markup(contents)
  return conditional_escape(contents)


def _messages(value) -> List[str]:
  """Flatten error values (str, lists, ErrorList, ValidationError) to messages."""
  if value is None:
    return []
  if isinstance(value, ValidationError):
    return list(value.messages)
  if isinstance(value, (str, Promise)):
    return [str(value)]
  messages = []
  for item in value:
    messages.extend(_messages(item))
  return messages


def _normalize_errors(errors) -> Mapping:
  if errors is None:
    return {}
  if isinstance(errors, ValidationError):
    return errors.message_dict if hasattr(errors, "error_dict") else {"__all__": errors.messages}
  return errors


def _is_collection(value) -> bool:
  return isinstance(value, (list, tuple)) or (
    hasattr(value, "all") and callable(value.all) and not hasattr(value, "_meta")
  )


def _record_name(record) -> str:
  """Model name of an instance, or of the model behind a queryset or manager."""
  if isinstance(record, (list, tuple)):
    record = record[0] if record else None
  meta = getattr(record, "_meta", None) or getattr(getattr(record, "model", None), "_meta", None)
  return getattr(meta, "model_name", None) or "item"


def _to_sentence(items) -> str:
  """`a`, `a and b`, `a, b, and c`."""
  items = [str(i) for i in items]
  if len(items) < 3:
    return f" {gettext('and')} ".join(items)
  return f"{', '.join(items[:-1])}, {gettext('and')} {items[-1]}"


def _is_literal_title(value) -> bool:
  """Text that can only be a fieldset title, never a field name."""
  if isinstance(value, Promise):
    return True
  return isinstance(value, str) and not value.isidentifier()


class SemanticFormBuilder:
  """
  Builds semantic form markup for a model instance (or for no object at
  all, a "virtual" form).

  object_name scopes DOM ids and i18n lookups ("post" -> "post_title_input"),
  prefix scopes input names the way Django form prefixes do
  ("author" -> "author-first_name").
  """

  def __init__(
    self,
    object_name: Optional[str] = None,
    obj=None,
    *,
    prefix: Optional[str] = None,
    data=None,
    errors=None,
    model=None,
    config: Optional[FormConfig] = None,
    introspector: Optional[ModelIntrospector] = None,
    parent: Optional["SemanticFormBuilder"] = None,
    auto_id: str = "id_%s",
  ):
    self.object = obj
    self.introspector = introspector or default_introspector
    self.model = self.introspector.resolve_model(obj, model)
    self.object_name = object_name if object_name is not None else self._default_object_name()
    self.prefix = prefix
    self.data = data
    if errors is None and isinstance(getattr(obj, "errors", None), Mapping):
      errors = obj.errors
    self.errors = _normalize_errors(errors)
    self.config = config or get_config()
    self.parent = parent
    self.auto_id = auto_id
    self.nested_child_index: Dict[str, int] = {}

  @classmethod
  def for_form(cls, form, object_name=None, **kwargs):
    """Builder bound to a Django (model) form: its instance, data, errors and prefix."""
    kwargs.setdefault("prefix", form.prefix)
    if form.is_bound:
      kwargs.setdefault("data", form.data)
      kwargs.setdefault("errors", form.errors)
    if isinstance(form.auto_id, str) and "%s" in form.auto_id:
      kwargs.setdefault("auto_id", form.auto_id)
    return cls(object_name, getattr(form, "instance", None), **kwargs)

  def _default_object_name(self) -> str:
    meta = getattr(self.model, "_meta", None)
    return meta.model_name if meta is not None else ""

  def __repr__(self):
    return f"<{type(self).__name__} object_name={self.object_name!r} prefix={self.prefix!r}>"

  # --------------------------------------------------
  # Model metadata
  # --------------------------------------------------
  def column_for(self, method):
    return self.introspector.column_for(self.object, method)

  def reflection_for(self, method):
    if self.object is None:
      return None
    return self.introspector.reflection_for(self.object, method)

  def association_columns(self, *macros) -> List[str]:
    if self.object is None:
      return []
    return self.introspector.association_columns(self.object, *macros, model=self.model)

  def content_columns(self) -> List[str]:
    return self.introspector.content_columns(self.object, model=self.model)

  def auto_columns(self) -> List[str]:
    """Fields of a quick form: belongs-to associations, then plain columns."""
    columns = self.association_columns(BELONGS_TO) + self.content_columns()
    columns = [c for c in columns if c and c not in RESERVED_COLUMNS]
    return list(dict.fromkeys(columns))

  def method_required(self, method) -> bool:
    return validation.method_required(
      self.object,
      method,
      default_required=self.config.all_fields_required_by_default,
      introspector=self.introspector,
    )

  def default_input_type(self, method, options=None) -> str:
    return inference.default_input_type(
      self.object,
      method,
      options or {},
      introspector=self.introspector,
      file_methods=self.config.file_methods,
    )

  def is_file(self, method, options=None) -> bool:
    return inference.is_file(self.object, method, options, self.config.file_methods)

  # --------------------------------------------------
  # Names, ids, values
  # --------------------------------------------------
  def input_name(self, method) -> str:
    return f"{self.prefix}-{method}" if self.prefix else str(method)

  def input_id(self, method) -> str:
    return self.auto_id % self.input_name(method)

  def generate_html_id(self, method, value="input") -> str:
    parts = [sanitized_id(self.object_name) if self.object_name else None, str(method).rstrip("?/-"), value]
    return "_".join(p for p in parts if p)

  def value_for(self, method, multiple=False):
    """Current value: submitted data first, then the bound object."""
    name = self.input_name(method)
    if self.data is not None:
      if multiple and hasattr(self.data, "getlist"):
        return self.data.getlist(name)
      return self.data.get(name)
    if self.object is None:
      return [] if multiple else None

    reflection = self.reflection_for(method)
    if reflection is not None:
      if reflection.macro == BELONGS_TO:
        return getattr(self.object, reflection.field.attname, None)
      if reflection.is_collection:
        if getattr(self.object, "pk", None) is None:
          return []
        manager = getattr(self.object, reflection.accessor)
        return [o.pk for o in manager.all()]
    return getattr(self.object, str(method), None)

  def normalize_collection(self, collection) -> List[tuple]:
    """
    (value, label) pairs from a dict {value: label}, (value, label) pairs,
    model instances / querysets, or plain values.
    """
    if isinstance(collection, Mapping):
      return [(v, label) for v, label in collection.items()]
    pairs = []
    for item in collection:
      if isinstance(item, (list, tuple)) and len(item) == 2:
        pairs.append((item[0], item[1]))
      elif isinstance(item, (str, int, float, bool, Promise)) or item is None:
        pairs.append((item, item))
      else:
        pairs.append((self._collection_value(item), self._collection_label(item)))
    return pairs

  def _collection_value(self, item):
    for name in self.config.collection_value_methods:
      value = getattr(item, name, None)
      if value is not None:
        return value() if callable(value) else value
    return str(item)

  def _collection_label(self, item):
    for name in self.config.collection_label_methods:
      label = getattr(item, name, None)
      if label is not None:
        return label() if callable(label) else label
    return str(item)

  def collection_for(self, method, options) -> List[tuple]:
    collection = options.get("collection")
    if collection is not None:
      return self.normalize_collection(collection)

    reflection = self.reflection_for(method)
    if reflection is not None:
      return self.normalize_collection(reflection.klass._default_manager.all())

    column = self.column_for(method)
    if column is not None:
      choices = getattr(column.field, "choices", None)
      if choices:
        return self.normalize_collection(column.field.flatchoices)
      if column.type == "boolean":
        return [(True, gettext("Yes")), (False, gettext("No"))]
    return []

  # --------------------------------------------------
  # Labels and hints
  # --------------------------------------------------
  def _escape(self, text):
    if self.config.escape_html_entities_in_hints_and_labels:
      return conditional_escape(text)
    return mark_safe(text)

  def humanized_attribute_name(self, method) -> str:
    column = self.column_for(method)
    if column is not None and getattr(column.field, "verbose_name", None):
      return capfirst(column.field.verbose_name)
    reflection = self.reflection_for(method)
    if reflection is not None and reflection.macro == BELONGS_TO:
      return capfirst(reflection.field.verbose_name)
    return humanize(method)

  def label_text(self, method, options) -> Optional[SafeString]:
    """Escaped label text with the required/optional marker, None if disabled."""
    if options.get("label") is False:
      return None
    text = localized_string(method, options.get("label"), LABEL, self.config, self.object_name)
    if text is None:
      text = self.humanized_attribute_name(method)
    marker = self.config.required_string if options.get("required") else self.config.optional_string
    return mark_safe(self._escape(text) + mark_safe(marker))

  def label(self, method, options) -> Optional[SafeString]:
    text = self.label_text(method, options)
    if text is None:
      return None
    attrs = {"for": self.input_id(method), **(options.get("label_html") or {})}
    return content_tag("label", text, attrs)

  def hint_text(self, method, options):
    hint = options.get("hint")
    text = localized_string(method, hint, HINT, self.config, self.object_name)
    if text is None and hint is not False and not isinstance(hint, Mapping):
      column = self.column_for(method)
      text = getattr(column.field, "help_text", None) if column is not None else None
    return text

  # --------------------------------------------------
  # Inline parts
  # --------------------------------------------------
  def inline_input_for(self, method, options):
    return get_input_renderer(options["as"])(self, method, options)

  def inline_hints_for(self, method, options):
    hint = self.hint_text(method, options)
    if not hint or is_blank(hint) or isinstance(hint, Mapping):
      return None
    hint_class = options.get("hint_class") or self.config.default_hint_class
    return content_tag("p", self._escape(hint), {"class": hint_class})

  def inline_errors_for(self, method, **options):
    """
    Error messages for `method`, rendered as configured by inline_errors
    (sentence, list or first). Returns None without errors or with "none".
    """
    if not self.config.render_inline_errors:
      return None
    errors = self.errors_for(method, options)
    if not errors:
      return None
    render = getattr(self, f"error_{self.config.inline_errors}")
    return render(errors, options)

  errors_on = inline_errors_for

  def _inline_part(self, part, method, options):
    if part == "input":
      return self.inline_input_for(method, options)
    if part == "hints":
      return self.inline_hints_for(method, options)
    if part == "errors":
      return self.inline_errors_for(method, **options)
    raise ImproperlyConfigured(f"Unknown inline part {part!r} in SEMANTIC_FORMS inline order")

  # --------------------------------------------------
  # Errors
  # --------------------------------------------------
  def error_keys(self, method, options=None) -> List[str]:
    method = str(method)
    keys = [method]
    reflection = self.reflection_for(method)
    if reflection is not None and reflection.macro == BELONGS_TO:
      keys.append(reflection.field.attname)
    if method.endswith("_id"):
      keys.append(method[:-3])
    return list(dict.fromkeys(keys))

  def errors_for(self, method, options=None) -> List[str]:
    messages = []
    for key in self.error_keys(method, options):
      for message in _messages(self.errors.get(key)):
        if message not in messages:
          messages.append(message)
    return messages

  def has_errors(self, method, options=None) -> bool:
    return bool(self.errors) and any(self.errors.get(k) for k in self.error_keys(method, options))

  def error_sentence(self, errors, options=None):
    error_class = (options or {}).get("error_class") or self.config.default_inline_error_class
    sentence = _to_sentence(conditional_escape(e) for e in errors)
    return content_tag("p", mark_safe(sentence), {"class": error_class})

  def error_list(self, errors, options=None):
    error_class = (options or {}).get("error_class") or self.config.default_error_list_class
    items = [content_tag("li", e) for e in errors]
    return content_tag("ul", join_markup(items), {"class": error_class})

  def error_first(self, errors, options=None):
    error_class = (options or {}).get("error_class") or self.config.default_inline_error_class
    return content_tag("p", errors[0], {"class": error_class})

  # --------------------------------------------------
  # input()
  # --------------------------------------------------
  def input(self, method, **options) -> SafeString:
    """
    One `<li>` for `method` with label, widget, hints and errors.

    Options: as (as_), label, hint, required, collection, input_html,
    label_html, wrapper_html, hint_class, error_class and any option the
    input style understands (include_blank, prompt, multiple, ...).
    """
    options = _normalize_options(options)
    method = str(method)

    if "required" not in options:
      options["required"] = self.method_required(method)
    if not options.get("as"):
      options["as"] = self.default_input_type(method, options)
    input_type = str(options["as"])

    html_class = [input_type, "required" if options["required"] else "optional"]
    if self.has_errors(method, options):
      html_class.append("error")

    wrapper_html = dict(options.pop("wrapper_html", None) or {})
    if not wrapper_html.get("id"):
      wrapper_html["id"] = self.generate_html_id(method)
    wrapper_html["class"] = css_class(html_class, wrapper_html.get("class"))

    input_html = options.get("input_html") or {}
    if input_html.get("id"):
      label_html = dict(options.get("label_html") or {})
      if not label_html.get("for"):
        label_html["for"] = input_html["id"]
      options["label_html"] = label_html

    parts = list(self.config.order_for(input_type))
    if input_type == "hidden":
      parts = [p for p in parts if p not in ("errors", "hints")]

    contents = [self._inline_part(part, method, options) for part in parts]
    return content_tag("li", join_markup(contents), wrapper_html)

  # --------------------------------------------------
  # inputs()
  # --------------------------------------------------
  def field_set_title_from_args(self, args, options, block=None):
    """
    Resolve the fieldset title and return (title, remaining_args).

    An explicit name/title option wins. Otherwise the first positional
    argument is the title when it is free text (or lazy text), or when it
    is an identifier that is not one of the form's columns (without a model,
    only when a block is given). For nested inputs (for_=...) identifiers are
    left to the nested builder, which knows the associated model's columns.
    """
    if not options.get("name"):
      options["name"] = options.pop("title", None)
    else:
      options.pop("title", None)
    title = options.get("name")
    args = list(args)

    if is_blank(title) and args:
      first = args[0]
      if _is_literal_title(first):
        title = args.pop(0)
      elif isinstance(first, str) and self._is_symbolic_title(first, block, options):
        title = self.localized_title(args.pop(0))
    return title, args

  def _is_symbolic_title(self, name, block, options=None) -> bool:
    if (options or {}).get("for") is not None:
      return False
    if self.model is None:
      return block is not None
    return name not in self.auto_columns()

  def localized_title(self, key):
    return localized_string(key, True, TITLE, self.config, self.object_name) or humanize(key)

  def inputs(self, *args, block: Optional[Callable] = None, **options) -> SafeString:
    """
    A fieldset of inputs.

      inputs()                          quick form (bound object required)
      inputs("title", "body")           one input per field name
      inputs("Details", "title")        free text first: fieldset title
      inputs(block=lambda: ...)         caller supplied contents
      inputs(for_="author")             nested builder for an association

    Remaining options become fieldset attributes (class defaults to "inputs").
    """
    html_options = _normalize_options(options)
    title, args = self.field_set_title_from_args(args, html_options, block)
    if not html_options.get("class"):
      html_options["class"] = "inputs"
    html_options["name"] = title

    if html_options.get("for") is not None:
      return self.inputs_for_nested_attributes(args, html_options, block)

    if block is not None:
      return self.field_set_and_list_wrapping(html_options, block=block)

    if self.object is not None and not args:
      args = self.auto_columns()
    contents = [self.input(str(method)) for method in args]
    return self.field_set_and_list_wrapping(html_options, contents=contents)

  def parent_child_index(self, parent) -> int:
    builder = parent["builder"]
    child = parent.get("for")
    if isinstance(child, (list, tuple)):
      child = child[0] if child else None
    if not isinstance(child, str):
      child = _record_name(child)
    return builder.nested_child_index.get(child, 0) + 1

  def field_set_and_list_wrapping(self, html_options, contents=None, block=None) -> SafeString:
    """`<fieldset><legend><span>title</span></legend><ol>contents</ol></fieldset>`"""
    html_options = dict(html_options)
    legend = html_options.get("name")
    legend = "" if legend is None else legend
    parent = html_options.get("parent")
    if parent and "%i" in str(legend):
      legend = str(legend).replace("%i", str(self.parent_child_index(parent)))
    legend_html = content_tag("legend", content_tag("span", legend)) if not is_blank(str(legend)) else ""

    if block is not None:
      contents = _call_block(block, self)

    attrs = {k: v for k, v in html_options.items() if k not in FIELDSET_INTERNAL_OPTIONS}
    return content_tag(
      "fieldset",
      mark_safe(conditional_escape(legend_html) + content_tag("ol", _as_markup(contents))),
      attrs,
    )

  def inputs_for_nested_attributes(self, args, options, block=None) -> SafeString:
    """
    inputs(for_=...): render inputs() inside a nested builder for an
    association (or each object of a to-many association).
    """
    options = dict(options)
    target = options.pop("for")
    for_options = dict(options.pop("for_options", None) or {})
    options["parent"] = {"builder": self, "for": target}

    if block is not None and _block_arity(block) == 0:
      raise NestedInputsConfigurationError(
        "You gave the for_ option with a block to inputs(), "
        "but the block does not accept any argument."
      )

    def fields_for_block(f):
      if block is not None:
        return f.inputs(*args, block=lambda: block(f), **options)
      return f.inputs(*args, **options)

    target_args = list(target) if isinstance(target, (list, tuple)) else [target]
    return self.semantic_fields_for(*target_args, block=fields_for_block, **for_options)

  # --------------------------------------------------
  # Nested builders
  # --------------------------------------------------
  def _association_value(self, name):
    reflection = self.reflection_for(name)
    if reflection is not None and reflection.is_collection and getattr(self.object, "pk", None) is None:
      return []
    accessor = reflection.accessor if reflection is not None else name
    value = getattr(self.object, accessor, None)
    if value is not None and hasattr(value, "all") and callable(value.all) and not hasattr(value, "_meta"):
      return list(value.all())
    return value

  def child_builder(self, name, obj, index=None, **options) -> "SemanticFormBuilder":
    builder_class = options.pop("builder", None) or type(self)
    prefix = f"{self.prefix}-{name}" if self.prefix else str(name)
    object_name = f"{self.object_name}_{name}" if self.object_name else str(name)
    if index is not None:
      prefix = f"{prefix}-{index}"
      object_name = f"{object_name}_{index}"
    return builder_class(
      object_name,
      obj,
      prefix=options.pop("prefix", prefix),
      data=self.data,
      errors=options.pop("errors", None),
      model=options.pop("model", None),
      config=self.config,
      introspector=self.introspector,
      parent=self,
      auto_id=self.auto_id,
    )

  def semantic_fields_for(self, record_name, record_object=None, *, block: Callable, **options) -> SafeString:
    """
    Run `block(builder)` with a builder bound to an associated object.

    record_name is the association name ("author"); record_object defaults
    to that association on the current object. A model instance can be
    passed instead of a name. To-many associations (lists, querysets,
    related managers) call the block once per object.
    """
    if not isinstance(record_name, str):
      record_object = record_name
      record_name = _record_name(record_object)
    if record_object is None and self.object is not None:
      record_object = self._association_value(record_name)

    if _is_collection(record_object):
      objects = list(record_object.all()) if hasattr(record_object, "all") else list(record_object)
      log.debug("Rendering %d nested %r builders for %r", len(objects), record_name, self.object_name)
      outputs = []
      for index, child in enumerate(objects):
        self.nested_child_index[record_name] = index
        builder = self.child_builder(record_name, child, index=index, **dict(options))
        outputs.append(_as_markup(block(builder)))
      self.nested_child_index.pop(record_name, None)
      return join_markup(outputs)

    builder = self.child_builder(record_name, record_object, **dict(options))
    return _as_markup(block(builder))


def semantic_form_for(record, **kwargs) -> SemanticFormBuilder:
  """
  Builder for a model instance, a Django form, or a bare object name:

    semantic_form_for(post)
    semantic_form_for(post_form)
    semantic_form_for("search", obj=None)
  """
  if isinstance(record, str):
    obj = kwargs.pop("obj", None)
    return SemanticFormBuilder(record, obj, **kwargs)
  if hasattr(record, "is_bound") and hasattr(record, "fields"):
    return SemanticFormBuilder.for_form(record, kwargs.pop("object_name", None), **kwargs)
  return SemanticFormBuilder(kwargs.pop("object_name", None), record, **kwargs)
