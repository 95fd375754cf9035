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

"""
Template tags for semantic forms.

  {% load semantic_form_tags %}
  {% semantic_form_for post as f %}
  {% semantic_inputs f "title" "body" name="Details" %}
  {% semantic_input f "email" as="email" hint="We never share it" %}
  {% semantic_fieldset f name="Advanced" %}
    {% semantic_input f "published" %}
  {% end_semantic_fieldset %}
  {% semantic_fieldset f for="author" as author_form %}
    {% semantic_input author_form "first_name" %}
  {% end_semantic_fieldset %}
"""

from django import template
from django.template.base import token_kwargs

from semantic_forms.builder import semantic_form_for as build_form

register = template.Library()


@register.simple_tag
def semantic_form_for(record, **kwargs):
  """Builder for a model instance, a Django form or an object name."""
  return build_form(record, **kwargs)


@register.simple_tag
def semantic_input(builder, method, **options):
  return builder.input(method, **options)


@register.simple_tag
def semantic_inputs(builder, *fields, **options):
  return builder.inputs(*fields, **options)


@register.simple_tag
def semantic_errors(builder, method, **options):
  return builder.errors_on(method, **options) or ""


@register.filter
def input_type(builder, method):
  """Inferred input style of a field: {{ f|input_type:"email" }}."""
  return builder.default_input_type(method)


class SemanticFieldsetNode(template.Node):
  def __init__(self, builder, args, kwargs, nodelist, as_var=None):
    self.builder = builder
    self.args = args
    self.kwargs = kwargs
    self.nodelist = nodelist
    self.as_var = as_var

  def render(self, context):
    builder = self.builder.resolve(context)
    args = [a.resolve(context) for a in self.args]
    kwargs = {k: v.resolve(context) for k, v in self.kwargs.items()}

    if self.as_var:
      def block(f):
        with context.push(**{self.as_var: f}):
          return self.nodelist.render(context)
    else:
      def block():
        return self.nodelist.render(context)

    return builder.inputs(*args, block=block, **kwargs)


@register.tag("semantic_fieldset")
def do_semantic_fieldset(parser, token):
  """
  {% semantic_fieldset builder [title] [key=value ...] [as var] %} ... {% end_semantic_fieldset %}

  With for="association" the block is rendered once per nested builder,
  which is available as `var`.
  """
  bits = token.split_contents()
  tag_name = bits.pop(0)
  if not bits:
    raise template.TemplateSyntaxError(f"'{tag_name}' requires a form builder argument")
  builder = parser.compile_filter(bits.pop(0))

  as_var = None
  if len(bits) >= 2 and bits[-2] == "as":
    as_var = bits[-1]
    bits = bits[:-2]

  args, kwargs = [], {}
  for bit in bits:
    kwarg = token_kwargs([bit], parser)
    if kwarg:
      kwargs.update(kwarg)
    else:
      args.append(parser.compile_filter(bit))

  nodelist = parser.parse(("end_semantic_fieldset",))
  parser.delete_first_token()
  return SemanticFieldsetNode(builder, args, kwargs, nodelist, as_var)
