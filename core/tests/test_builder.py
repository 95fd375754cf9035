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

from types import SimpleNamespace

import pytest
from django import forms
from django.core.exceptions import ImproperlyConfigured, ValidationError

from semantic_forms.builder import SemanticFormBuilder, semantic_form_for
from semantic_forms.config import FormConfig
from showcase.models import Post

ERRORS = {"title": ["is required", "is too short"]}


@pytest.fixture
def failing_form(new_post, config):
  """Builder with validation errors on title."""
  return SemanticFormBuilder("post", new_post, errors=ERRORS, config=config)


# -------------------------------------------------------------------
# Wrapper, requiredness, input style
# -------------------------------------------------------------------
def test_wrapper_item(form):
  html = form.input("title")
  assert html.startswith('<li class="string required" id="post_title_input">')
  assert html.endswith("</li>")


def test_explicit_required_wins(form):
  html = form.input("title", required=False)
  assert 'class="string optional"' in html
  assert "<abbr" not in html
  assert 'class="text required"' in form.input("body", required=True)


def test_required_follows_conditional_validation(form):
  assert 'class="text optional"' in form.input("body")
  form.object.published = True
  assert 'class="text required"' in form.input("body")


def test_explicit_input_style_wins(form):
  assert 'class="text required"' in form.input("title", as_="text")
  assert 'class="text required"' in form.input("title", **{"as": "text"})


def test_virtual_attributes_use_default_requiredness():
  assert 'class="string required"' in SemanticFormBuilder("search", config=FormConfig()).input("query")
  relaxed = FormConfig(all_fields_required_by_default=False)
  assert 'class="string optional"' in SemanticFormBuilder("search", config=relaxed).input("query")


def test_wrapper_html(form):
  html = form.input("title", wrapper_html={"class": "wide", "id": "headline-item"})
  assert 'class="string required wide"' in html
  assert 'id="headline-item"' in html
  assert "post_title_input" not in html


def test_output_is_deterministic(form):
  assert form.input("title", hint="Short") == form.input("title", hint="Short")
  assert form.inputs("title", "body") == form.inputs("title", "body")


# -------------------------------------------------------------------
# Labels
# -------------------------------------------------------------------
def test_label_disabled(form):
  assert "<label" not in form.input("title", label=False)


def test_label_text_is_escaped(form):
  assert ">&lt;b&gt;Head&lt;/b&gt;<abbr" in form.input("title", label="<b>Head</b>")


def test_label_escaping_can_be_disabled(new_post):
  f = SemanticFormBuilder("post", new_post, config=FormConfig(escape_html_entities_in_hints_and_labels=False))
  assert "><b>Head</b><abbr" in f.input("title", label="<b>Head</b>")


def test_label_html(form):
  assert '<label class="big" for="id_title">' in form.input("title", label_html={"class": "big"})


def test_label_follows_input_html_id(form):
  input_html = {"id": "headline", "value": "Preset"}
  html = form.input("title", input_html=input_html)
  assert '<label for="headline">' in html
  assert 'value="Preset" id="headline"' in html
  assert input_html == {"id": "headline", "value": "Preset"}


def test_label_from_i18n_lookup(new_post):
  config = FormConfig(i18n={"labels.post.title": "Headline"}, i18n_lookups_by_default=True)
  assert ">Headline<abbr" in SemanticFormBuilder("post", new_post, config=config).input("title")


def test_label_from_verbose_name_of_relation(form):
  assert form.humanized_attribute_name("author") == "Author"
  assert form.humanized_attribute_name("contact_email") == "Contact email"
  assert form.humanized_attribute_name("nickname") == "Nickname"


# -------------------------------------------------------------------
# Hints
# -------------------------------------------------------------------
def test_explicit_hint(form):
  html = form.input("contact_email", hint="We never share it")
  assert '<p class="inline-hints">We never share it</p>' in html
  assert '<p class="tip">We never share it</p>' in form.input("contact_email", hint="We never share it", hint_class="tip")


def test_hint_from_help_text(form):
  assert '<p class="inline-hints">Markdown is supported.</p>' in form.input("body")
  assert "inline-hints" not in form.input("body", hint=False)


def test_hint_from_i18n_lookup(new_post):
  config = FormConfig(i18n={"hints.title": "Keep it short"})
  html = SemanticFormBuilder("post", new_post, config=config).input("title", hint=True)
  assert '<p class="inline-hints">Keep it short</p>' in html


def test_blank_hint_is_omitted(form):
  assert "inline-hints" not in form.input("title", hint="   ")


def test_hints_are_escaped(form):
  assert "&lt;em&gt;" in form.input("title", hint="<em>x</em>")


# -------------------------------------------------------------------
# Inline errors
# -------------------------------------------------------------------
def test_errors_mark_the_wrapper(failing_form):
  assert 'class="string required error"' in failing_form.input("title")
  assert 'class="text optional"' in failing_form.input("body")


def test_error_sentence(failing_form):
  assert '<p class="inline-errors">is required and is too short</p>' in failing_form.input("title")


def test_error_sentence_with_serial_comma(new_post, config):
  errors = {"title": ["is required", "is too short", "is taken"]}
  f = SemanticFormBuilder("post", new_post, errors=errors, config=config)
  assert '<p class="inline-errors">is required, is too short, and is taken</p>' in f.input("title")


def test_error_list(new_post):
  f = SemanticFormBuilder("post", new_post, errors=ERRORS, config=FormConfig(inline_errors="list"))
  assert '<ul class="errors"><li>is required</li>\n<li>is too short</li></ul>' in f.input("title")


def test_error_first(new_post):
  f = SemanticFormBuilder("post", new_post, errors=ERRORS, config=FormConfig(inline_errors="first"))
  html = f.input("title")
  assert '<p class="inline-errors">is required</p>' in html
  assert "too short" not in html


def test_error_mode_none(new_post):
  f = SemanticFormBuilder("post", new_post, errors=ERRORS, config=FormConfig(inline_errors="none"))
  html = f.input("title")
  assert "is required" not in html
  assert f.errors_on("title") is None


def test_error_class_option(failing_form):
  assert '<p class="oops">' in failing_form.input("title", error_class="oops")


def test_error_messages_are_escaped(new_post, config):
  f = SemanticFormBuilder("post", new_post, errors={"title": ["<script>"]}, config=config)
  assert "&lt;script&gt;" in f.input("title")


def test_errors_on(failing_form):
  assert failing_form.errors_on("title") == '<p class="inline-errors">is required and is too short</p>'
  assert failing_form.errors_on("body") is None


def test_errors_for_foreign_key_columns(new_post, config):
  f = SemanticFormBuilder("post", new_post, errors={"author": ["pick one"], "status": ["bad"]}, config=config)
  assert f.error_keys("author_id") == ["author_id", "author"]
  assert f.errors_for("author_id") == ["pick one"]
  assert not f.has_errors("title")


def test_errors_on_attname_show_on_association(new_post, config):
  f = SemanticFormBuilder("post", new_post, errors={"author_id": ["pick one"]}, config=config)
  assert f.error_keys("author") == ["author", "author_id"]
  assert f.has_errors("author")


def test_duplicate_messages_are_collapsed(new_post, config):
  f = SemanticFormBuilder("post", new_post, errors={"author": ["pick one"], "author_id": ["pick one"]}, config=config)
  assert f.errors_for("author") == ["pick one"]


def test_errors_from_validation_error(new_post, config):
  f = SemanticFormBuilder("post", new_post, errors=ValidationError({"title": ["bad title"]}), config=config)
  assert f.errors_for("title") == ["bad title"]
  g = SemanticFormBuilder("post", new_post, errors=ValidationError("broken"), config=config)
  assert g.errors == {"__all__": ["broken"]}


def test_errors_from_object(config):
  record = SimpleNamespace(name="", errors={"name": ["can not be empty"]})
  assert "can not be empty" in SemanticFormBuilder("record", record, config=config).input("name")


def test_hidden_inputs_skip_hints_and_errors(failing_form):
  html = failing_form.input("title", as_="hidden", hint="Ignored")
  assert "inline-errors" not in html
  assert "Ignored" not in html


def test_custom_inline_order(new_post):
  config = FormConfig(custom_inline_order={"string": ("errors", "input")})
  html = SemanticFormBuilder("post", new_post, errors=ERRORS, config=config).input("title")
  assert html.index("inline-errors") < html.index("<input")


def test_unknown_inline_part(new_post):
  f = SemanticFormBuilder("post", new_post, config=FormConfig(inline_order=("input", "tooltip")))
  with pytest.raises(ImproperlyConfigured, match="tooltip"):
    f.input("title")


# -------------------------------------------------------------------
# Names, ids, values
# -------------------------------------------------------------------
def test_prefixed_names_and_ids(new_post, config):
  f = SemanticFormBuilder("post", new_post, prefix="p", config=config)
  html = f.input("title")
  assert 'name="p-title"' in html
  assert 'id="id_p-title"' in html
  assert '<label for="id_p-title">' in html
  assert 'id="post_title_input"' in html


def test_submitted_data_wins_over_object(new_post, config):
  f = SemanticFormBuilder("post", new_post, data={"title": "Edited"}, config=config)
  assert 'value="Edited"' in f.input("title")


def test_generate_html_id():
  f = SemanticFormBuilder("post[author]", config=FormConfig())
  assert f.generate_html_id("name") == "post_author_name_input"
  assert f.generate_html_id("name", "label") == "post_author_name_label"
  assert SemanticFormBuilder(config=FormConfig()).generate_html_id("q") == "q_input"


def test_collection_values_of_unsaved_object(form):
  assert form.value_for("categories", multiple=True) == []


def test_default_object_name_from_model(new_post):
  assert SemanticFormBuilder(obj=new_post, config=FormConfig()).object_name == "post"


# -------------------------------------------------------------------
# Entry points
# -------------------------------------------------------------------
class PostForm(forms.ModelForm):
  class Meta:
    model = Post
    fields = ["title", "status", "author"]


@pytest.mark.django_db
def test_builder_for_bound_model_form():
  post_form = PostForm(data={"p-title": "", "p-status": "draft"}, prefix="p")
  f = semantic_form_for(post_form, config=FormConfig())
  assert f.object_name == "post"
  assert f.prefix == "p"

  html = f.input("title")
  assert 'name="p-title"' in html
  assert 'id="id_p-title"' in html
  assert 'class="string required error"' in html
  assert "This field is required." in html
  assert 'value="draft" selected' in f.input("status")


def test_builder_for_unbound_model_form(new_post):
  f = semantic_form_for(PostForm(instance=new_post), config=FormConfig())
  assert f.object is new_post
  assert f.errors == {}
  assert 'value="Hello"' in f.input("title")


def test_semantic_form_for_entry_points(new_post):
  assert semantic_form_for(new_post).object_name == "post"
  assert semantic_form_for(new_post, object_name="article").object_name == "article"
  virtual = semantic_form_for("search")
  assert virtual.object is None
  assert virtual.object_name == "search"
