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

from django.utils.translation import gettext_lazy

from semantic_forms.config import FormConfig
from semantic_forms.i18n import HINT, LABEL, TITLE, humanize, localized_string

I18N = {
  "labels.post.title": "Headline",
  "labels.title": "Title (global)",
  "hints.body": "Markdown is fine",
  "titles.advanced": "Advanced options",
}


def test_humanize():
  assert humanize("first_name") == "First name"
  assert humanize("author_id") == "Author"


def test_text_values_are_returned_as_is():
  config = FormConfig(i18n=I18N)
  assert localized_string("title", "Custom", LABEL, config, "post") == "Custom"
  lazy = gettext_lazy("Lazy")
  assert localized_string("title", lazy, LABEL, config, "post") is lazy


def test_false_disables_lookup():
  config = FormConfig(i18n=I18N, i18n_lookups_by_default=True)
  assert localized_string("title", False, LABEL, config, "post") is None


def test_lookup_is_scoped_to_object_name_first():
  config = FormConfig(i18n=I18N)
  assert localized_string("title", True, LABEL, config, "post") == "Headline"
  assert localized_string("title", True, LABEL, config, "comment") == "Title (global)"
  assert localized_string("body", True, HINT, config) == "Markdown is fine"
  assert localized_string("advanced", True, TITLE, config) == "Advanced options"


def test_lookups_only_when_enabled():
  assert localized_string("title", None, LABEL, FormConfig(i18n=I18N), "post") is None
  enabled = FormConfig(i18n=I18N, i18n_lookups_by_default=True)
  assert localized_string("title", None, LABEL, enabled, "post") == "Headline"


def test_missing_key():
  assert localized_string("nope", True, LABEL, FormConfig(i18n=I18N)) is None
