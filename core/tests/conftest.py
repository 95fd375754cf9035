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

import datetime

import pytest

from semantic_forms.builder import SemanticFormBuilder
from semantic_forms.config import FormConfig
from showcase.models import Author, Category, Post, Task


@pytest.fixture(autouse=True)
def clean_semantic_forms_env(monkeypatch):
  """Environment overrides must not leak into the tests."""
  for key in (
    "SEMANTIC_FORMS_ALL_FIELDS_REQUIRED",
    "SEMANTIC_FORMS_I18N_LOOKUPS",
    "SEMANTIC_FORMS_INLINE_ERRORS",
    "SEMANTIC_FORMS_PRIORITY_COUNTRIES",
    "SEMANTIC_FORMS_PRIORITY_TIME_ZONES",
    "SEMANTIC_FORMS_I18N",
  ):
    monkeypatch.delenv(key, raising=False)
  yield


@pytest.fixture
def config():
  """Default configuration, independent of settings.SEMANTIC_FORMS."""
  return FormConfig()


# -------------------------------------------------------------------
# Unsaved objects (no database access)
# -------------------------------------------------------------------
@pytest.fixture
def new_post():
  return Post(
    title="Hello",
    body="",
    status="draft",
    views=3,
    published_on=datetime.date(2024, 5, 1),
  )


@pytest.fixture
def form(new_post, config):
  """Builder for an unsaved post."""
  return SemanticFormBuilder("post", new_post, config=config)


# -------------------------------------------------------------------
# Saved objects
# -------------------------------------------------------------------
@pytest.fixture
def author(db):
  return Author.objects.create(first_name="Ada", last_name="Lovelace", email="ada@example.com")


@pytest.fixture
def other_author(db):
  return Author.objects.create(first_name="Grace", last_name="Hopper", email="grace@example.com")


@pytest.fixture
def categories(db):
  return [
    Category.objects.create(name="Django"),
    Category.objects.create(name="Python"),
  ]


@pytest.fixture
def post(db, author, categories):
  post = Post.objects.create(author=author, title="Hello", status="review", views=7)
  post.categories.set(categories[:1])
  return post


@pytest.fixture
def tasks(db, post):
  return [
    Task.objects.create(post=post, title="Write intro"),
    Task.objects.create(post=post, title="Proofread", done=True),
  ]


@pytest.fixture
def post_form(post, config):
  """Builder for a saved post with author and categories."""
  return SemanticFormBuilder("post", post, config=config)
