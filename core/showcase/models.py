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
Demo models covering the column types and associations semantic forms
know how to render. Used by the test suite.
"""

from django.db import models

from semantic_forms.validation import ValidationReflectionMixin, validates_presence_of

STATUS_CHOICES = [
  ("draft", "Draft"),
  ("review", "In review"),
  ("published", "Published"),
]

# -------------------------------------------------------------------
# Author
# -------------------------------------------------------------------
class Author(models.Model):
  first_name = models.CharField(max_length=50)
  last_name = models.CharField(max_length=50, blank=True)
  email = models.EmailField()

  class Meta:
    ordering = ["first_name"]

  @property
  def full_name(self):
    return f"{self.first_name} {self.last_name}".strip()

  def __str__(self):
    return self.full_name

# -------------------------------------------------------------------
# Profile (has_one from Author)
# -------------------------------------------------------------------
class Profile(models.Model):
  author = models.OneToOneField(Author, on_delete=models.CASCADE, related_name="profile")
  bio = models.TextField(blank=True)
  homepage_url = models.URLField(blank=True)

  def __str__(self):
    return f"Profile of {self.author}"

# -------------------------------------------------------------------
# Category
# -------------------------------------------------------------------
class Category(models.Model):
  name = models.CharField(max_length=40, unique=True)

  class Meta:
    ordering = ["name"]
    verbose_name_plural = "Categories"

  def __str__(self):
    return self.name

# -------------------------------------------------------------------
# Post
# -------------------------------------------------------------------
class Post(ValidationReflectionMixin, models.Model):
  author = models.ForeignKey(Author, on_delete=models.CASCADE, related_name="posts")
  title = models.CharField(max_length=120)
  body = models.TextField(blank=True,
    help_text="Markdown is supported."
  )
  password = models.CharField(max_length=128, blank=True)
  contact_email = models.EmailField(blank=True)
  website = models.URLField(blank=True)
  phone = models.CharField(max_length=30, blank=True)
  time_zone = models.CharField(max_length=64, blank=True, default="UTC")
  status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="draft")
  rating = models.DecimalField(max_digits=3, decimal_places=1, null=True, blank=True)
  views = models.IntegerField(default=0)
  comments_count = models.IntegerField(default=0)
  published = models.BooleanField(default=False)
  published_on = models.DateField(null=True, blank=True)
  attachment = models.FileField(upload_to="attachments/", blank=True)
  categories = models.ManyToManyField(Category, blank=True, related_name="posts")
  created_at = models.DateTimeField(auto_now_add=True)
  updated_at = models.DateTimeField(auto_now=True)
  lock_version = models.IntegerField(default=0)

  # A published post needs a body.
  semantic_validations = [
    *validates_presence_of("body", if_="published"),
  ]

  class Meta:
    ordering = ["-id"]

  def __str__(self):
    return self.title

# -------------------------------------------------------------------
# Task
# -------------------------------------------------------------------
class Task(models.Model):
  post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name="tasks")
  title = models.CharField(max_length=80)
  done = models.BooleanField(default=False)

  class Meta:
    ordering = ["id"]

  def __str__(self):
    return self.title

# -------------------------------------------------------------------
# Note (date-stamped and versioned bookkeeping columns)
# -------------------------------------------------------------------
class Note(models.Model):
  subject = models.CharField(max_length=80)
  text = models.TextField(blank=True)
  created_on = models.DateField(auto_now_add=True)
  updated_on = models.DateField(auto_now=True)
  created_at = models.DateTimeField(auto_now_add=True)
  updated_at = models.DateTimeField(auto_now=True)
  version = models.PositiveIntegerField(default=1)
  lock_version = models.IntegerField(default=0)

  def __str__(self):
    return self.subject
