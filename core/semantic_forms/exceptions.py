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

from django.core.exceptions import ImproperlyConfigured


class SemanticFormError(Exception):
  """Base class for all errors raised while building semantic forms."""


class UnknownInputType(SemanticFormError, AttributeError):
  """Raised when an input style has no registered renderer."""

  def __init__(self, input_type):
    self.input_type = input_type
    super().__init__(f"No such input type: {input_type!r}")


class NestedInputsConfigurationError(SemanticFormError, ImproperlyConfigured):
  """
  Raised when inputs(for_=...) receives a block that cannot take the
  nested builder as its argument.
  """
