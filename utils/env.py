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

import os, json
from typing import Callable, List, Optional, Sequence

TRUTHY = ("1", "true", "yes", "on")
FALSY = ("0", "false", "no", "off")

def env_str(key: str, default: Optional[str] = None) -> Optional[str]:
  """Get env var as string with default."""
  val = os.getenv(key)
  return val if val not in (None, "") else default

def env_bool(key: str, default: Optional[bool] = None) -> Optional[bool]:
  """
  Get env var as boolean.

  Unset or unrecognized values return `default`, so callers can tell
  "not configured" apart from an explicit false.
  """
  val = os.getenv(key)
  if val is None:
    return default
  val = val.strip().lower()
  if val in TRUTHY:
    return True
  if val in FALSY:
    return False
  return default

def env_choice(key: str, choices: Sequence[str], default: Optional[str] = None) -> Optional[str]:
  """Get env var restricted to `choices` (case-insensitive), else default."""
  val = env_str(key)
  if val is None:
    return default
  val = val.strip().lower()
  return val if val in choices else default

def env_list(key: str, default: Optional[List[str]] = None, sep: str = ",") -> Optional[List[str]]:
  """Get comma-separated list env var; None means unset when no default is given."""
  val = os.getenv(key)
  if not val:
    return default
  return [x.strip() for x in val.split(sep) if x.strip()]

def env_json(key: str, default, transform: Optional[Callable] = None):
  """Get env var parsed as JSON."""
  val = os.getenv(key)
  if not val:
    return default
  try:
    data = json.loads(val)
    return transform(data) if transform else data
  except json.JSONDecodeError:
    return default
