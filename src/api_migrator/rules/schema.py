"""
Rule and Recipe Schemas.

Pydantic models describing what a migration does:

- :class:`CoalesceRule` collapses runs of calls to a deprecated function into a
  single fluent call on a replacement type.
- :class:`KeyRenameRule` renames configuration keys by literal prefix or regex.
- :class:`Recipe` groups rules and may include other recipes.
"""

import keyword
import re
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

PLACEHOLDER = "#{}"


class CoalesceRule(BaseModel):
  """
  Coalesces consecutive calls sharing a context argument.

  ``deprecated_call`` is matched against the fully-qualified name of the callee,
  so ``from testkit.env import EnvironmentTestUtils`` followed by
  ``EnvironmentTestUtils.add_environment(ctx, "a=1")`` matches
  ``testkit.env.EnvironmentTestUtils.add_environment``.
  """

  name: str = Field(..., description="Unique rule identifier.")
  description: str = Field("", description="Human-readable summary.")
  deprecated_call: str = Field(..., description="Fully-qualified name of the deprecated function.")
  replacement_type: str = Field(..., description="Fully-qualified name of the fluent replacement type.")
  first_method: str = Field("of", description="Factory method taking the first value.")
  chain_method: str = Field("and_", description="Method appending each further value.")
  apply_method: str = Field("apply_to", description="Terminal method receiving the context.")

  @field_validator("deprecated_call", "replacement_type")
  @classmethod
  def validate_dotted(cls, v: str) -> str:
    """
    Requires a dotted path with at least a module and a name.

    Args:
        v (str): Raw value.

    Returns:
        str: The stripped value.

    Raises:
        ValueError: If the value is not of the form ``module.Name``.
    """
    v = v.strip()
    parts = v.split(".")
    if len(parts) < 2 or not all(p.isidentifier() for p in parts):
      raise ValueError(f"Expected a dotted path like 'package.Name', got '{v}'")
    return v

  @field_validator("first_method", "chain_method", "apply_method")
  @classmethod
  def validate_method(cls, v: str) -> str:
    """Method names must be plain identifiers (``and`` is a keyword, hence ``and_``)."""
    if not v.isidentifier() or keyword.iskeyword(v):
      raise ValueError(f"'{v}' is not a valid method name")
    return v

  @property
  def deprecated_type(self) -> str:
    """Fully-qualified name of the type defining the deprecated function."""
    return self.deprecated_call.rsplit(".", 1)[0]

  @property
  def replacement_module(self) -> str:
    return self.replacement_type.rsplit(".", 1)[0]

  @property
  def replacement_name(self) -> str:
    return self.replacement_type.rsplit(".", 1)[1]

  def template_for(self, size: int) -> str:
    """
    Builds the replacement template for a batch.

    Args:
        size (int): Number of coalesced calls (>= 1).

    Returns:
        str: e.g. ``TestPropertyValues.of(#{}).and_(#{}).apply_to(#{})`` for size 2.
    """
    if size < 1:
      raise ValueError("A batch holds at least one call")
    parts = [f"{self.replacement_name}.{self.first_method}({PLACEHOLDER})"]
    parts.extend(f".{self.chain_method}({PLACEHOLDER})" for _ in range(size - 1))
    parts.append(f".{self.apply_method}({PLACEHOLDER})")
    return "".join(parts)


class KeyRenameRule(BaseModel):
  """
  Renames configuration keys.

  Either ``old_key``/``new_key`` (literal; also renames keys that have the old
  key as a dotted prefix) or ``pattern``/``replacement`` (a regex that must match
  the whole key, with ``\\1``-style group references in the replacement).
  """

  name: str = Field(..., description="Unique rule identifier.")
  description: str = Field("", description="Human-readable summary.")
  old_key: Optional[str] = Field(None, description="Literal key to rename.")
  new_key: Optional[str] = Field(None, description="Literal replacement key.")
  pattern: Optional[str] = Field(None, description="Regex matched against the whole key.")
  replacement: Optional[str] = Field(None, description="Regex replacement template.")

  @model_validator(mode="after")
  def validate_mode(self) -> "KeyRenameRule":
    literal = self.old_key is not None or self.new_key is not None
    regex = self.pattern is not None or self.replacement is not None
    if literal == regex:
      raise ValueError(f"Rule '{self.name}' must define either old_key/new_key or pattern/replacement")
    if literal and (not self.old_key or not self.new_key):
      raise ValueError(f"Rule '{self.name}' needs both old_key and new_key")
    if regex:
      if not self.pattern or self.replacement is None:
        raise ValueError(f"Rule '{self.name}' needs both pattern and replacement")
      try:
        re.compile(self.pattern)
      except re.error as e:
        raise ValueError(f"Rule '{self.name}' has an invalid pattern: {e}")
    return self

  def matches(self, key: str) -> bool:
    if self.pattern is not None:
      return re.fullmatch(self.pattern, key) is not None
    return key == self.old_key or key.startswith(f"{self.old_key}.")

  def rewrite(self, key: str) -> str:
    """
    Returns the renamed key, or the key unchanged if the rule does not apply.
    """
    if not self.matches(key):
      return key
    if self.pattern is not None:
      return re.sub(f"^(?:{self.pattern})$", self.replacement or "", key)
    return f"{self.new_key}{key[len(self.old_key or ''):]}"


class Recipe(BaseModel):
  """
  A named, ordered set of rules.

  Recipes listed in ``include`` run before this recipe's own rules.
  """

  name: str = Field(..., description="Unique recipe identifier.")
  display_name: str = Field("", description="Short title for listings.")
  description: str = Field("", description="What the recipe migrates.")
  include: List[str] = Field(default_factory=list, description="Recipes applied first, in order.")
  coalesce: List[CoalesceRule] = Field(default_factory=list, description="Call coalescing rules.")
  rename_keys: List[KeyRenameRule] = Field(default_factory=list, description="Configuration key renames.")
