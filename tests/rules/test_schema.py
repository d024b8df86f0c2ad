"""
Tests for Rule and Recipe Schemas.
"""

import pytest
from pydantic import ValidationError

from api_migrator.rules.schema import CoalesceRule, KeyRenameRule, Recipe


def test_derived_names(env_rule):
  assert env_rule.deprecated_type == "boot.test.util.EnvironmentTestUtils"
  assert env_rule.replacement_module == "boot.test.util"
  assert env_rule.replacement_name == "TestPropertyValues"


def test_template_for_sizes(env_rule):
  assert env_rule.template_for(1) == "TestPropertyValues.of(#{}).apply_to(#{})"
  assert env_rule.template_for(3) == "TestPropertyValues.of(#{}).and_(#{}).and_(#{}).apply_to(#{})"

  with pytest.raises(ValueError):
    env_rule.template_for(0)


def test_custom_method_names():
  rule = CoalesceRule(
    name="custom",
    deprecated_call="a.B.c",
    replacement_type="a.Fluent",
    first_method="start",
    chain_method="also",
    apply_method="into",
  )
  assert rule.template_for(2) == "Fluent.start(#{}).also(#{}).into(#{})"


@pytest.mark.parametrize("method", ["and", "not valid", ""])
def test_invalid_method_names_are_rejected(method):
  with pytest.raises(ValidationError):
    CoalesceRule(name="r", deprecated_call="a.B.c", replacement_type="a.T", chain_method=method)


@pytest.mark.parametrize("path", ["single", "a..b", "a.1b"])
def test_invalid_dotted_paths_are_rejected(path):
  with pytest.raises(ValidationError):
    CoalesceRule(name="r", deprecated_call=path, replacement_type="a.T")


def test_literal_rename_covers_dotted_children():
  rule = KeyRenameRule(name="r", old_key="spring.artemis.host", new_key="spring.artemis.broker-url")

  assert rule.matches("spring.artemis.host")
  assert rule.rewrite("spring.artemis.host") == "spring.artemis.broker-url"
  assert rule.rewrite("spring.artemis.host.extra") == "spring.artemis.broker-url.extra"
  assert not rule.matches("spring.artemis.hostname")
  assert rule.rewrite("spring.artemis.hostname") == "spring.artemis.hostname"


def test_regex_rename_moves_identity_provider():
  rule = KeyRenameRule(
    name="saml",
    pattern=r"(spring\.security\.saml2\.relyingparty\.registration\..*)(\.identityprovider)(.*)",
    replacement=r"\1.assertingparty\3",
  )
  key = "spring.security.saml2.relyingparty.registration.okta.identityprovider.sso-url"

  assert rule.matches(key)
  assert rule.rewrite(key) == "spring.security.saml2.relyingparty.registration.okta.assertingparty.sso-url"
  assert not rule.matches("spring.security.saml2.relyingparty.registration.okta.signing")


def test_rename_rule_needs_exactly_one_mode():
  with pytest.raises(ValidationError):
    KeyRenameRule(name="none")
  with pytest.raises(ValidationError):
    KeyRenameRule(name="both", old_key="a", new_key="b", pattern="a", replacement="b")
  with pytest.raises(ValidationError):
    KeyRenameRule(name="half", old_key="a")
  with pytest.raises(ValidationError):
    KeyRenameRule(name="bad", pattern="(", replacement="x")


def test_recipe_defaults():
  recipe = Recipe(name="r")
  assert recipe.include == []
  assert recipe.coalesce == []
  assert recipe.rename_keys == []
