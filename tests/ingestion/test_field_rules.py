"""
Tests for form-style field rules.
"""

import re

from payout_ingestion.domain.validators import (
    DISBURSEMENT_FORM_RULES,
    RECEIVER_CONTACT_RULES,
    FieldRule,
    max_length_rule,
    min_length_rule,
    positive_amount_rule,
    required_rule,
    stellar_address_rule,
    url_rule,
    validate_fields,
    validate_value,
)


class TestValidateValue:
    def test_required(self):
        assert validate_value("", required_rule()) == ["This field is required"]
        assert validate_value(None, required_rule("Name needed")) == ["Name needed"]
        assert validate_value("x", required_rule()) == []

    def test_optional_empty_passes(self):
        assert validate_value(None, min_length_rule(3)) == []
        assert validate_value("", url_rule()) == []

    def test_lengths(self):
        assert validate_value("ab", min_length_rule(3)) == ["Minimum length is 3 characters"]
        assert validate_value("abcd", max_length_rule(3)) == ["Maximum length is 3 characters"]

    def test_pattern(self):
        rule = FieldRule(pattern=re.compile(r"^\d+$"))
        assert validate_value("12a", rule) == ["Invalid format"]

    def test_check_returning_message(self):
        rule = FieldRule(check=lambda v: "too odd" if v % 2 else True)
        assert validate_value(3, rule) == ["too odd"]
        assert validate_value(4, rule) == []

    def test_positive_amount(self):
        assert validate_value("0", positive_amount_rule()) == ["Amount must be a positive number"]
        assert validate_value("abc", positive_amount_rule()) == ["Amount must be a positive number"]
        assert validate_value("0.01", positive_amount_rule()) == []

    def test_stellar_address(self, valid_address):
        assert validate_value(valid_address, stellar_address_rule()) == []
        assert validate_value("GABC", stellar_address_rule()) == ["Invalid Stellar address format"]

    def test_url(self):
        assert validate_value("https://example.org/hook", url_rule()) == []
        assert validate_value("ftp://example.org", url_rule()) == ["Invalid URL format"]


class TestValidateFields:
    def test_messages_prefixed_with_field(self):
        result = validate_fields({"name": "", "amount": "-1"}, DISBURSEMENT_FORM_RULES)
        assert not result
        assert result.messages == (
            "name: Disbursement name is required",
            "amount: Amount must be a positive number",
        )
        assert {e.code for e in result.errors} == {"FIELD_RULE_VIOLATION"}

    def test_description_too_long(self):
        result = validate_fields({"name": "Run", "amount": "1", "description": "x" * 501}, DISBURSEMENT_FORM_RULES)
        assert result.messages == ("description: Description too long",)

    def test_valid_form(self):
        assert validate_fields({"name": "Run", "amount": "10"}, DISBURSEMENT_FORM_RULES).is_valid

    def test_contact_rules(self):
        result = validate_fields({"email": "not-an-email", "phone_number": "+1 (555) 000-1111"}, RECEIVER_CONTACT_RULES)
        assert result.messages == ("email: Invalid email format",)

    def test_multiple_rules_per_field(self):
        rules = {"code": [required_rule(), max_length_rule(4)]}
        assert validate_fields({"code": "ABCDE"}, rules).messages == ("code: Maximum length is 4 characters",)
