"""Tests for imgrouter.router - credential shape classification"""

import pytest

from imgrouter.models import Provider
from imgrouter.router import classify

UUID_KEY = "123e4567-e89b-12d3-a456-426614174000"


# =========================================================================
# classify - one pattern per provider
# =========================================================================


class TestClassify:

    def test_huggingface_prefix(self):
        assert classify("hf_abc") is Provider.HUGGINGFACE

    def test_modelscope_prefix(self):
        assert classify("ms-abc123") is Provider.MODELSCOPE

    def test_uuid_is_volcengine(self):
        assert classify(UUID_KEY) is Provider.VOLCENGINE

    def test_uppercase_uuid_is_volcengine(self):
        assert classify(UUID_KEY.upper()) is Provider.VOLCENGINE

    @pytest.mark.parametrize("length", [30, 45, 60])
    def test_alphanumeric_within_bounds_is_gitee(self, length):
        assert classify(("aB3" * 20)[:length]) is Provider.GITEE

    @pytest.mark.parametrize("length", [29, 61])
    def test_alphanumeric_outside_bounds_is_unknown(self, length):
        assert classify("k" * length) is Provider.UNKNOWN

    @pytest.mark.parametrize("credential", [
        "",
        None,
        "sk-1234567890",
        "abc def ghi jkl mno pqr stu vwx yz",
        "a" * 40 + "-",
        UUID_KEY + "\n",
        "123e4567e89b12d3a456426614174000-",
    ])
    def test_other_shapes_are_unknown(self, credential):
        assert classify(credential) is Provider.UNKNOWN


# =========================================================================
# classify - rule order
# =========================================================================


class TestClassifyOrder:

    def test_hf_prefix_checked_before_everything(self):
        assert classify("hf_" + UUID_KEY) is Provider.HUGGINGFACE

    def test_ms_prefix_checked_before_uuid(self):
        assert classify("ms-" + UUID_KEY) is Provider.MODELSCOPE

    def test_uuid_without_dashes_falls_through_to_gitee(self):
        assert classify(UUID_KEY.replace("-", "")) is Provider.GITEE

    def test_prefixes_are_case_sensitive(self):
        assert classify("HF_abc") is Provider.UNKNOWN
        assert classify("MS-abc") is Provider.UNKNOWN


# =========================================================================
# classify - routing event
# =========================================================================


class TestClassifyAudit:

    def test_logs_routing_with_short_prefix_only(self, audit_events):
        classify("hf_supersecretvalue")
        events = [e for e in audit_events() if e["event_type"] == "provider_routing"]
        assert len(events) == 1
        assert events[0]["provider"] == "HuggingFace"
        assert events[0]["key_prefix"] == "hf_s"
        assert "supersecretvalue" not in str(events[0])

    def test_empty_credential_logs_nothing(self, audit_events):
        classify("")
        assert audit_events() == []
