"""Tests for ListKitConfig validation."""

from __future__ import annotations

import pytest

from listkit.config import UNRESOLVED_KIND_POLICIES, ListKitConfig


class TestDefaults:
    def test_defaults(self):
        config = ListKitConfig()
        assert config.unresolved_kind_policy == "raise"
        assert config.verify_baseline is True
        assert config.coalesce_updates is True
        assert config.enforce_affinity is True
        assert config.metrics is None
        assert config.debug_dump_diff is False

    def test_policies(self):
        assert UNRESOLVED_KIND_POLICIES == ("raise", "placeholder")


class TestValidation:
    @pytest.mark.parametrize("policy", UNRESOLVED_KIND_POLICIES)
    def test_valid_policies_accepted(self, policy):
        assert ListKitConfig(unresolved_kind_policy=policy).unresolved_kind_policy == policy

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError, match="unresolved_kind_policy"):
            ListKitConfig(unresolved_kind_policy="ignore")  # type: ignore[arg-type]

    def test_metrics_hook_missing_methods_rejected(self):
        class HalfHook:
            def increment(self, name, value=1, tags=None):
                pass

        with pytest.raises(ValueError, match="timing, gauge"):
            ListKitConfig(metrics=HalfHook())

    def test_metrics_hook_accepted(self, metrics):
        assert ListKitConfig(metrics=metrics).metrics is metrics
