"""
Tests for the built-in validators — pure logic over in-memory snapshots.

No subprocess, no network.
"""

from datetime import UTC, datetime, timedelta

import pytest
from conftest import make_pod, make_resource, write_config

from resource_validator.core.models import Exemption, IdentityEntry, Resource
from resource_validator.validators import (
    AllowedPodsValidator,
    FakeValidator,
    FreshnessValidator,
    PrivilegedPodsValidator,
    ReadinessValidator,
    ValidatorError,
)
from resource_validator.validators.privileged_pods import (
    ContainerKind,
    find_privileged_container,
    iter_containers,
    privileged_reason,
)
from resource_validator.validators.readiness import ReadinessUndetermined, is_resource_ready

_EXEMPT = {"resources.gardener.cloud/managed-by": "gardener"}
_NOW = datetime(2026, 6, 1, 12, 0, tzinfo=UTC)


# ═══════════════════════════════════════════════════════════════════
#  Allowed pods
# ═══════════════════════════════════════════════════════════════════


class TestAllowedPods:
    def test_name(self, config_dir):
        assert AllowedPodsValidator(config_dir).name == "built-in:allowed-pods"

    def test_pod_without_owners_violates(self, config_dir):
        pod = make_pod("rogue")
        violations, err = AllowedPodsValidator(config_dir).validate([pod])
        assert err is None
        assert len(violations) == 1
        assert violations[0].resource == pod
        assert violations[0].message == "NOT found in allowlist"
        assert violations[0].level == 1
        assert violations[0].validator_name == "built-in:allowed-pods"

    def test_allowed_via_owner_chain(self, config_dir):
        deployment = make_resource("Deployment", "web")
        rs = make_resource("ReplicaSet", "web-abc", owners=[("Deployment", "web")])
        pod = make_pod("web-abc-1", owners=[("ReplicaSet", "web-abc")])
        validator = AllowedPodsValidator(config_dir)

        violations, err = validator.validate([pod, rs, deployment])
        assert (violations, err) == ([], None)
        assert validator.allowed_pods == [pod]

    def test_directly_listed_pod(self, config_dir):
        violations, _ = AllowedPodsValidator(config_dir).validate([make_pod("standalone")])
        assert violations == []

    def test_exempt_pod_skipped(self, config_dir):
        pod = make_pod("rogue", labels=_EXEMPT)
        violations, err = AllowedPodsValidator(config_dir).validate([pod])
        assert (violations, err) == ([], None)

    def test_custom_exemption(self, config_dir):
        pod = make_pod("rogue", labels={"skip": "yes"})
        validator = AllowedPodsValidator(config_dir, exemption=Exemption(label_name="skip", label_value="yes"))
        assert validator.validate([pod]) == ([], None)

    def test_non_pods_ignored(self, config_dir):
        violations, _ = AllowedPodsValidator(config_dir).validate([make_resource("Deployment", "x")])
        assert violations == []

    def test_missing_allowlist_is_error(self, empty_config_dir):
        violations, err = AllowedPodsValidator(empty_config_dir).validate([make_pod("p")])
        assert violations == []
        assert isinstance(err, ValidatorError)
        assert err.validator_name == "built-in:allowed-pods"

    def test_allowlist_loaded_once(self, tmp_path):
        config_dir = write_config(tmp_path / "cfg", {"allowlist.yaml": "- {name: a, namespace: default, kind: Pod}\n"})
        validator = AllowedPodsValidator(config_dir)
        assert validator.validate([make_pod("a")]) == ([], None)

        (config_dir / "allowlist.yaml").unlink()
        assert validator.validate([make_pod("a")]) == ([], None)


# ═══════════════════════════════════════════════════════════════════
#  Readiness
# ═══════════════════════════════════════════════════════════════════


class TestIsResourceReady:
    def test_ready_condition(self):
        r = make_resource("Deployment", "web", status={"conditions": [{"type": "Ready", "status": "True"}]})
        assert is_resource_ready(r)

    def test_ready_condition_false(self):
        r = make_resource("Deployment", "web", status={"conditions": [{"type": "Ready", "status": "False"}]})
        assert not is_resource_ready(r)

    def test_ready_field(self):
        assert is_resource_ready(make_resource("Custom", "c", status={"ready": True}))
        assert not is_resource_ready(make_resource("Custom", "c", status={"ready": False}))

    def test_either_suffices(self):
        r = make_resource("Custom", "c", status={
            "conditions": [{"type": "Available", "status": "True"}], "ready": True,
        })
        assert is_resource_ready(r)

    def test_neither(self):
        assert not is_resource_ready(make_resource("Custom", "c", status={}))

    def test_malformed_conditions(self):
        with pytest.raises(ReadinessUndetermined):
            is_resource_ready(make_resource("Custom", "c", status={"conditions": "Ready"}))

    def test_malformed_ready(self):
        with pytest.raises(ReadinessUndetermined):
            is_resource_ready(make_resource("Custom", "c", status={"ready": "yes"}))


class TestReadinessValidator:
    def test_name(self, config_dir):
        assert ReadinessValidator(config_dir).name == "built-in:readiness"

    def test_ready_resource(self, config_dir):
        web = make_resource("Deployment", "web", status={"conditions": [{"type": "Ready", "status": "True"}]})
        assert ReadinessValidator(config_dir).validate([web]) == ([], None)

    def test_not_ready_resource(self, config_dir):
        web = make_resource("Deployment", "web", status={"ready": False})
        violations, err = ReadinessValidator(config_dir).validate([web])
        assert err is None
        assert [v.message for v in violations] == ["readiness violation"]
        assert violations[0].resource == web

    def test_missing_resource_reported(self, config_dir):
        violations, err = ReadinessValidator(config_dir).validate([])
        assert err is None
        assert len(violations) == 1
        assert violations[0].resource.identity == ("Deployment", "web", "default")

    def test_missing_resource_ignored(self, config_dir):
        validator = ReadinessValidator(config_dir, ignore_missing_resources=True)
        assert validator.validate([]) == ([], None)

    def test_malformed_status_skipped(self, config_dir):
        web = make_resource("Deployment", "web", status={"conditions": 42})
        assert ReadinessValidator(config_dir).validate([web]) == ([], None)

    def test_missing_list_is_error(self, empty_config_dir):
        violations, err = ReadinessValidator(empty_config_dir).validate([])
        assert violations == []
        assert isinstance(err, ValidatorError)


# ═══════════════════════════════════════════════════════════════════
#  Freshness
# ═══════════════════════════════════════════════════════════════════


class TestFreshness:
    def _validator(self, **kwargs):
        return FreshnessValidator(threshold=timedelta(hours=1), clock=lambda: _NOW, **kwargs)

    def test_name(self):
        assert FreshnessValidator().name == "built-in:freshness"

    def test_stale_pod(self):
        pod = make_pod("old", created=_NOW - timedelta(minutes=90))
        violations, err = self._validator().validate([pod])
        assert err is None
        assert [v.message for v in violations] == ["Pod is stale"]

    def test_fresh_pod(self):
        pod = make_pod("new", created=_NOW - timedelta(minutes=30))
        assert self._validator().validate([pod]) == ([], None)

    def test_exactly_at_threshold_is_fresh(self):
        pod = make_pod("edge", created=_NOW - timedelta(hours=1))
        assert self._validator().validate([pod]) == ([], None)

    def test_no_timestamp_is_fresh(self):
        assert self._validator().validate([make_pod("unknown")]) == ([], None)

    def test_naive_timestamp_treated_as_utc(self):
        naive = (_NOW - timedelta(hours=2)).replace(tzinfo=None)
        violations, _ = self._validator().validate([make_pod("naive", created=naive)])
        assert len(violations) == 1

    def test_exempt_pod(self):
        pod = make_pod("old", labels=_EXEMPT, created=_NOW - timedelta(days=30))
        assert self._validator().validate([pod]) == ([], None)

    def test_only_pods(self):
        deployment = Resource(kind="Deployment", name="d", creation_timestamp=_NOW - timedelta(days=30))
        assert self._validator().validate([deployment]) == ([], None)


# ═══════════════════════════════════════════════════════════════════
#  Privileged pods
# ═══════════════════════════════════════════════════════════════════


def _pod_with(security_context, kind="containers", **kwargs):
    return make_pod("p", spec={kind: [{"name": "c", "securityContext": security_context}]}, **kwargs)


class TestPrivilegedReason:
    @pytest.mark.parametrize("sc", [
        {"privileged": True},
        {"allowPrivilegeEscalation": True},
        {"procMount": "Unmasked"},
        {"capabilities": {"add": ["CAP_SYS_ADMIN"]}},
        {"capabilities": {"add": ["NET_BIND_SERVICE", "SYS_ADMIN"]}},
    ])
    def test_privileged(self, sc):
        assert privileged_reason(sc)

    @pytest.mark.parametrize("sc", [
        None,
        {},
        {"privileged": False},
        {"procMount": "Default"},
        {"capabilities": {"add": ["NET_ADMIN"]}},
        {"capabilities": {"drop": ["ALL"]}},
    ])
    def test_not_privileged(self, sc):
        assert privileged_reason(sc) == ""


class TestIterContainers:
    def test_order(self):
        pod = make_pod("p", spec={
            "ephemeralContainers": [{"name": "debug"}],
            "containers": [{"name": "app"}],
            "initContainers": [{"name": "init"}],
        })
        containers = iter_containers(pod)
        assert [(c.kind, c.name) for c in containers] == [
            (ContainerKind.INIT, "init"),
            (ContainerKind.REGULAR, "app"),
            (ContainerKind.EPHEMERAL, "debug"),
        ]

    def test_reason_names_container(self):
        pod = _pod_with({"privileged": True}, kind="initContainers")
        assert find_privileged_container(pod).startswith("initContainers/c:")


class TestPrivilegedPodsValidator:
    def test_name(self):
        assert PrivilegedPodsValidator().name == "built-in:privileged-pods"

    @pytest.mark.parametrize("kind", ["containers", "initContainers", "ephemeralContainers"])
    def test_privileged_container_kinds(self, kind):
        violations, err = PrivilegedPodsValidator().validate([_pod_with({"privileged": True}, kind=kind)])
        assert err is None
        assert [v.message for v in violations] == ["found privileged pod"]

    def test_unprivileged_pod(self):
        pod = _pod_with({"runAsNonRoot": True})
        assert PrivilegedPodsValidator().validate([pod]) == ([], None)

    def test_exempt_pod(self):
        pod = _pod_with({"privileged": True}, labels=_EXEMPT)
        assert PrivilegedPodsValidator().validate([pod]) == ([], None)

    def test_pre_approved_pod(self):
        pod = _pod_with({"privileged": True})
        validator = PrivilegedPodsValidator()
        validator.set_pre_approved_pods([IdentityEntry(name="p", namespace="default", kind="Pod")])
        assert validator.validate([pod]) == ([], None)

    def test_pre_approval_is_namespaced(self):
        pod = _pod_with({"privileged": True})
        validator = PrivilegedPodsValidator(
            pre_approved=[IdentityEntry(name="p", namespace="kube-system", kind="Pod")],
        )
        violations, _ = validator.validate([pod])
        assert len(violations) == 1

    def test_malformed_spec_is_error(self):
        pod = make_pod("bad", spec={"containers": "nginx"})
        violations, err = PrivilegedPodsValidator().validate([pod])
        assert violations == []
        assert isinstance(err, ValidatorError)


# ═══════════════════════════════════════════════════════════════════
#  Fake
# ═══════════════════════════════════════════════════════════════════


class TestFakeValidator:
    def test_violations(self):
        violations, err = FakeValidator(number_of_violations=3).validate([])
        assert err is None
        assert [v.resource.name for v in violations] == ["0", "1", "2"]
        assert all(v.resource.kind == "Fake" and v.resource.namespace == "fake" for v in violations)
        assert all(v.validator_name == "built-in:fake" for v in violations)

    def test_failure(self):
        violations, err = FakeValidator(number_of_violations=3, should_fail=True).validate([])
        assert violations == []
        assert "fake error" in str(err)

    def test_call_log(self):
        fake = FakeValidator()
        pods = [make_pod("a")]
        fake.validate(pods)
        fake.validate([])
        assert fake.call_count == 2
        assert fake.call_log[0] == pods
        fake.reset()
        assert fake.call_count == 0
