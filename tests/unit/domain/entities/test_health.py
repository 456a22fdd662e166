from __future__ import annotations

from dhab.domain.entities.health import DependencyStatus, ServiceStatus, SystemHealth


def _dep(status, required=False):
    return DependencyStatus(name="dep", status=status, required=required)


def test_aggregate_all_up() -> None:
    health = SystemHealth.aggregate([_dep(ServiceStatus.UP), _dep(ServiceStatus.UP)])

    assert health.status == ServiceStatus.UP
    assert len(health.dependencies) == 2


def test_aggregate_optional_down_is_degraded() -> None:
    health = SystemHealth.aggregate([_dep(ServiceStatus.UP), _dep(ServiceStatus.DOWN)])

    assert health.status == ServiceStatus.DEGRADED


def test_aggregate_required_down_is_down() -> None:
    health = SystemHealth.aggregate(
        [_dep(ServiceStatus.DEGRADED), _dep(ServiceStatus.DOWN, required=True)]
    )

    assert health.status == ServiceStatus.DOWN


def test_aggregate_unknown_only_overrides_up() -> None:
    assert (
        SystemHealth.aggregate([_dep(ServiceStatus.UNKNOWN), _dep(ServiceStatus.UP)]).status
        == ServiceStatus.UNKNOWN
    )
    assert (
        SystemHealth.aggregate(
            [_dep(ServiceStatus.UNKNOWN), _dep(ServiceStatus.DEGRADED)]
        ).status
        == ServiceStatus.DEGRADED
    )
