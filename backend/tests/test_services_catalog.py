import pytest

from landscape.domain.errors import DomainError
from landscape.domain.pricing.rates import ProjectType
from landscape.domain.pricing.services_catalog import (
    catalog_payload,
    ensure_project_type_allowed,
    format_allowed_types,
    get_allowed_project_types,
)


def test_lawn_care_is_maintenance_only():
    assert get_allowed_project_types("1") == (ProjectType.maintenance,)
    assert format_allowed_types(get_allowed_project_types("1")) == "Maintenance only"


def test_irrigation_allows_every_project_type():
    assert set(get_allowed_project_types("4")) == set(ProjectType)
    assert format_allowed_types(get_allowed_project_types("4")) == "Installation & Repair & Maintenance"


@pytest.mark.parametrize("service_id", [None, "99"])
def test_unknown_or_missing_service_allows_all_types(service_id):
    assert get_allowed_project_types(service_id) == tuple(ProjectType)


def test_allowed_project_type_passes():
    ensure_project_type_allowed("2", ProjectType.repair)


def test_disallowed_project_type_raises_domain_error():
    with pytest.raises(DomainError) as excinfo:
        ensure_project_type_allowed("3", ProjectType.repair)
    assert excinfo.value.title == "Project type not offered"
    assert excinfo.value.detail == "Desert Landscaping supports Installation only"
    assert excinfo.value.errors[0]["field"] == "project_type"


def test_catalog_payload_lists_every_service():
    payload = catalog_payload()
    assert [entry["service_id"] for entry in payload] == ["1", "2", "3", "4", "5"]
    tree_services = payload[1]
    assert tree_services["name"] == "Tree Services & Pruning"
    assert tree_services["project_types"] == ["repair", "maintenance"]
    assert tree_services["label"] == "Repair & Maintenance"
