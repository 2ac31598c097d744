"""Which project types each service offering can be billed as.

Service ids match the public services list (Lawn Care, Tree Services, ...).
"""

from types import MappingProxyType
from typing import Mapping, Sequence

from landscape.domain.errors import DomainError
from landscape.domain.pricing.rates import ProjectType

SERVICE_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "1": "Lawn Care & Maintenance",
        "2": "Tree Services & Pruning",
        "3": "Desert Landscaping",
        "4": "Irrigation Systems",
        "5": "Hardscaping & Patios",
    }
)

SERVICE_PROJECT_TYPES: Mapping[str, tuple[ProjectType, ...]] = MappingProxyType(
    {
        "1": (ProjectType.maintenance,),
        "2": (ProjectType.repair, ProjectType.maintenance),
        "3": (ProjectType.installation,),
        "4": (ProjectType.installation, ProjectType.repair, ProjectType.maintenance),
        "5": (ProjectType.installation,),
    }
)


def get_allowed_project_types(service_id: str | None) -> tuple[ProjectType, ...]:
    if service_id is None:
        return tuple(ProjectType)
    return SERVICE_PROJECT_TYPES.get(service_id, tuple(ProjectType))


def format_allowed_types(types: Sequence[ProjectType]) -> str:
    labels = [ProjectType(value).value.capitalize() for value in types]
    if len(labels) == 1:
        return f"{labels[0]} only"
    return " & ".join(labels)


def ensure_project_type_allowed(service_id: str | None, project_type: ProjectType) -> None:
    allowed = get_allowed_project_types(service_id)
    if ProjectType(project_type) in allowed:
        return
    service_label = SERVICE_NAMES.get(service_id or "", service_id)
    raise DomainError(
        detail=f"{service_label} supports {format_allowed_types(allowed)}",
        title="Project type not offered",
        errors=[{"field": "project_type", "message": f"Allowed: {format_allowed_types(allowed)}"}],
    )


def catalog_payload() -> list[dict]:
    return [
        {
            "service_id": service_id,
            "name": SERVICE_NAMES[service_id],
            "project_types": [project_type.value for project_type in project_types],
            "label": format_allowed_types(project_types),
        }
        for service_id, project_types in SERVICE_PROJECT_TYPES.items()
    ]
