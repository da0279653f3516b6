# This project was developed with assistance from AI tools.
"""Application completeness checking.

Pure functions over an application, its license type's requirements and its
uploaded documents. No I/O: callers fetch the requirements and documents and
pass them in, so the rules are unit-testable against synthetic sets.

An application is complete when its operational details are structurally
whole and every mandatory requirement of its license type has a document.
A document's validation status does not matter here; reviewers validate
after submission.
"""

from dataclasses import dataclass, field

from ..schemas.completeness import CompletenessResponse, RequirementStatus

# Required premise-address sub-fields and their messages
_ADDRESS_FIELDS: dict[str, str] = {
    "line1": "Address line 1 is required.",
    "city": "City is required.",
    "postcode": "Postcode is required.",
    "state": "State is required.",
}


@dataclass(frozen=True)
class CompletenessResult:
    is_complete: bool
    missing_requirement_ids: list[int] = field(default_factory=list)
    structural_errors: dict[str, str] = field(default_factory=dict)
    requirements: list[RequirementStatus] = field(default_factory=list)

    def to_response(self, application_id: int) -> CompletenessResponse:
        mandatory = [r for r in self.requirements if r.mandatory]
        return CompletenessResponse(
            application_id=application_id,
            is_complete=self.is_complete,
            requirements=self.requirements,
            missing_requirement_ids=self.missing_requirement_ids,
            structural_errors=self.structural_errors,
            provided_count=sum(1 for r in mandatory if r.is_provided),
            required_count=len(mandatory),
        )


def _filled(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def validate_operational_details(details) -> dict[str, str]:
    """Return a field -> message map of structural gaps (empty when whole).

    Accepts the stored dict form or a pydantic ``OperationalDetails``.
    """
    if details is not None and hasattr(details, "model_dump"):
        details = details.model_dump()

    if not details:
        return {"operational_details": "Business operation details are required."}

    errors: dict[str, str] = {}
    address = details.get("premise_address")
    if not address:
        errors["operational_details.premise_address"] = "Premise address is required."
    else:
        for name, message in _ADDRESS_FIELDS.items():
            if not _filled(address.get(name)):
                errors[f"operational_details.premise_address.{name}"] = message

    if not _filled(details.get("business_name")):
        errors["operational_details.business_name"] = "Business name is required."
    return errors


def check_completeness(application, requirements, documents) -> CompletenessResult:
    """Evaluate completeness.

    Args:
        application: Object with ``company_id``, ``license_type_id`` and
            ``operational_details``.
        requirements: Requirements from the registry. Only those belonging to
            the application's license type are considered.
        documents: Documents attached to the application.
    """
    structural: dict[str, str] = {}
    if not application.company_id:
        structural["company_id"] = "Company is required."
    if not application.license_type_id:
        structural["license_type_id"] = "License type is required."
    structural.update(validate_operational_details(application.operational_details))

    doc_by_requirement = {doc.requirement_id: doc for doc in documents}

    statuses: list[RequirementStatus] = []
    missing: list[int] = []
    for req in requirements:
        if req.license_type_id != application.license_type_id:
            continue
        doc = doc_by_requirement.get(req.id)
        if doc is None:
            statuses.append(
                RequirementStatus(requirement_id=req.id, name=req.name, mandatory=req.mandatory)
            )
            if req.mandatory:
                missing.append(req.id)
            continue
        statuses.append(
            RequirementStatus(
                requirement_id=req.id,
                name=req.name,
                mandatory=req.mandatory,
                is_provided=True,
                document_id=doc.id,
                validation_status=doc.validation_status,
            )
        )

    return CompletenessResult(
        is_complete=not structural and not missing,
        missing_requirement_ids=missing,
        structural_errors=structural,
        requirements=statuses,
    )
