# This project was developed with assistance from AI tools.
"""Tests for the pure completeness checker."""

from permit_api.schemas.application import OperationalDetails
from permit_api.services.completeness import check_completeness, validate_operational_details

from .builders import make_application, make_details, make_document, make_requirement

_MANDATORY = [make_requirement(i) for i in (1, 2, 3)]


def test_no_documents_lists_every_mandatory_requirement():
    result = check_completeness(make_application(), _MANDATORY, [])
    assert not result.is_complete
    assert result.missing_requirement_ids == [1, 2, 3]


def test_all_mandatory_documents_present_is_complete():
    docs = [make_document(100 + i, requirement_id=i) for i in (1, 2, 3)]
    result = check_completeness(make_application(), _MANDATORY, docs)
    assert result.is_complete
    assert result.missing_requirement_ids == []


def test_optional_documents_do_not_compensate_for_missing_mandatory():
    requirements = [
        make_requirement(1),
        make_requirement(4, mandatory=False),
        make_requirement(5, mandatory=False),
    ]
    docs = [make_document(104, requirement_id=4), make_document(105, requirement_id=5)]
    result = check_completeness(make_application(), requirements, docs)
    assert not result.is_complete
    assert result.missing_requirement_ids == [1]


def test_missing_optional_requirement_does_not_block():
    requirements = [make_requirement(1), make_requirement(4, mandatory=False)]
    result = check_completeness(make_application(), requirements, [make_document(requirement_id=1)])
    assert result.is_complete


def test_validation_status_is_ignored():
    docs = [
        make_document(101, requirement_id=1, validated=True),
        make_document(102, requirement_id=2, validated=False),
        make_document(103, requirement_id=3, validated=False),
    ]
    assert check_completeness(make_application(), _MANDATORY, docs).is_complete


def test_requirements_of_other_license_types_are_ignored():
    requirements = [*_MANDATORY, make_requirement(9, license_type_id=2)]
    docs = [make_document(100 + i, requirement_id=i) for i in (1, 2, 3)]
    result = check_completeness(make_application(), requirements, docs)
    assert result.is_complete
    assert [r.requirement_id for r in result.requirements] == [1, 2, 3]


def test_structural_gaps_make_application_incomplete():
    app = make_application(operational_details=make_details(business_name="  "))
    docs = [make_document(100 + i, requirement_id=i) for i in (1, 2, 3)]
    result = check_completeness(app, _MANDATORY, docs)
    assert not result.is_complete
    assert result.missing_requirement_ids == []
    assert "operational_details.business_name" in result.structural_errors


def test_missing_company_is_structural():
    result = check_completeness(make_application(company_id=None), [], [])
    assert result.structural_errors["company_id"] == "Company is required."


def test_response_counts_mandatory_slots():
    docs = [make_document(101, requirement_id=1)]
    response = check_completeness(make_application(), _MANDATORY, docs).to_response(1)
    assert response.provided_count == 1
    assert response.required_count == 3
    assert response.requirements[0].document_id == 101


class TestOperationalDetails:
    def test_complete_details_have_no_errors(self):
        assert validate_operational_details(make_details()) == {}

    def test_missing_details(self):
        assert validate_operational_details(None) == {
            "operational_details": "Business operation details are required."
        }

    def test_every_address_gap_reported(self):
        errors = validate_operational_details(
            make_details(premise_address={"line1": "", "city": None})
        )
        assert set(errors) == {
            "operational_details.premise_address.line1",
            "operational_details.premise_address.city",
            "operational_details.premise_address.postcode",
            "operational_details.premise_address.state",
        }

    def test_accepts_pydantic_model_with_malay_keys(self):
        details = OperationalDetails.model_validate(
            {
                "alamat_premis": {
                    "alamat_1": "Lot 5",
                    "bandar": "Kuala Terengganu",
                    "poskod": "20000",
                    "negeri": "Terengganu",
                },
                "nama_perniagaan": "Kedai Seri",
            }
        )
        assert validate_operational_details(details) == {}
