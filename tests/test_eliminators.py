"""
Tests for the geographic and financing elimination gates.
"""

import pytest

from automatch.core import (
    AllocatorMandate,
    FinancingCategory,
    FundingRequest,
    classify_mandate_financing,
    classify_request_financing,
    passes_financing,
    passes_geographic,
)


def regional(**kwargs) -> AllocatorMandate:
    """Regional mandate with overridable fields."""
    return AllocatorMandate(allocator_id="cde-1", service_area_type="regional", **kwargs)


# --- Geographic ---

class TestGeographic:
    """Test the geographic gate."""

    def test_national_passes(self):
        """National coverage serves every state."""
        mandate = AllocatorMandate(allocator_id="cde-1", service_area_type="national")
        assert passes_geographic(FundingRequest(request_id="r", state="AK"), mandate)

    def test_primary_state_code(self):
        """Listed state code passes, case-insensitively."""
        mandate = regional(primary_states=("ks", "MO"))
        assert passes_geographic(FundingRequest(request_id="r", state="KS"), mandate)

    def test_primary_state_full_name(self):
        """Listed full name matches a request given by code."""
        mandate = regional(primary_states=("Kansas",))
        assert passes_geographic(FundingRequest(request_id="r", state="KS"), mandate)

    def test_market_code_token(self):
        """Code in a comma list of the market text passes."""
        mandate = regional(predominant_market="IA,KS,MO")
        assert passes_geographic(FundingRequest(request_id="r", state="MO"), mandate)

    def test_market_full_name_word(self):
        """Full state name as a whole word in the market text passes."""
        mandate = regional(predominant_market="Rural communities across Alabama")
        assert passes_geographic(FundingRequest(request_id="r", state="AL"), mandate)

    def test_code_inside_word_does_not_match(self):
        """'AL' inside 'International' is not Alabama."""
        mandate = regional(predominant_market="International trade corridors")
        assert not passes_geographic(FundingRequest(request_id="r", state="AL"), mandate)

    def test_unserved_state_fails(self):
        """A state outside the service area fails."""
        mandate = regional(primary_states=("KS",))
        assert not passes_geographic(FundingRequest(request_id="r", state="TX"), mandate)

    @pytest.mark.parametrize("state", ["", "ZZ", "Atlantis"])
    def test_unresolvable_state_passes(self, state):
        """Requests without a resolvable state are not eliminated."""
        mandate = regional(primary_states=("KS",))
        assert passes_geographic(FundingRequest(request_id="r", state=state), mandate)


# --- Financing ---

class TestFinancingClassification:
    """Test financing category classification."""

    @pytest.mark.parametrize("text,expected", [
        ("Real Estate Financing - Community Facilities", FinancingCategory.REAL_ESTATE),
        ("Operating Business Financing", FinancingCategory.BUSINESS),
        ("Loans to CDEs", FinancingCategory.UNKNOWN),
        ("", FinancingCategory.UNKNOWN),
    ])
    def test_mandate(self, text, expected):
        """Mandate financing text is classified."""
        assert classify_mandate_financing(regional(predominant_financing=text)) == expected

    def test_request_explicit_flag_first(self):
        """Explicit is_real_estate beats venture type."""
        request = FundingRequest(request_id="r", is_real_estate=False, venture_type="Real Estate")
        assert classify_request_financing(request) == FinancingCategory.BUSINESS

    def test_request_venture_type(self):
        """Venture type is used when no explicit flag is set."""
        request = FundingRequest(
            request_id="r",
            venture_type="Operating Business",
            project_type="Industrial/Manufacturing",
        )
        assert classify_request_financing(request) == FinancingCategory.BUSINESS

    def test_request_project_type_keywords(self):
        """Real estate keywords in the project type."""
        request = FundingRequest(request_id="r", project_type="Healthcare/Medical")
        assert classify_request_financing(request) == FinancingCategory.REAL_ESTATE

    def test_request_unknown(self):
        """No signal is unknown."""
        request = FundingRequest(request_id="r", project_type="Software")
        assert classify_request_financing(request) == FinancingCategory.UNKNOWN


class TestFinancingGate:
    """Test the financing gate."""

    def test_owner_occupied_default_passes(self):
        """Unset owner-occupied defaults to true and passes."""
        request = FundingRequest(request_id="r", venture_type="Operating Business")
        mandate = regional(predominant_financing="Real Estate Financing")
        assert passes_financing(request, mandate)

    def test_mismatch_fails(self):
        """Business request vs real estate mandate fails."""
        request = FundingRequest(
            request_id="r",
            is_owner_occupied=False,
            venture_type="Operating Business",
        )
        mandate = regional(predominant_financing="Real Estate Financing")
        assert not passes_financing(request, mandate)

    def test_match_passes(self):
        """Same category passes."""
        request = FundingRequest(request_id="r", is_owner_occupied=False, is_real_estate=True)
        mandate = regional(predominant_financing="Real Estate Financing")
        assert passes_financing(request, mandate)

    def test_unknown_side_passes(self):
        """Either side unknown gets the benefit of the doubt."""
        request = FundingRequest(request_id="r", is_owner_occupied=False, is_real_estate=True)
        assert passes_financing(request, regional(predominant_financing="Loans"))

        unknown_request = FundingRequest(request_id="r", is_owner_occupied=False)
        assert passes_financing(unknown_request, regional(predominant_financing="Operating Business"))


class TestTotality:
    """Both gates return a bool for any input."""

    @pytest.mark.parametrize("request_fields", [
        {},
        {"state": "", "project_type": ""},
        {"state": "Atlantis", "is_owner_occupied": False},
        {"state": "TX", "venture_type": "???", "is_owner_occupied": False},
    ])
    @pytest.mark.parametrize("mandate_fields", [
        {},
        {"service_area_type": "regional"},
        {"service_area_type": "statewide", "predominant_market": ";;,", "predominant_financing": "x"},
        {"primary_states": ("", "  ")},
    ])
    def test_gates_return_bool(self, request_fields, mandate_fields):
        """Degenerate inputs never raise."""
        request = FundingRequest(request_id="r", **request_fields)
        mandate = AllocatorMandate(allocator_id="cde", **mandate_fields)
        assert isinstance(passes_geographic(request, mandate), bool)
        assert isinstance(passes_financing(request, mandate), bool)
