"""
Unit tests for registry domain entities.
"""

import json

import pytest

from enterprise_registry.domain.entities import Address, CreateResult, Enterprise, Establishment


@pytest.mark.unit
class TestEstablishment:
    """Test Establishment entity."""

    def test_to_dict(self):
        establishment = Establishment("2.000.000.339", "0200.065.765", "1976-07-01")

        assert establishment.to_dict() == {
            "establishmentnumber": "2.000.000.339",
            "startdate": "1976-07-01",
            "enterprisenumber": "0200.065.765",
        }

    def test_requires_number(self):
        with pytest.raises(ValueError):
            Establishment("")


@pytest.mark.unit
class TestEnterprise:
    """Test Enterprise entity."""

    def test_listing_record(self):
        enterprise = Enterprise("0200.065.765", status="AC", name="Veneco")

        record = enterprise.to_dict()

        assert record["enterprisenumber"] == "0200.065.765"
        assert record["name"] == "Veneco"
        assert "streetfr" not in record
        assert "establishments" not in record
        assert not enterprise.is_detailed

    def test_detail_record(self):
        enterprise = Enterprise(
            "0200.065.765",
            start_date="1960-08-09",
            address=Address("Rue de la Loi", "1000", "Bruxelles"),
            establishments=[Establishment("2.000.000.339", "0200.065.765")],
        )

        record = enterprise.to_dict()

        assert enterprise.is_detailed
        assert record["streetfr"] == "Rue de la Loi"
        assert record["zipcode"] == "1000"
        assert record["municipalityfr"] == "Bruxelles"
        assert record["establishments"][0]["establishmentnumber"] == "2.000.000.339"
        # Wire records are JSON-serializable as-is
        json.dumps(record)

    def test_detail_without_establishments_has_empty_list(self):
        record = Enterprise("0200.065.765", address=Address(), establishments=[]).to_dict()

        assert record["establishments"] == []
        assert record["streetfr"] is None

    def test_requires_number(self):
        with pytest.raises(ValueError):
            Enterprise("")

    def test_str(self):
        assert str(Enterprise("0200.065.765")) == "Enterprise(0200.065.765: <unnamed>)"


@pytest.mark.unit
class TestCreateResult:
    """Test CreateResult."""

    def test_frozen(self):
        result = CreateResult(enterprise=None, created=False)

        with pytest.raises(AttributeError):
            result.created = True
