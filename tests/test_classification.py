import pytest

from nextdoor.models.enumerations import PropertyType, ZoningType
from nextdoor.utils.classification import (
    classify_address,
    classify_property,
    property_type_icon,
    zoning_type_icon,
)
from nextdoor.utils.regions import extract_area_from_street, get_areas_in_region, get_region_for_area


class TestAddressClassification:

    @pytest.mark.parametrize('building, address, street', [
        ('ION ORCHARD MALL', '2 ORCHARD TURN', 'ORCHARD TURN'),
        ('NIL', '1 RAFFLES PLACE', 'RAFFLES PLACE'),
        ('ONE-NORTH BUSINESS PARK', '1 FUSIONOPOLIS WAY', 'FUSIONOPOLIS WAY'),
        ('', '10 PAYA LEBAR ROAD', 'PAYA LEBAR ROAD'),
    ])
    def test_commercial(self, building, address, street):
        result = classify_address(building, address, street)
        assert result.is_commercial is True
        assert result.is_residential is False

    def test_residential_hdb(self):
        result = classify_address('', '406 ANG MO KIO AVENUE 10', 'ANG MO KIO AVENUE 10')
        assert result.is_commercial is False
        assert result.is_residential is True

    def test_case_insensitive(self):
        assert classify_address('Suntec Tower', '', '').is_commercial is True


class TestPropertyClassification:

    def test_blk_or_empty_is_hdb(self):
        assert classify_property('BLK 123', '').property_type == PropertyType.HDB
        assert classify_property('', '').property_type == PropertyType.HDB
        assert classify_property(None, '').property_type == PropertyType.HDB

    def test_condo_keywords(self):
        assert classify_property('THE SAIL RESIDENCES', '').property_type == PropertyType.CONDO
        assert classify_property('BISHAN VILLE', '').property_type == PropertyType.CONDO

    def test_whitespace_name_is_landed(self):
        assert classify_property('   ', '').property_type == PropertyType.LANDED

    def test_other_names_default_to_hdb(self):
        assert classify_property('PINNACLE', '').property_type == PropertyType.HDB

    def test_industrial_zoning(self):
        result = classify_property('', '2 CHANGI SOUTH LANE TECHNOPARK')
        assert result.zoning_type == ZoningType.INDUSTRIAL
        assert classify_property('', '406 ANG MO KIO').zoning_type == ZoningType.RESIDENTIAL

    def test_to_dict_includes_icons(self):
        data = classify_property('THE SAIL RESIDENCES', '').to_dict()
        assert data['property_type'] == 'Condo'
        assert data['property_icon'] == property_type_icon(PropertyType.CONDO)
        assert data['zoning_icon'] == zoning_type_icon(ZoningType.RESIDENTIAL)


class TestRegions:

    def test_region_for_area(self):
        assert get_region_for_area('Tampines') == 'East'
        assert get_region_for_area('Atlantis') == 'Unknown'

    def test_areas_in_region(self):
        areas = get_areas_in_region('Northeast')
        assert 'Punggol' in areas
        assert 'Tampines' not in areas

    def test_extract_area_from_street(self):
        assert extract_area_from_street('Ang Mo Kio Avenue 3') == 'Ang Mo Kio'
        assert extract_area_from_street('ORCHARD ROAD') == 'Central Area'
        assert extract_area_from_street('EAST COAST PARKWAY') == 'Marine Parade'
        assert extract_area_from_street('WEST COAST ROAD') == 'Clementi'
        assert extract_area_from_street('NOWHERE LANE') == 'Unknown'
