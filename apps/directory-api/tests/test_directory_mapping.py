from directory_api.mapping import (
    build_banner_payload,
    build_hospital_insert_payload,
    build_hospital_update_payload,
    clean_payload,
    hospital_from_row,
    hospital_to_dict,
    normalize_array,
)


def test_normalize_array_cases() -> None:
    assert normalize_array(["a", "b"]) == ["a", "b"]
    assert normalize_array("a, b,,c ") == ["a", "b", "c"]
    assert normalize_array(None) == []
    assert normalize_array(42) == []
    assert normalize_array("") == []


def test_clean_payload_drops_only_none() -> None:
    assert clean_payload({"a": None, "b": 0, "c": "", "d": False}) == {"b": 0, "c": "", "d": False}


def test_hospital_row_round_trips_class_column() -> None:
    row = {
        "id": 7,
        "name": "RS Sari Asih",
        "class": "B",
        "facilities": ["ICU"],
        "services": None,
        "latitude": "-6.12",
        "longitude": None,
    }

    hospital = hospital_from_row(row)

    assert hospital.id == "7"
    assert hospital.hospital_class == "B"
    assert hospital.services == []
    assert hospital.latitude == -6.12
    assert hospital.point is None
    assert hospital_to_dict(hospital)["class"] == "B"
    assert "hospital_class" not in hospital_to_dict(hospital)


def test_insert_payload_applies_defaults_and_splits_tags() -> None:
    payload = build_hospital_insert_payload(
        {
            "name": "RS Sari Asih",
            "hospital_class": "C",
            "facilities": "IGD, ICU , ",
            "services": ["Rawat Inap"],
            "email": None,
        }
    )

    assert payload["class"] == "C"
    assert payload["facilities"] == ["IGD", "ICU"]
    assert payload["services"] == ["Rawat Inap"]
    assert payload["has_icu"] is False
    assert payload["has_igd"] is False
    assert payload["total_beds"] == 0
    assert payload["operating_hours"] == "24 Jam"
    assert payload["google_maps_link"] == ""
    assert "email" not in payload
    assert "latitude" not in payload


def test_insert_payload_takes_coordinates_from_maps_link() -> None:
    payload = build_hospital_insert_payload(
        {"name": "RS", "google_maps_link": "https://www.google.com/maps/place/RS/@-6.1201,106.1502,17z"}
    )

    assert payload["latitude"] == -6.1201
    assert payload["longitude"] == 106.1502


def test_explicit_coordinates_win_over_maps_link() -> None:
    payload = build_hospital_insert_payload(
        {
            "name": "RS",
            "latitude": -6.5,
            "longitude": 106.5,
            "google_maps_link": "https://maps.google.com/?q=-6.1,106.1",
        }
    )

    assert (payload["latitude"], payload["longitude"]) == (-6.5, 106.5)


def test_update_payload_leaves_absent_fields_out() -> None:
    payload = build_hospital_update_payload({"name": "RS Baru", "services": "A,B"})

    assert payload == {"name": "RS Baru", "services": ["A", "B"]}


def test_update_payload_keeps_empty_tag_lists() -> None:
    assert build_hospital_update_payload({"facilities": []}) == {"facilities": []}
    assert build_hospital_update_payload({"facilities": "", "services": None}) == {}


def test_banner_payload_writes_nulls_for_empty_links() -> None:
    payload = build_banner_payload({"title": "Promo", "image": "", "link": ""})

    assert payload == {
        "title": "Promo",
        "subtitle": None,
        "image": None,
        "link": None,
        "is_active": False,
        "order": 0,
    }
