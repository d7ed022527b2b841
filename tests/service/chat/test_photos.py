from sqlalchemy.exc import OperationalError

from showroom_chat.service.chat.photos import PhotoEnricher, extract_subject_ids

VEHICLE_ID = "123e4567-e89b-12d3-a456-426614174000"
OTHER_VEHICLE_ID = "0f8fad5b-d9cb-469f-a165-70867728950e"


def test_photos_for_embedded_vehicle_id(catalog):
    photos = PhotoEnricher(catalog).enrich(f"Agende o test drive for {VEHICLE_ID} hoje")

    assert photos == ["a.jpg", "b.jpg"]


def test_no_identifier_means_no_photos(catalog):
    assert PhotoEnricher(catalog).enrich("Nenhum carro aqui") is None
    assert catalog.lookups == []


def test_unresolved_identifier_contributes_nothing(catalog):
    unknown = "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"

    assert PhotoEnricher(catalog).enrich(f"veja {unknown}") is None
    assert PhotoEnricher(catalog).enrich(f"veja {unknown} e {VEHICLE_ID}") == ["a.jpg", "b.jpg"]


def test_all_matches_are_scanned_in_order(catalog):
    text = f"{OTHER_VEHICLE_ID} ou {VEHICLE_ID}"

    assert PhotoEnricher(catalog).enrich(text) == ["c.jpg", "a.jpg", "b.jpg"]


def test_repeated_ids_across_texts_are_looked_up_once(catalog):
    photos = PhotoEnricher(catalog).enrich(f"{VEHICLE_ID}", f'{{"message": "{VEHICLE_ID.upper()}"}}')

    assert photos == ["a.jpg", "b.jpg"]
    assert catalog.lookups == [VEHICLE_ID]


def test_extract_subject_ids_normalizes_case():
    assert extract_subject_ids(f"x {VEHICLE_ID.upper()} y") == [VEHICLE_ID]


def test_catalog_failure_is_not_fatal(catalog):
    def broken(_):
        raise OperationalError("select", {}, Exception("db down"))

    catalog.find_subject = broken

    assert PhotoEnricher(catalog).enrich(VEHICLE_ID) is None
