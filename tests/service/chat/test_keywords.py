from showroom_chat.model.chat.conversation import CatalogSubject
from showroom_chat.service.chat.chat import context_header
from showroom_chat.service.chat.keywords import top_keywords

VEHICLE_ID = "123e4567-e89b-12d3-a456-426614174000"


def test_top_keywords_filters_noise():
    messages = [
        "Quero um SUV automático",
        "SUV com teto solar, por favor",
        "Tem SUV 2020? veja www.exemplo.com ou mande para a@b.com",
    ]

    result = top_keywords(messages)

    assert result[0].keyword == "suv"
    assert result[0].count == 3
    words = {k.keyword for k in result}
    assert "2020" not in words
    assert "quero" not in words
    assert not any("www" in w or "@" in w for w in words)


def test_top_keywords_limit():
    messages = [" ".join(f"palavra{i}" for i in range(20))]

    assert len(top_keywords(messages, limit=10)) == 10


def test_top_keywords_restricted_to_mentions():
    messages = [
        f"Shop: X | Vehicle: Civic ID: {VEHICLE_ID} | teto solar",
        "sedan barato",
    ]

    words = {k.keyword for k in top_keywords(messages, mention_any=[VEHICLE_ID])}

    assert "teto" in words
    assert "sedan" not in words
    assert top_keywords(messages, mention_any=[]) == []


def test_top_keywords_ignores_context_header():
    subject = CatalogSubject(
        id=VEHICLE_ID,
        shop_id="5b0c2f0e-1d5a-4a53-9a52-0f7d7c1f8a10",
        shop_name="Auto Centro",
        label="Honda Civic-2021",
        photo_urls=[],
    )
    messages = [context_header(subject) + m for m in ["teto solar?", "aceita troca", "teto panorâmico"]]

    result = top_keywords(messages)
    words = {k.keyword for k in result}

    assert result[0].keyword == "teto"
    assert result[0].count == 2
    assert words == {"teto", "solar", "aceita", "troca", "panorâmico"}
    assert top_keywords(messages, mention_any=[VEHICLE_ID])[0].keyword == "teto"
