from chon.db import models


def test_questions_in_kurdish_fall_back_per_field(client, db_session):
    db_session.add(
        models.Question(
            question_text="Capital of Iraq?",
            question_text_kurdish="پایتەختی عێراق؟",
            options=["Baghdad", "Erbil"],
            correct_answer="Baghdad",
        )
    )
    db_session.commit()

    body = client.get("/api/language/questions", params={"language": "ku"}).json()
    assert body["language"] == "ku"
    (question,) = body["data"]
    assert question["question_text"] == "پایتەختی عێراق؟"
    assert question["options"] == ["Baghdad", "Erbil"]
    assert question["has_kurdish"] is True
    assert question["available_languages"] == ["en", "ku"]


def test_competitions_include_status(client, competition_factory):
    competition_factory(status="open", name="Cup", name_kurdish="کوپ")
    (item,) = client.get("/api/language/competitions", params={"language": "ku"}).json()["data"]
    assert item["name"] == "کوپ"
    assert item["status"] == "open"
    assert item["entry_fee"] == "5.00"


def test_payment_methods_default_language(client, db_session):
    db_session.add(models.PaymentMethod(name="FastPay", name_kurdish="فاستپەی", code="fastpay"))
    db_session.commit()
    body = client.get("/api/language/payment-methods").json()
    assert body["language"] == "en"
    assert body["data"][0]["name"] == "FastPay"


def test_available_languages_and_stats(client, db_session, competition_factory):
    competition_factory(name_kurdish="کوپ")
    competition_factory()
    body = client.get("/api/language/available-languages").json()
    assert body["available_languages"] == {"en": "English", "ku": "Kurdish"}
    assert body["translation_stats"]["competitions_with_kurdish"] == 1
    assert body["translation_stats"]["questions_with_kurdish"] == 0
