import random

from clinic_api.common.llm.llm_service import CANNED_RESPONSES, FALLBACK_RESPONSE, LLMService
from clinic_api.modules.chatbot import chatbot_service


async def test_llm_service_picks_a_canned_response():
    service = LLMService(rng=random.Random(7))

    assert await service.chat("I have a headache") in CANNED_RESPONSES


async def test_ask_and_history(client, patient):
    response = await client.post("/chatbot", json={"question": "I have a headache"}, headers=patient.headers)

    assert response.status_code == 200
    assert response.json()["bot_response"] in CANNED_RESPONSES

    await client.post("/chatbot", json={"question": "And a fever"}, headers=patient.headers)

    history = (await client.get("/chatbot/history", headers=patient.headers)).json()["messages"]
    assert [m["role"] for m in history] == ["patient", "bot", "patient", "bot"]
    assert history[0]["content"] == "I have a headache"
    assert history[2]["content"] == "And a fever"


async def test_history_is_per_patient(client, patient, other_patient):
    await client.post("/chatbot", json={"question": "Is this private?"}, headers=patient.headers)

    history = (await client.get("/chatbot/history", headers=other_patient.headers)).json()

    assert history == {"messages": []}


async def test_clear_history(client, patient):
    await client.post("/chatbot", json={"question": "Hello"}, headers=patient.headers)

    response = await client.delete("/chatbot/history", headers=patient.headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Chat history cleared successfully"

    history = (await client.get("/chatbot/history", headers=patient.headers)).json()
    assert history["messages"] == []


async def test_responder_failure_falls_back(client, patient, monkeypatch):
    async def broken(question):
        raise RuntimeError("model offline")

    monkeypatch.setattr(chatbot_service, "generate_response", broken)

    response = await client.post("/chatbot", json={"question": "Hello"}, headers=patient.headers)

    assert response.status_code == 200
    assert response.json()["bot_response"] == FALLBACK_RESPONSE


async def test_question_length_limits(client, patient):
    too_long = await client.post("/chatbot", json={"question": "x" * 1001}, headers=patient.headers)
    blank = await client.post("/chatbot", json={"question": "   "}, headers=patient.headers)

    assert too_long.status_code == 400
    assert blank.status_code == 400


async def test_chatbot_is_for_patients(client, doctor, admin):
    assert (await client.post("/chatbot", json={"question": "Hi"}, headers=doctor.headers)).status_code == 403
    assert (await client.get("/chatbot/history", headers=admin.headers)).status_code == 403
