import pytest

from app.core.chatbot import FALLBACK_INTENT, reply


@pytest.mark.parametrize(
    "message, intent",
    [
        ("Hello there", "greeting"),
        ("When is my homework due?", "assignment"),
        ("Which class should I take?", "course"),
        ("How do I join a group?", "team"),
        ("best way to learn faster", "study"),
        ("what is my score", "grade"),
        ("I need support", "help"),
        ("found a bug", "technical"),
        ("this is something else", FALLBACK_INTENT),
    ],
)
def test_reply_matches_first_rule(message, intent):
    assert reply(message)[0] == intent


def test_first_matching_rule_wins():
    # greeting is checked before assignment
    assert reply("hi, about my assignment")[0] == "greeting"


def test_fallback_echoes_the_question():
    intent, response = reply("  quantum entanglement  ")
    assert intent == FALLBACK_INTENT
    assert "quantum entanglement" in response


def test_conversation_flow(client, student):
    headers, _ = student

    conversation = client.get("/api/chatbot/conversation", headers=headers).json()["data"]
    assert conversation["status"] == "active"
    assert conversation["messages"] == []

    response = client.post("/api/chatbot/message", json={"content": "hello"}, headers=headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["conversation_id"] == conversation["conversation_id"]
    assert [(m["sender"], m["intent"]) for m in data["messages"]] == [("user", "user_query"), ("bot", "greeting")]
    assert (data["total_messages"], data["user_messages"], data["bot_messages"]) == (2, 1, 1)

    # same active conversation is reused
    again = client.get("/api/chatbot/conversation", headers=headers).json()["data"]
    assert again["conversation_id"] == conversation["conversation_id"]
    assert len(again["messages"]) == 2


def test_recent_messages_are_capped(client, student, monkeypatch):
    from app.core.config import settings

    monkeypatch.setattr(settings, "CHATBOT_HISTORY_LIMIT", 4)
    headers, _ = student
    for text in ("one", "two", "three"):
        data = client.post("/api/chatbot/message", json={"content": text}, headers=headers).json()["data"]

    assert len(data["messages"]) == 4
    assert data["messages"][0]["content"] == "two"
    assert data["total_messages"] == 6


def test_blank_message_is_rejected(client, student):
    headers, _ = student
    response = client.post("/api/chatbot/message", json={"content": "   "}, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Message content is required"


def test_conversations_are_private(client, register):
    owner_headers, _ = register()
    other_headers, _ = register()
    data = client.post("/api/chatbot/message", json={"content": "hey"}, headers=owner_headers).json()["data"]
    cid = data["conversation_id"]

    response = client.post(
        "/api/chatbot/message", json={"content": "hey", "conversation_id": cid}, headers=other_headers
    )
    assert response.status_code == 404
    assert client.get(f"/api/chatbot/conversation/{cid}/messages", headers=other_headers).status_code == 404
    assert client.post(f"/api/chatbot/conversation/{cid}/close", headers=other_headers).status_code == 404

    bot_message = data["messages"][-1]
    response = client.post(
        f"/api/chatbot/message/{bot_message['id']}/reaction", json={"kind": "like"}, headers=other_headers
    )
    assert response.status_code == 404


def test_messages_paging(client, student):
    headers, _ = student
    for text in ("one", "two"):
        data = client.post("/api/chatbot/message", json={"content": text}, headers=headers).json()["data"]
    cid = data["conversation_id"]

    newest = client.get(f"/api/chatbot/conversation/{cid}/messages", params={"limit": 1}, headers=headers).json()
    assert newest["data"][0]["sender"] == "bot"
    older = client.get(
        f"/api/chatbot/conversation/{cid}/messages", params={"limit": 1, "offset": 1}, headers=headers
    ).json()
    assert older["data"][0]["content"] == "two"


def test_reactions_only_on_bot_messages(client, student):
    headers, _ = student
    messages = client.post("/api/chatbot/message", json={"content": "study tips"}, headers=headers).json()["data"]["messages"]
    user_message, bot_message = messages

    response = client.post(
        f"/api/chatbot/message/{bot_message['id']}/reaction", json={"kind": "helpful"}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["data"]["reaction"] == "helpful"

    response = client.post(
        f"/api/chatbot/message/{user_message['id']}/reaction", json={"kind": "like"}, headers=headers
    )
    assert response.status_code == 400


def test_close_feedback_and_history(client, student):
    headers, _ = student
    first = client.post("/api/chatbot/message", json={"content": "hi"}, headers=headers).json()["data"]
    cid = first["conversation_id"]

    response = client.post("/api/chatbot/feedback", json={"rating": 4, "comment": "Nice"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["satisfaction_rating"] == 4
    assert client.post("/api/chatbot/feedback", json={"rating": 6}, headers=headers).status_code == 400

    closed = client.post(f"/api/chatbot/conversation/{cid}/close", headers=headers).json()["data"]
    assert closed["status"] == "closed"
    response = client.post("/api/chatbot/message", json={"content": "hi", "conversation_id": cid}, headers=headers)
    assert response.status_code == 400

    # a closed conversation is not reused
    second = client.post("/api/chatbot/message", json={"content": "hello"}, headers=headers).json()["data"]
    assert second["conversation_id"] != cid

    history = client.get("/api/chatbot/history", headers=headers).json()
    assert history["pagination"]["total"] == 2
    assert {c["conversation_id"] for c in history["data"]} == {cid, second["conversation_id"]}


def test_feedback_without_conversation(client, student):
    headers, _ = student
    assert client.post("/api/chatbot/feedback", json={"rating": 3}, headers=headers).status_code == 404


def test_analytics_is_for_teachers(client, teacher, student):
    student_headers, _ = student
    client.post("/api/chatbot/message", json={"content": "hello"}, headers=student_headers)
    client.post("/api/chatbot/message", json={"content": "my homework"}, headers=student_headers)
    client.post("/api/chatbot/message", json={"content": "hey again"}, headers=student_headers)
    client.post("/api/chatbot/feedback", json={"rating": 5}, headers=student_headers)

    assert client.get("/api/chatbot/analytics", headers=student_headers).status_code == 403

    teacher_headers, _ = teacher
    stats = client.get("/api/chatbot/analytics", headers=teacher_headers).json()["data"]
    assert stats["total_conversations"] == 1
    assert stats["active_conversations"] == 1
    assert stats["total_messages"] == 6
    assert stats["average_satisfaction"] == 5.0
    assert stats["top_intents"][0] == {"intent": "greeting", "count": 2}


def test_messages_are_rate_limited_per_user(client, register, monkeypatch):
    from app.core import rate_limit

    monkeypatch.setattr(rate_limit.chat_limiter, "max_requests", 3)
    headers, _ = register()
    other_headers, _ = register()

    statuses = [
        client.post("/api/chatbot/message", json={"content": "hello"}, headers=headers).status_code
        for _ in range(4)
    ]
    assert statuses == [200, 200, 200, 429]
    assert client.post("/api/chatbot/message", json={"content": "hello"}, headers=other_headers).status_code == 200
