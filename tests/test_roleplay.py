"""Tests for roleplay training sessions."""

from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient

from toguna.core.claude_agent import CANNED_REPLIES, SCENARIO_OPENERS


async def start(client: AsyncClient, scenario: str = "cold_call", **extra) -> dict:
    response = await client.post("/api/v1/roleplay", json={"scenario": scenario, **extra})
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_prospect_speaks_first(client: AsyncClient, unconfigured_claude):
    session = await start(client, "objection_handling", difficulty="hard")

    assert session["difficulty"] == "hard"
    assert session["completed_at"] is None
    assert len(session["conversation_log"]) == 1
    opener = session["conversation_log"][0]
    assert opener["role"] == "prospect"
    assert opener["content"] == SCENARIO_OPENERS["objection_handling"]


@pytest.mark.asyncio
async def test_start_validates_input(client: AsyncClient):
    response = await client.post("/api/v1/roleplay", json={"scenario": "cold_call", "difficulty": "extreme"})
    assert response.status_code == 422

    response = await client.post("/api/v1/roleplay", json={"scenario": "cold_call", "project_id": 999})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_canned_replies_without_model(client: AsyncClient, unconfigured_claude):
    session = await start(client)

    first = await client.post(f"/api/v1/roleplay/{session['id']}/messages", json={"content": "お世話になっております。"})
    second = await client.post(f"/api/v1/roleplay/{session['id']}/messages", json={"content": "少しお時間よろしいですか？"})

    assert first.status_code == 200
    assert first.json()["reply"]["role"] == "prospect"
    assert first.json()["reply"]["content"] == CANNED_REPLIES[0]
    assert second.json()["reply"]["content"] == CANNED_REPLIES[1]

    detail = await client.get(f"/api/v1/roleplay/{session['id']}")
    roles = [turn["role"] for turn in detail.json()["conversation_log"]]
    assert roles == ["prospect", "operator", "prospect", "operator", "prospect"]


@pytest.mark.asyncio
async def test_reply_from_model(client: AsyncClient, mock_anthropic):
    mock_anthropic.messages.create.return_value.content = [MagicMock(text="  料金はいくらですか？ ")]
    session = await start(client)

    response = await client.post(f"/api/v1/roleplay/{session['id']}/messages", json={"content": "ご紹介させてください。"})

    assert response.json()["reply"]["content"] == "料金はいくらですか？"
    messages = mock_anthropic.messages.create.call_args.kwargs["messages"]
    assert messages[0]["role"] == "user"
    assert messages[-1] == {"role": "user", "content": "ご紹介させてください。"}


@pytest.mark.asyncio
async def test_end_with_heuristic_feedback(client: AsyncClient, unconfigured_claude):
    session = await start(client)
    await client.post(f"/api/v1/roleplay/{session['id']}/messages", json={"content": "御社の課題は何ですか？"})

    response = await client.post(f"/api/v1/roleplay/{session['id']}/end")

    assert response.status_code == 200
    data = response.json()
    # 50 base + 4 per turn + 10 for asking a question
    assert data["score"] == 64
    assert data["completed_at"] is not None
    assert "質問で相手のニーズを引き出せている" in data["ai_feedback"]["positive_points"]
    assert "メリットを具体例とともに伝える" in data["ai_feedback"]["improvement_areas"]

    again = await client.post(f"/api/v1/roleplay/{session['id']}/end")
    assert again.status_code == 400
    assert again.json()["detail"] == "Roleplay session already ended"

    late = await client.post(f"/api/v1/roleplay/{session['id']}/messages", json={"content": "もしもし"})
    assert late.status_code == 400


@pytest.mark.asyncio
async def test_end_with_model_feedback(client: AsyncClient, mock_anthropic):
    session = await start(client, "closing")
    mock_anthropic.messages.create.return_value.content = [MagicMock(
        text='{"performance_score": 120, "positive_points": ["落ち着いた話し方"], "improvement_areas": []}'
    )]

    response = await client.post(f"/api/v1/roleplay/{session['id']}/end")

    data = response.json()
    assert data["score"] == 100
    assert data["ai_feedback"]["positive_points"] == ["落ち着いた話し方"]


@pytest.mark.asyncio
async def test_operators_only_see_their_sessions(
    client: AsyncClient,
    operator_client: AsyncClient,
    unconfigured_claude,
):
    director_session = await start(client)
    own_session = await start(operator_client, "follow_up")

    listed = await operator_client.get("/api/v1/roleplay")
    assert [s["id"] for s in listed.json()] == [own_session["id"]]

    hidden = await operator_client.get(f"/api/v1/roleplay/{director_session['id']}")
    assert hidden.status_code == 404

    everything = await client.get("/api/v1/roleplay")
    assert len(everything.json()) == 2

    filtered = await client.get("/api/v1/roleplay", params={"scenario": "follow_up"})
    assert [s["id"] for s in filtered.json()] == [own_session["id"]]
