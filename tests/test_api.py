import pytest

from quizbank.core.auth import create_token

QUIZ = {
    "subjectName": "Math",
    "topicName": "Algebra",
    "questions": [
        {
            "text": f"Question {i}",
            "choices": [{"text": f"Answer {i}-{j}", "isCorrect": j == 1} for j in range(4)],
        }
        for i in range(3)
    ],
}

async def test_health(client):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

async def test_math_algebra_scenario(client, auth_header):
    r = await client.post("/api/quiz/create", json=QUIZ, headers=auth_header)
    assert r.status_code == 201
    body = r.json()
    assert body["message"] == "Quiz created successfully"
    assert len(body["questions"]) == 3
    assert all(len(q["choices"]) == 4 for q in body["questions"])
    assert body["questions"][0]["choices"][1]["isCorrect"] is True
    created_ids = {q["id"] for q in body["questions"]}

    r = await client.get("/api/quiz/random", params={"topicName": "Algebra", "count": 2})
    assert r.status_code == 200
    questions = r.json()["questions"]
    assert len(questions) == 2
    assert {q["id"] for q in questions} <= created_ids
    assert "isCorrect" not in r.text
    assert set(questions[0]) == {"id", "text", "topicId", "choices"}
    assert set(questions[0]["choices"][0]) == {"id", "text"}

    r = await client.get("/api/quiz/random", params={"topicName": "Algebra", "count": 10})
    assert {q["id"] for q in r.json()["questions"]} == created_ids

async def test_create_requires_token(client):
    r = await client.post("/api/quiz/create", json=QUIZ)
    assert r.status_code == 401
    assert r.json() == {"error": "No token provided"}

async def test_create_rejects_bad_token(client):
    r = await client.post("/api/quiz/create", json=QUIZ, headers={"Authorization": "Bearer nope"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid token"}

async def test_create_with_question_without_choices(client, auth_header):
    body = {"subjectName": "Math", "topicName": "Algebra", "questions": [{"text": "Q", "choices": []}]}
    r = await client.post("/api/quiz/create", json=body, headers=auth_header)
    assert r.status_code == 400
    assert "error" in r.json()

async def test_create_with_malformed_body(client, auth_header):
    r = await client.post("/api/quiz/create", json={"topicName": "Algebra"}, headers=auth_header)
    assert r.status_code == 400

@pytest.mark.parametrize("params", [{}, {"topicName": "Algebra"}, {"count": 2}])
async def test_random_requires_topic_and_count(client, params):
    r = await client.get("/api/quiz/random", params=params)
    assert r.status_code == 400
    assert r.json() == {"error": "Topic name and count are required"}

@pytest.mark.parametrize("count", ["abc", "0", "-2"])
async def test_random_rejects_bad_count(client, auth_header, count):
    await client.post("/api/quiz/create", json=QUIZ, headers=auth_header)
    r = await client.get("/api/quiz/random", params={"topicName": "Algebra", "count": count})
    assert r.status_code == 400

async def test_random_unknown_topic(client):
    r = await client.get("/api/quiz/random", params={"topicName": "Nope", "count": 2})
    assert r.status_code == 404
    assert r.json() == {"error": "Topic not found"}

async def test_submit_and_list_attempts(client, user, auth_header):
    r = await client.post("/api/quiz/submit", json={"userId": user.id, "score": 8}, headers=auth_header)
    assert r.status_code == 200
    assert r.json() == {"message": "Exam results saved successfully"}

    r = await client.get("/api/quiz/attempts", headers=auth_header)
    assert r.status_code == 200
    attempts = r.json()["attempts"]
    assert len(attempts) == 1
    assert attempts[0]["score"] == 8
    assert attempts[0]["userId"] == user.id
    assert attempts[0]["date"]

async def test_submit_unknown_user_fails_generically(client, auth_header):
    r = await client.post("/api/quiz/submit", json={"userId": "ghost", "score": 1}, headers=auth_header)
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to save results"}

async def test_submit_requires_token(client, user):
    r = await client.post("/api/quiz/submit", json={"userId": user.id, "score": 1})
    assert r.status_code == 401

async def test_register_login_profile(client):
    r = await client.post("/api/register", json={"email": "new@example.com", "password": "secret1"})
    assert r.status_code == 201
    user = r.json()["user"]
    assert user["email"] == "new@example.com"
    assert user["firebaseId"]

    r = await client.post("/api/login", json={"email": "new@example.com", "password": "secret1"})
    assert r.status_code == 200
    token = r.json()["token"]
    assert r.json()["user"] == {"email": "new@example.com", "firebaseId": user["firebaseId"]}

    r = await client.get("/api/profile", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "new@example.com"

async def test_register_duplicate_email(client):
    creds = {"email": "dup@example.com", "password": "secret1"}
    assert (await client.post("/api/register", json=creds)).status_code == 201
    r = await client.post("/api/register", json=creds)
    assert r.status_code == 409
    assert r.json() == {"error": "Email is already in use"}

async def test_register_short_password(client):
    r = await client.post("/api/register", json={"email": "a@example.com", "password": "123"})
    assert r.status_code == 400

async def test_login_wrong_password(client):
    await client.post("/api/register", json={"email": "x@example.com", "password": "secret1"})
    r = await client.post("/api/login", json={"email": "x@example.com", "password": "wrong!!"})
    assert r.status_code == 401

async def test_login_user_missing_from_database(client, identity):
    await identity.create_account("orphan@example.com", "secret1")
    r = await client.post("/api/login", json={"email": "orphan@example.com", "password": "secret1"})
    assert r.status_code == 404

async def test_profile_for_unknown_principal(client):
    r = await client.get("/api/profile", headers={"Authorization": f"Bearer {create_token('nobody')}"})
    assert r.status_code == 404

async def test_logout(client):
    r = await client.post("/api/logout")
    assert r.json() == {"message": "Logout successful"}

async def test_random_over_request_on_large_topic_returns_every_question(client, auth_header):
    big = {
        "subjectName": "Math",
        "topicName": "Big",
        "questions": [{"text": f"Big {i}", "choices": [{"text": "yes", "isCorrect": True}]} for i in range(120)],
    }
    r = await client.post("/api/quiz/create", json=big, headers=auth_header)
    assert r.status_code == 201

    r = await client.get("/api/quiz/random", params={"topicName": "Big", "count": 150})
    assert r.status_code == 200
    ids = [q["id"] for q in r.json()["questions"]]
    assert len(ids) == 120
    assert len(set(ids)) == 120
