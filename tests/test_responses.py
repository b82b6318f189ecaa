import csv
import io

import pytest

from formbuilder.forms.models import Question
from formbuilder.responses.models import Answer, Response
from formbuilder.storage import Storage


async def _submit(client, form_id, answers, **respondent):
    resp = await client.post(
        f"/api/public/forms/{form_id}/responses",
        json={"answers": [{"questionId": q, "value": v} for q, v in answers], **respondent},
    )
    assert resp.status_code == 201, resp.text


async def test_responses_are_newest_first_with_questions(client, owner_headers, make_form):
    form, (qid,) = await make_form([{"title": "Why?", "type": "text"}])
    await _submit(client, form["id"], [(qid, "first")])
    await _submit(client, form["id"], [(qid, "second")])

    resp = await client.get(f"/api/forms/{form['id']}/responses", headers=owner_headers)
    assert resp.status_code == 200
    responses = resp.json()
    assert [r["answers"][0]["value"] for r in responses] == ["second", "first"]
    assert responses[0]["formId"] == form["id"]
    assert responses[0]["submittedAt"] is not None
    assert responses[0]["answers"][0]["question"]["title"] == "Why?"


async def test_responses_require_auth(client, make_form):
    form, _ = await make_form()
    assert (await client.get(f"/api/forms/{form['id']}/responses")).status_code == 401
    assert (await client.get(f"/api/forms/{form['id']}/export")).status_code == 401
    assert (await client.get(f"/api/forms/{form['id']}/summary")).status_code == 401


async def test_export_csv(client, owner_headers, make_form):
    form, (comment, score) = await make_form(
        [{"title": "Comment", "type": "text"}, {"title": "Score", "type": "rating"}],
        title="Team pulse",
    )
    await _submit(client, form["id"], [(comment, 'He said "hi"')], respondentName="Ann")
    await _submit(client, form["id"], [(score, "4")])

    resp = await client.get(f"/api/forms/{form['id']}/export", headers=owner_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.headers["content-disposition"] == 'attachment; filename="Team pulse-responses.csv"'
    assert '"He said ""hi"""' in resp.text

    rows = list(csv.reader(io.StringIO(resp.text)))
    assert rows[0] == ["Submitted At", "Name", "Email", "Comment", "Score"]
    # newest response first
    assert rows[1][1:] == ["", "", "", "4"]
    assert rows[2][1:] == ["Ann", "", 'He said "hi"', ""]


async def test_summary(client, owner_headers, make_form):
    form, (choice, stars, text) = await make_form([
        {"title": "Pick", "type": "multiple_choice", "options": ["A", "B"]},
        {"title": "Stars", "type": "rating"},
        {"title": "Why?", "type": "text"},
    ])
    for value, rating in [("A", "3"), ("A", "5"), ("B", "bad")]:
        await _submit(client, form["id"], [(choice, value), (stars, rating)])
    await _submit(client, form["id"], [(stars, "4"), (text, "great")])

    resp = await client.get(f"/api/forms/{form['id']}/summary", headers=owner_headers)
    assert resp.status_code == 200
    summary = resp.json()
    assert summary["totalResponses"] == 4

    pick, rating, why = summary["questions"]
    assert pick["optionCounts"] == {
        "A": {"count": 2, "percentage": 67},
        "B": {"count": 1, "percentage": 33},
    }
    assert rating["average"] == 4.0
    assert rating["totalResponses"] == 3
    assert rating["ratingCounts"]["4"] == {"count": 1, "percentage": 33}
    assert why == {
        "questionId": text,
        "title": "Why?",
        "type": "text",
        "totalResponses": 1,
        "recent": ["great"],
    }


async def test_summary_survives_oversized_rating(client, owner_headers, make_form):
    form, (qid,) = await make_form([{"title": "Score", "type": "rating"}])
    await _submit(client, form["id"], [(qid, "1" + "0" * 400)])
    await _submit(client, form["id"], [(qid, "3")])

    resp = await client.get(f"/api/forms/{form['id']}/summary", headers=owner_headers)
    assert resp.status_code == 200
    (rating,) = resp.json()["questions"]
    assert rating["totalResponses"] == 1
    assert rating["average"] == 3.0


async def test_dashboard_stats(client, owner_headers, other_headers, make_form):
    published, (qid,) = await make_form([{"title": "Why?", "type": "text"}], title="Live")
    await make_form(published=False, title="Draft")
    await make_form(title="Not mine", headers=other_headers)
    await _submit(client, published["id"], [(qid, "a")])
    await _submit(client, published["id"], [(qid, "b")])
    await _submit(client, published["id"], [(qid, "c")])

    resp = await client.get("/api/stats", headers=owner_headers)
    assert resp.status_code == 200
    stats = resp.json()
    assert stats["totalForms"] == 2
    assert stats["totalResponses"] == 3
    assert stats["activeForms"] == 1
    assert stats["avgResponsesPerForm"] == 1.5
    assert [f["title"] for f in stats["topForms"]] == ["Live", "Draft"]
    assert [f["title"] for f in stats["recentForms"]] == ["Draft", "Live"]

    assert (await client.get("/api/stats")).status_code == 401


async def test_response_count_matches_rows(client, owner_headers, make_form, count_rows):
    form, (qid,) = await make_form([{"title": "Why?", "type": "text"}])
    for value in ("a", "b", "c"):
        await _submit(client, form["id"], [(qid, value)])

    listed = (await client.get("/api/forms", headers=owner_headers)).json()
    assert listed[0]["responseCount"] == await count_rows(Response, Response.form_id == form["id"]) == 3


async def test_deleting_form_cascades(client, owner_headers, make_form, count_rows):
    form, (q1, q2) = await make_form([
        {"title": "Why?", "type": "text"},
        {"title": "Stars", "type": "rating"},
    ])
    other, (other_q,) = await make_form([{"title": "Keep", "type": "text"}])
    await _submit(client, form["id"], [(q1, "x"), (q2, "5")])
    await _submit(client, form["id"], [(q1, "y")])
    await _submit(client, other["id"], [(other_q, "kept")])

    resp = await client.delete(f"/api/forms/{form['id']}", headers=owner_headers)
    assert resp.status_code == 204

    assert await count_rows(Question, Question.form_id == form["id"]) == 0
    assert await count_rows(Response, Response.form_id == form["id"]) == 0
    assert await count_rows(Answer) == 1
    assert await count_rows(Question) == 1


async def test_submission_is_atomic(app, make_form, count_rows, monkeypatch):
    form, (q1, q2) = await make_form([
        {"title": "Why?", "type": "text"},
        {"title": "Stars", "type": "rating"},
    ])

    original = Storage.create_answer
    calls = []

    async def failing_create_answer(self, response_id, question_id, value):
        calls.append(question_id)
        if len(calls) == 2:
            raise RuntimeError("insert failed")
        return await original(self, response_id, question_id, value)

    monkeypatch.setattr(Storage, "create_answer", failing_create_answer)

    async with app.state.session_maker() as session:
        with pytest.raises(RuntimeError):
            await Storage(session).submit_response(form["id"], [(q1, "x"), (q2, "5")])

    assert calls == [q1, q2]
    assert await count_rows(Response) == 0
    assert await count_rows(Answer) == 0
