from sitegen.conversation import Role, Turn
from sitegen.request import build_request
from sitegen.session import Session, begin_round, initial_session


def test_first_round_sends_description_and_history():
    session = begin_round(initial_session(), "a bakery site")
    assert build_request(session, "a bakery site") == {
        "description": "a bakery site",
        "messages": [{"role": "human", "content": "a bakery site"}],
    }


def test_answers_replace_description_as_payload():
    session = Session(thread_id="t1", history=(Turn(Role.HUMAN, "site"), Turn(Role.AI, "colors?")))
    session = begin_round(session, "", "red")
    request = build_request(session, "", "red")
    assert request["description"] == "red"
    assert request["thread_id"] == "t1"
    assert request["messages"] == [
        {"role": "human", "content": "site"},
        {"role": "ai", "content": "colors?"},
        {"role": "human", "content": "red"},
    ]


def test_empty_history_and_thread_omitted():
    request = build_request(Session(), "site")
    assert request == {"description": "site"}
    assert "thread_id" not in request
    assert "messages" not in request


def test_history_not_deduplicated():
    session = Session(history=(Turn(Role.HUMAN, "same"), Turn(Role.HUMAN, "same")))
    assert len(build_request(session, "same")["messages"]) == 2
