# tests/test_profile_parser.py
# Profile Parser Adapter: always returns a profile, never raises.

import asyncio
import json

import pytest

from shidduch.logic.llm_client import OPENAI_PARSE_MODEL
from shidduch.logic.profile_parser import parse_profile, profile_from_reply
from shidduch.schemas.profiles import ParsedProfile

from conftest import FakeCompletion


def _run(coro):
    return asyncio.run(coro)


def test_parses_fenced_reply_and_normalizes_fields():
    reply = "```json\n" + json.dumps({
        "name": "Dovid Katz",
        "age": "27",
        "location": "Lakewood, NJ",
        "gender": "Male",
        "hashkafa": "Yeshivish",
        "interests": "learning",
        "personality_traits": ["kind", "", "funny"],
        "unexpected": "ignored",
    }) + "\n```"
    complete = FakeCompletion([reply])

    profile = _run(parse_profile("raw resume text", complete))

    assert profile.name == "Dovid Katz"
    assert profile.age == 27
    assert profile.gender == "male"
    assert profile.interests == ["learning"]
    assert profile.personality_traits == ["kind", "funny"]
    assert profile.education is None


def test_request_shape():
    complete = FakeCompletion(['{"name": "A"}'])
    _run(parse_profile("Sarah Klein, 23, Brooklyn", complete))

    call = complete.calls[0]
    assert call["model"] == OPENAI_PARSE_MODEL
    assert call["temperature"] == 0.1
    assert call["max_tokens"] == 1500
    assert call["messages"][0]["role"] == "system"
    assert "Sarah Klein, 23, Brooklyn" in call["messages"][1]["content"]


def test_malformed_reply_gives_all_null_profile():
    profile = _run(parse_profile("text", FakeCompletion(["Sorry, I cannot help with that."])))
    assert profile == ParsedProfile.empty()
    assert profile.is_empty()


def test_malformed_reply_still_salvages_name():
    raw = '{"name": "Rivka Stern", "age": 22, "location": "Monsey" trailing garbage'
    profile = profile_from_reply(raw)
    assert profile.name == "Rivka Stern"
    assert profile.age is None
    assert profile.location is None


def test_completion_failure_gives_all_null_profile():
    profile = _run(parse_profile("text", FakeCompletion([RuntimeError("upstream 500")])))
    assert profile.is_empty()


def test_bad_field_types_are_dropped_not_fatal():
    profile = profile_from_reply(json.dumps({"name": "Yael", "age": "unknown", "gender": "other"}))
    assert profile.name == "Yael"
    assert profile.age is None
    assert profile.gender is None


@pytest.mark.parametrize("age", ["1e999", "Infinity", '"1e400"', "NaN"])
def test_non_finite_age_is_dropped(age):
    raw = '{"name": "Sarah Cohen", "age": ' + age + ', "gender": "Female"}'
    profile = _run(parse_profile("resume", FakeCompletion([raw])))
    assert profile.name == "Sarah Cohen"
    assert profile.age is None
    assert profile.gender == "female"
