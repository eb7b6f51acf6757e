"""
tests.test_envelope

Response envelope: outcome state machine, status code validation, authorization
gate at send time, and the emitted wire format.
"""

from __future__ import annotations

import json
from typing import Any

import pytest
from starlette.responses import JSONResponse, Response

from envelope_gate.envelope import (
    EnvelopeConfig,
    EnvelopeFactory,
    InvalidArgument,
    InvalidState,
    OutcomeKind,
)
from envelope_gate.envelope.builder import UNAUTHORIZED_MESSAGE, UNKNOWN_ERROR_MESSAGE
from tests.conftest import GOOD_TOKEN


def _json(response: JSONResponse) -> dict[str, Any]:
    return json.loads(response.body)


@pytest.fixture
def public_envelope(factory, make_request):
    return factory.new(make_request()).set_public(True)


@pytest.mark.parametrize("code", [100, 200, 404, 599])
def test_set_code_accepts_http_range(public_envelope, code: int) -> None:
    assert public_envelope.set_code(code).status_code == code


@pytest.mark.parametrize("code", [99, 600, 12, 1000, -200, True, "200", 200.0])
def test_set_code_rejects_out_of_range(public_envelope, code: Any) -> None:
    with pytest.raises(InvalidArgument):
        public_envelope.set_code(code)
    assert public_envelope.status_code == 200


def test_set_code_keeps_outcome(public_envelope) -> None:
    public_envelope.error().set_code(418)
    assert public_envelope.outcome is OutcomeKind.error
    assert public_envelope.status_code == 418


def test_named_outcomes_set_codes_and_messages(public_envelope) -> None:
    public_envelope.success()
    assert (public_envelope.outcome, public_envelope.status_code) == (OutcomeKind.success, 200)
    assert public_envelope.body()["success"]["message"] == "Request successful."

    public_envelope.error()
    assert (public_envelope.outcome, public_envelope.status_code) == (OutcomeKind.error, 404)
    assert public_envelope.body()["error"]["message"] == "Oops, something went wrong!"

    public_envelope.unauthorized()
    assert (public_envelope.outcome, public_envelope.status_code) == (OutcomeKind.unauthorized, 403)
    assert public_envelope.body()["error"]["message"] == UNAUTHORIZED_MESSAGE


def test_success_without_data_keeps_existing_payload(public_envelope) -> None:
    public_envelope.set_data({"a": 1}).success("ok")
    assert public_envelope.body()["success"]["data"] == {"a": 1}


def test_error_without_data_resets_payload(public_envelope) -> None:
    public_envelope.set_data({"a": 1}).error("nope")
    assert public_envelope.body()["error"]["data"] == {}


def test_set_data_rejects_unsupported_payload(public_envelope) -> None:
    with pytest.raises(InvalidArgument):
        public_envelope.set_data([1, 2, 3])  # type: ignore[arg-type]


def test_set_data_none_defaults_to_empty_mapping(public_envelope) -> None:
    assert public_envelope.set_data(None).body()["error"]["data"] == {}


@pytest.mark.asyncio
async def test_unset_outcome_sends_500(public_envelope) -> None:
    response = await public_envelope.send()

    assert response.status_code == 500
    assert _json(response) == {
        "error": {"message": UNKNOWN_ERROR_MESSAGE, "devMessage": "", "data": {}}
    }


@pytest.mark.asyncio
async def test_unset_outcome_ignores_custom_code(public_envelope) -> None:
    response = await public_envelope.set_code(201).send()
    assert response.status_code == 500


@pytest.mark.asyncio
async def test_public_success_wire_format(public_envelope) -> None:
    response = await public_envelope.success("ok").set_data({"a": 1}).send()

    assert response.status_code == 200
    assert _json(response) == {"success": {"message": "ok", "devMessage": "", "data": {"a": 1}}}


@pytest.mark.asyncio
async def test_response_data_is_serialized_string(public_envelope) -> None:
    response = await public_envelope.success().set_response_data({"a": 1}).send()

    data = _json(response)["success"]["data"]
    assert data == {"response": '{"a":1}'}
    assert isinstance(data["response"], str)


@pytest.mark.asyncio
async def test_response_data_defaults_to_empty_object(public_envelope) -> None:
    response = await public_envelope.success().set_response_data().send()
    assert _json(response)["success"]["data"] == {"response": "{}"}


@pytest.mark.asyncio
async def test_error_with_dev_message(public_envelope) -> None:
    response = await public_envelope.error("Missing item.").set_dev_message("KeyError: 'sku'").send()

    assert response.status_code == 404
    assert _json(response) == {
        "error": {"message": "Missing item.", "devMessage": "KeyError: 'sku'", "data": {}}
    }


@pytest.mark.asyncio
async def test_send_twice_is_rejected(public_envelope) -> None:
    await public_envelope.success().send()
    with pytest.raises(InvalidState):
        await public_envelope.send()


@pytest.mark.asyncio
async def test_private_rejected_credential_overrides_success(factory, identity_service, make_request) -> None:
    envelope = factory.new(make_request(headers={"Authorization": "Bearer revoked"}))

    response = await (
        envelope.success("ok").set_data({"secret": "value"}).set_dev_message("trace").send()
    )

    assert response.status_code == 403
    assert _json(response) == {
        "error": {"message": UNAUTHORIZED_MESSAGE, "devMessage": "", "data": {}}
    }
    assert identity_service.calls == ["revoked"]


@pytest.mark.asyncio
async def test_private_missing_credential_overrides_unset(factory, identity_service, make_request) -> None:
    response = await factory.new(make_request()).send()

    assert response.status_code == 403
    assert _json(response)["error"]["message"] == UNAUTHORIZED_MESSAGE
    assert identity_service.calls == []


@pytest.mark.asyncio
async def test_private_valid_credential_keeps_outcome(factory, identity_service, make_request) -> None:
    request = make_request(cookies={"__session": GOOD_TOKEN})
    envelope = factory.new(request)

    response = await envelope.success("ok").set_data({"a": 1}).send()

    assert response.status_code == 200
    assert _json(response)["success"]["data"] == {"a": 1}
    assert request.state.user.subject == "user-1"


@pytest.mark.asyncio
async def test_gate_reuses_earlier_verification(factory, verifier, identity_service, make_request) -> None:
    request = make_request(headers={"Authorization": f"Bearer {GOOD_TOKEN}"})
    await verifier.verify(request)

    response = await factory.new(request).success().send()

    assert response.status_code == 200
    assert len(identity_service.calls) == 1


@pytest.mark.asyncio
async def test_public_envelope_skips_identity_service(factory, identity_service, make_request) -> None:
    envelope = factory.new(make_request(headers={"Authorization": "Bearer anything"}))
    response = await envelope.set_public(True).success().send()

    assert response.status_code == 200
    assert identity_service.calls == []


def test_factory_applies_default_public(verifier, make_request) -> None:
    public = EnvelopeFactory(config=EnvelopeConfig(default_public=True), verifier=verifier)
    private = EnvelopeFactory(config=EnvelopeConfig(default_public=False), verifier=verifier)

    assert public.new(make_request()).is_public is True
    assert private.new(make_request()).is_public is False


def test_config_is_immutable() -> None:
    config = EnvelopeConfig(default_public=True)
    with pytest.raises(AttributeError):
        config.default_public = False  # type: ignore[misc]


@pytest.mark.asyncio
async def test_injected_response_headers_are_kept(factory, make_request) -> None:
    injected = Response()
    injected.set_cookie("theme", "dark")
    envelope = factory.new(make_request(), injected).set_public(True)

    response = await envelope.success().send()

    assert response.headers["set-cookie"].startswith("theme=dark")
    assert response.headers["content-type"] == "application/json"
