from datetime import timedelta
from types import SimpleNamespace

import pytest
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient
from jose import jwt

from phonebook.api.dependencies import get_person_service
from phonebook.api.security import decode_identity, optional_identity, require_identity
from phonebook.core.config import settings
from phonebook.core.exceptions import ApplicationError, UnauthorizedError
from phonebook.core.security import create_access_token, verify_access_token


def test_token_round_trip_carries_id_and_username():
    token = create_access_token("65f0aa", username="ada")

    payload = verify_access_token(token)

    assert payload["id"] == "65f0aa"
    assert payload["username"] == "ada"
    assert "exp" not in payload


def test_expired_token_is_rejected():
    token = create_access_token("65f0aa", expires_delta=timedelta(seconds=-5))

    with pytest.raises(UnauthorizedError):
        verify_access_token(token)


def test_token_signed_with_other_secret_is_rejected():
    forged = jwt.encode({"id": "65f0aa"}, "not-the-secret", algorithm="HS256")

    with pytest.raises(UnauthorizedError):
        decode_identity(forged)


def test_claim_without_id_is_rejected():
    token = jwt.encode({"username": "ada"}, settings.SECRET, algorithm=settings.JWT_ALGORITHM)

    with pytest.raises(UnauthorizedError) as exc_info:
        decode_identity(token)
    assert exc_info.value.message == "Token missing or invalid"


def _guarded_app(enforce_ownership: bool = False) -> FastAPI:
    app = FastAPI()
    app.dependency_overrides[get_person_service] = lambda: SimpleNamespace(enforce_ownership=enforce_ownership)

    @app.exception_handler(ApplicationError)
    async def _handle(_, exc: ApplicationError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.get("/required")
    async def required(identity=Depends(require_identity)):
        return {"id": identity.id}

    @app.get("/optional")
    async def optional(identity=Depends(optional_identity)):
        return {"id": identity.id if identity else None}

    return app


def test_require_identity_reads_bearer_header():
    client = TestClient(_guarded_app())
    token = create_access_token("65f0aa")

    response = client.get("/required", headers={"Authorization": f"bearer {token}"})

    assert response.status_code == 200
    assert response.json() == {"id": "65f0aa"}


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Authorization": "Basic abc"},
        {"Authorization": "Bearer not-a-jwt"},
    ],
)
def test_require_identity_rejects_missing_or_invalid(headers):
    client = TestClient(_guarded_app())

    response = client.get("/required", headers=headers)

    assert response.status_code == 401
    assert response.json() == {"error": "Token missing or invalid"}


def test_optional_identity_ignores_tokens_without_ownership_policy():
    client = TestClient(_guarded_app(enforce_ownership=False))

    assert client.get("/optional").json() == {"id": None}
    response = client.get("/optional", headers={"Authorization": "Bearer junk"})
    assert response.status_code == 200
    assert response.json() == {"id": None}


def test_optional_identity_checks_tokens_under_ownership_policy():
    client = TestClient(_guarded_app(enforce_ownership=True))
    token = create_access_token("65f0aa")

    assert client.get("/optional").json() == {"id": None}
    assert client.get("/optional", headers={"Authorization": f"Bearer {token}"}).json() == {"id": "65f0aa"}
    assert client.get("/optional", headers={"Authorization": "Bearer junk"}).status_code == 401
