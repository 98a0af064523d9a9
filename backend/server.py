"""FastAPI application exposing the expense collection and its user pool."""
from __future__ import annotations

import argparse
import json
import logging
import os
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import List, Sequence

from fastapi import Depends, FastAPI, Header, HTTPException, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from . import crud, database, models, schemas

LOG = logging.getLogger(__name__)

DEFAULT_SESSION_TTL_MINUTES = 12 * 60
DEFAULT_USER_POOL_ID = "local-pool"

_bearer = HTTPBearer(auto_error=False)


def session_ttl() -> timedelta:
    raw = os.environ.get("TRACKER_SESSION_TTL_MINUTES")
    minutes = int(raw) if raw else DEFAULT_SESSION_TTL_MINUTES
    return timedelta(minutes=minutes)


def user_pool_id() -> str:
    return os.environ.get("TRACKER_USER_POOL_ID", DEFAULT_USER_POOL_ID)


def user_pool_client_id() -> str | None:
    return os.environ.get("TRACKER_USER_POOL_CLIENT_ID") or None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def current_token(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> str:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Not authenticated")
    return credentials.credentials


def current_user(
    token: str = Depends(current_token),
    db: Session = Depends(database.get_db),
) -> models.User:
    try:
        return crud.resolve_token(db, token)
    except crud.InvalidCredentialsError as exc:
        raise _unauthorized(str(exc)) from exc


@asynccontextmanager
async def lifespan(_: FastAPI):
    database.init_db()
    LOG.info("Expense backend ready (user pool %s)", user_pool_id())
    yield


app = FastAPI(title="Expense Tracker Backend", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post("/auth/sign-up", response_model=schemas.UserRead, status_code=status.HTTP_201_CREATED, tags=["auth"])
def sign_up(credentials: schemas.Credentials, db: Session = Depends(database.get_db)) -> schemas.UserRead:
    try:
        user = crud.create_user(db, credentials)
    except crud.EntityConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return schemas.UserRead.model_validate(user)


@app.post("/auth/sign-in", response_model=schemas.TokenRead, tags=["auth"])
def sign_in(payload: schemas.SignIn, db: Session = Depends(database.get_db)) -> schemas.TokenRead:
    expected_client = user_pool_client_id()
    if expected_client is not None and payload.client_id != expected_client:
        raise _unauthorized("Unknown user pool client")
    try:
        user = crud.authenticate(db, payload.username, payload.password)
    except crud.InvalidCredentialsError as exc:
        raise _unauthorized(str(exc)) from exc
    token = crud.issue_token(db, user, session_ttl())
    return schemas.TokenRead(access_token=token.token, expires_at=token.expires_at, username=user.username)


@app.get("/auth/session", response_model=schemas.UserRead, tags=["auth"])
def read_session(user: models.User = Depends(current_user)) -> schemas.UserRead:
    return schemas.UserRead.model_validate(user)


@app.post("/auth/sign-out", status_code=status.HTTP_204_NO_CONTENT, tags=["auth"])
def sign_out(token: str = Depends(current_token), db: Session = Depends(database.get_db)) -> Response:
    crud.revoke_token(db, token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/expenses", response_model=List[schemas.ExpenseRead])
def list_expenses(
    response: Response,
    if_none_match: str | None = Header(default=None),
    _: models.User = Depends(current_user),
    db: Session = Depends(database.get_db),
):
    expenses = [schemas.ExpenseRead.model_validate(row) for row in crud.list_expenses(db)]
    etag = f'"{crud.snapshot_etag(expenses)}"'
    if if_none_match is not None and if_none_match.strip() == etag:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers={"ETag": etag})
    response.headers["ETag"] = etag
    return expenses


@app.post(
    "/expenses",
    response_model=schemas.ExpenseRead,
    status_code=status.HTTP_201_CREATED,
)
def create_expense(
    expense_in: schemas.ExpenseCreate,
    _: models.User = Depends(current_user),
    db: Session = Depends(database.get_db),
) -> schemas.ExpenseRead:
    return schemas.ExpenseRead.model_validate(crud.create_expense(db, expense_in))


@app.get("/expenses/{expense_id}", response_model=schemas.ExpenseRead)
def get_expense(
    expense_id: str,
    _: models.User = Depends(current_user),
    db: Session = Depends(database.get_db),
) -> schemas.ExpenseRead:
    try:
        return schemas.ExpenseRead.model_validate(crud.get_expense(db, expense_id))
    except crud.EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@app.delete("/expenses/{expense_id}", response_model=schemas.ExpenseRead)
def delete_expense(
    expense_id: str,
    _: models.User = Depends(current_user),
    db: Session = Depends(database.get_db),
) -> schemas.ExpenseRead:
    try:
        return schemas.ExpenseRead.model_validate(crud.delete_expense(db, expense_id))
    except crud.EntityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@app.get("/health", tags=["system"])
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


def build_outputs(url: str, *, client_id: str | None = None) -> schemas.OutputsDocument:
    """Describe this deployment in the format consumed by the desktop client."""

    base = url.rstrip("/")
    return schemas.OutputsDocument(
        auth=schemas.AuthOutputs(
            url=base,
            user_pool_id=user_pool_id(),
            user_pool_client_id=client_id or user_pool_client_id() or "desktop",
        ),
        data=schemas.DataOutputs(url=base),
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Expense tracker backend service")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    outputs = sub.add_parser("outputs", help="Write the client outputs document")
    outputs.add_argument("--url", required=True, help="Public base URL of the API")
    outputs.add_argument("--client-id", default=None)
    outputs.add_argument("--path", default="tracker_outputs.json")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Console script entry point used by `tracker-backend`."""

    args = _build_parser().parse_args(argv)
    if args.command == "outputs":
        document = build_outputs(args.url, client_id=args.client_id)
        with open(args.path, "w", encoding="utf-8") as handle:
            json.dump(document.model_dump(mode="json"), handle, indent=2)
            handle.write("\n")
        LOG.info("Wrote outputs document to %s", args.path)
        return 0

    import uvicorn

    uvicorn.run(app, host=args.host, port=args.port, log_level="info")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
