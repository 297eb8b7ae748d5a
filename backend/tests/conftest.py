"""pytest fixtures: an in-memory Firestore double and patched Firebase Auth."""
from __future__ import annotations

import copy
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from firebase_admin import auth as firebase_auth
from firebase_admin import firestore
from google.api_core import exceptions as gexc
from google.cloud.firestore_v1.transforms import ArrayRemove, ArrayUnion

from salonhub.config import get_bucket, get_db, settings
from salonhub.main import app
from salonhub.repositories.paths import user_profile_path
from salonhub.schemas.principal import Principal

APP_ID = settings.firebase_app_id


# --------------------------------------------------------------------------- #
# In-memory Firestore
# --------------------------------------------------------------------------- #
class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentRef:
    def __init__(self, db, path):
        self._db = db
        self.path = path
        self.id = path.rsplit("/", 1)[-1]

    def collection(self, name):
        return FakeCollection(self._db, f"{self.path}/{name}")

    def get(self):
        self._db.check_reads()
        return FakeSnapshot(self, self._db.docs.get(self.path))

    def create(self, data):
        self._db.commit_ops([("create", self, data, False)])

    def set(self, data, merge=False):
        self._db.commit_ops([("set", self, data, merge)])

    def update(self, data):
        self._db.commit_ops([("update", self, data, False)])

    def delete(self):
        self._db.commit_ops([("delete", self, None, False)])


class FakeCollection:
    def __init__(self, db, path):
        self._db = db
        self.path = path

    def document(self, doc_id=None):
        return FakeDocumentRef(self._db, f"{self.path}/{doc_id or uuid.uuid4().hex[:20]}")

    def stream(self):
        self._db.check_reads()
        depth = self.path.count("/") + 1
        for path, data in list(self._db.docs.items()):
            if path.startswith(self.path + "/") and path.count("/") == depth:
                yield FakeSnapshot(FakeDocumentRef(self._db, path), copy.deepcopy(data))


class FakeCollectionGroup:
    def __init__(self, db, name):
        self._db = db
        self._name = name

    def stream(self):
        self._db.check_reads()
        for path, data in list(self._db.docs.items()):
            parts = path.split("/")
            if len(parts) >= 2 and parts[-2] == self._name:
                yield FakeSnapshot(FakeDocumentRef(self._db, path), copy.deepcopy(data))


class FakeBatch:
    def __init__(self, db):
        self._db = db
        self._ops = []

    def set(self, ref, data, merge=False):
        self._ops.append(("set", ref, data, merge))

    def update(self, ref, data):
        self._ops.append(("update", ref, data, False))

    def delete(self, ref):
        self._ops.append(("delete", ref, None, False))

    def commit(self):
        self._db.commit_ops(self._ops)
        self._db.batch_commits += 1


class FakeFirestore:
    """
    Enough of google.cloud.firestore.Client for the repositories: documents,
    sub-collections, collection groups, atomic batches and the SERVER_TIMESTAMP /
    ArrayUnion / ArrayRemove transforms. Every write resolves SERVER_TIMESTAMP to a
    clock that advances one second per write.
    """

    def __init__(self):
        self.docs = {}
        self.fail_writes = False
        self.fail_reads = False
        self.batch_commits = 0
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def document(self, path):
        return FakeDocumentRef(self, path)

    def collection(self, path):
        return FakeCollection(self, path)

    def collection_group(self, name):
        return FakeCollectionGroup(self, name)

    def batch(self):
        return FakeBatch(self)

    def check_reads(self):
        if self.fail_reads:
            raise gexc.ServiceUnavailable("firestore unavailable")

    def _tick(self):
        self._clock += timedelta(seconds=1)
        return self._clock

    @staticmethod
    def _resolve(current, value, now):
        if value is firestore.SERVER_TIMESTAMP:
            return now
        if isinstance(value, ArrayUnion):
            out = list(current) if isinstance(current, list) else []
            out.extend(v for v in value.values if v not in out)
            return out
        if isinstance(value, ArrayRemove):
            return [v for v in (current or []) if v not in value.values]
        return copy.deepcopy(value)

    def commit_ops(self, ops):
        if self.fail_writes:
            raise gexc.ServiceUnavailable("firestore unavailable")
        now = self._tick()
        staged = dict(self.docs)
        for kind, ref, data, merge in ops:
            existing = staged.get(ref.path)
            if kind == "create":
                if existing is not None:
                    raise gexc.AlreadyExists(f"Document already exists: {ref.path}")
                staged[ref.path] = {k: self._resolve(None, v, now) for k, v in data.items()}
            elif kind == "set":
                base = dict(existing) if (merge and existing is not None) else {}
                for k, v in data.items():
                    base[k] = self._resolve(base.get(k), v, now)
                staged[ref.path] = base
            elif kind == "update":
                if existing is None:
                    raise gexc.NotFound(f"No document to update: {ref.path}")
                base = dict(existing)
                for k, v in data.items():
                    base[k] = self._resolve(base.get(k), v, now)
                staged[ref.path] = base
            elif kind == "delete":
                staged.pop(ref.path, None)
        self.docs = staged

    # helpers for tests
    def profile(self, uid):
        return copy.deepcopy(self.docs.get(user_profile_path(APP_ID, uid)))

    def salons(self):
        prefix = f"artifacts/{APP_ID}/public/data/salons/"
        return {
            p[len(prefix):]: copy.deepcopy(d)
            for p, d in self.docs.items()
            if p.startswith(prefix) and "/" not in p[len(prefix):]
        }


class FakeBlob:
    def __init__(self, name):
        self.name = name
        self.content = None
        self.content_type = None
        self.public = False

    def upload_from_file(self, fileobj, content_type=None):
        self.content = fileobj.read()
        self.content_type = content_type

    def make_public(self):
        self.public = True

    @property
    def public_url(self):
        return f"https://storage.googleapis.com/test-bucket/{self.name}"

    def generate_signed_url(self, expiration=None):
        return f"https://signed.example/{self.name}"


class FakeBucket:
    def __init__(self):
        self.blobs = {}

    def blob(self, name):
        return self.blobs.setdefault(name, FakeBlob(name))


# --------------------------------------------------------------------------- #
# Firebase Auth
# --------------------------------------------------------------------------- #
class _UserRecord:
    def __init__(self, uid, email):
        self.uid = uid
        self.email = email


IDENTITIES = {
    "admin-1": {"email": "admin@salon.test", "name": "Ada Admin"},
    "user-1": {"email": "carla@salon.test", "name": "Carla Customer", "picture": "https://img.test/c.png"},
    "owner-1": {"email": "a@b.com", "name": "Olive Owner"},
    "owner-2": {"email": "second@b.com", "name": "Sam Second"},
    "ghost-1": {"email": "ghost@b.com"},
}


def auth_header(uid):
    return {"Authorization": f"Bearer token-{uid}"}


def _principal(uid):
    ident = IDENTITIES[uid]
    return Principal(uid=uid, email=ident.get("email"), display_name=ident.get("name"), picture=ident.get("picture"))


@pytest.fixture(autouse=True)
def fake_auth(monkeypatch):
    """Token 'token-<uid>' verifies for every uid in IDENTITIES; e-mail lookups use the same table."""

    def verify_id_token(id_token, check_revoked=False, app=None):
        uid = id_token[len("token-"):] if id_token.startswith("token-") else None
        if uid not in IDENTITIES:
            raise firebase_auth.InvalidIdTokenError("Could not verify token")
        ident = IDENTITIES[uid]
        return {"uid": uid, **ident}

    def get_user_by_email(email, app=None):
        if not isinstance(email, str) or "@" not in email:
            raise ValueError(f"Malformed email address string: {email!r}.")
        for uid, ident in IDENTITIES.items():
            if ident.get("email") == email:
                return _UserRecord(uid, email)
        raise firebase_auth.UserNotFoundError(f"No user record found for the provided email: {email}")

    monkeypatch.setattr(firebase_auth, "verify_id_token", verify_id_token)
    monkeypatch.setattr(firebase_auth, "get_user_by_email", get_user_by_email)


@pytest.fixture
def principal_of():
    """Verified identity of one of the known test users."""
    return _principal


@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def bucket():
    return FakeBucket()


@pytest.fixture
def seed_profile(db):
    def _seed(uid, role="customer", **extra):
        ident = IDENTITIES.get(uid, {})
        data = {
            "uid": uid,
            "email": ident.get("email"),
            "displayName": ident.get("name"),
            "photoURL": None,
            "phoneNumber": None,
            "address": None,
            "role": role,
            "ownedSalons": [],
            "associatedSalons": [],
            "favoriteSalons": [],
            "createdAt": datetime(2023, 6, 1, tzinfo=timezone.utc),
            "lastLoginAt": datetime(2023, 6, 1, tzinfo=timezone.utc),
        }
        data.update(extra)
        db.docs[user_profile_path(APP_ID, uid)] = data
        return data
    return _seed


@pytest.fixture
def seed_salon(db):
    def _seed(salon_id="salon-1", **fields):
        data = {
            "name": "Glow Bar",
            "address": "12 Elm St",
            "description": "Full service",
            "ownerId": "owner-1",
            "createdAt": datetime(2023, 7, 1, tzinfo=timezone.utc),
            "updatedAt": datetime(2023, 7, 1, tzinfo=timezone.utc),
        }
        data.update(fields)
        db.docs[f"artifacts/{APP_ID}/public/data/salons/{salon_id}"] = data
        return salon_id
    return _seed


@pytest.fixture
def admin(seed_profile):
    seed_profile("admin-1", role="admin")
    return _principal("admin-1")


@pytest.fixture
def client(db, bucket):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_bucket] = lambda: bucket
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def call(client):
    """POST a callable the way the web SDK does."""
    def _call(name, data=None, uid=None):
        headers = auth_header(uid) if uid else {}
        return client.post(f"/{name}", json={"data": data}, headers=headers)
    return _call
