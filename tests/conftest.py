"""
tests/conftest.py

In-memory stand-ins for the Motor database and the Razorpay gateway.

The fake collection understands just the query/update operators the service
uses: equality (including dotted paths into arrays of sub-documents),
$ne, $in, $gt, $set / $setOnInsert / $inc / $push / $pull / $addToSet with
upsert, and single-stage $set pipelines for find_one_and_update.
Collections start with the unique indexes database_setup creates.
"""

import copy
import types
from datetime import datetime

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from identities import OWNER
from lessonhub.payments.gateway import CheckoutSession

UNIQUE_INDEXES = {
    "users": {"email"},
    "payments": {"transactionId"},
    "loveReacts": {"lessonId"},
    "favorites": {"lessonId"},
}


def _resolve(doc, path):
    values = [doc]
    for part in path.split("."):
        nxt = []
        for value in values:
            if isinstance(value, dict):
                if part in value:
                    nxt.append(value[part])
            elif isinstance(value, list):
                for item in value:
                    if isinstance(item, dict) and part in item:
                        nxt.append(item[part])
        values = nxt

    out = []
    for value in values:
        out.append(value)
        if isinstance(value, list):
            out.extend(value)
    return out


def _is_operator_dict(cond):
    return isinstance(cond, dict) and cond and all(k.startswith("$") for k in cond)


def _match_condition(values, cond):
    if not _is_operator_dict(cond):
        return cond in values

    for op, arg in cond.items():
        if op == "$ne":
            if arg in values:
                return False
        elif op == "$in":
            if not values:
                if None not in arg:
                    return False
            elif not any(v in arg for v in values):
                return False
        elif op == "$gt":
            if not any(isinstance(v, (int, float)) and v > arg for v in values):
                return False
        else:
            raise NotImplementedError(op)
    return True


def _matches(doc, query):
    return all(_match_condition(_resolve(doc, key), cond) for key, cond in query.items())


def _apply_update(doc, update, inserting=False):
    for op, fields in update.items():
        for key, value in fields.items():
            if op == "$set":
                doc[key] = copy.deepcopy(value)
            elif op == "$setOnInsert":
                if inserting:
                    doc[key] = copy.deepcopy(value)
            elif op == "$inc":
                doc[key] = doc.get(key, 0) + value
            elif op == "$push":
                doc.setdefault(key, []).append(copy.deepcopy(value))
            elif op == "$addToSet":
                items = doc.setdefault(key, [])
                if value not in items:
                    items.append(copy.deepcopy(value))
            elif op == "$pull":
                items = doc.get(key) or []
                if isinstance(value, dict):
                    doc[key] = [
                        i for i in items
                        if not (isinstance(i, dict) and all(i.get(k) == v for k, v in value.items()))
                    ]
                else:
                    doc[key] = [i for i in items if i != value]
            else:
                raise NotImplementedError(op)


def _field(doc, path):
    value = doc
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _evaluate(expr, doc):
    """Aggregation expressions used by the update pipelines"""
    if isinstance(expr, str) and expr.startswith("$"):
        return _field(doc, expr[1:])
    if isinstance(expr, list):
        return [_evaluate(e, doc) for e in expr]
    if not isinstance(expr, dict):
        return expr
    if not _is_operator_dict(expr):
        return {k: _evaluate(v, doc) for k, v in expr.items()}

    (op, arg), = expr.items()
    if op == "$literal":
        return copy.deepcopy(arg)

    args = _evaluate(arg, doc)
    if op == "$ifNull":
        return next((a for a in args if a is not None), None)
    if op == "$add":
        return sum(args)
    if op == "$multiply":
        product = 1
        for a in args:
            product *= a
        return product
    if op == "$divide":
        return args[0] / args[1]
    if op == "$concatArrays":
        return [item for a in args for item in a]
    raise NotImplementedError(op)


def _apply_pipeline(doc, pipeline):
    for stage in pipeline:
        (op, fields), = stage.items()
        if op != "$set":
            raise NotImplementedError(op)
        # Every expression in a stage sees the document as it entered the stage
        snapshot = copy.deepcopy(doc)
        for key, expr in fields.items():
            doc[key] = _evaluate(expr, snapshot)


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs
        self._skip = 0
        self._limit = None

    def sort(self, key, direction=1):
        keys = key if isinstance(key, list) else [(key, direction)]
        for field, order in reversed(keys):
            self._docs.sort(
                key=lambda d: (d.get(field) is None, d.get(field)),
                reverse=order == -1
            )
        return self

    def skip(self, n):
        self._skip = n
        return self

    def limit(self, n):
        self._limit = n or None
        return self

    async def to_list(self, length=None):
        docs = self._docs[self._skip:]
        cap = self._limit or length
        if cap:
            docs = docs[:cap]
        return [copy.deepcopy(d) for d in docs]


class FakeCollection:
    def __init__(self, name):
        self.name = name
        self.docs = []
        self.unique_fields = set(UNIQUE_INDEXES.get(name, ()))

    async def create_index(self, keys, unique=False, **kwargs):
        if unique and isinstance(keys, str):
            self.unique_fields.add(keys)
        return keys

    def _check_unique(self, candidate):
        for field in self.unique_fields:
            if field not in candidate:
                continue
            for doc in self.docs:
                if doc is not candidate and doc.get(field) == candidate[field]:
                    raise DuplicateKeyError(f"E11000 duplicate key error {self.name}.{field}")

    async def insert_one(self, document):
        doc = copy.deepcopy(document)
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(doc)
        document["_id"] = doc["_id"]
        return types.SimpleNamespace(inserted_id=doc["_id"], acknowledged=True)

    async def find_one(self, query=None, projection=None):
        for doc in self.docs:
            if _matches(doc, query or {}):
                return copy.deepcopy(doc)
        return None

    def find(self, query=None, projection=None):
        return FakeCursor([d for d in self.docs if _matches(d, query or {})])

    async def count_documents(self, query, limit=None):
        count = sum(1 for d in self.docs if _matches(d, query))
        return min(count, limit) if limit else count

    async def update_one(self, query, update, upsert=False):
        for doc in self.docs:
            if _matches(doc, query):
                before = copy.deepcopy(doc)
                _apply_update(doc, update)
                modified = int(doc != before)
                return types.SimpleNamespace(matched_count=1, modified_count=modified, upserted_id=None)

        if not upsert:
            return types.SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

        doc = {k: copy.deepcopy(v) for k, v in query.items() if "." not in k and not _is_operator_dict(v)}
        doc.setdefault("_id", ObjectId())
        _apply_update(doc, update, inserting=True)
        self._check_unique(doc)
        self.docs.append(doc)
        return types.SimpleNamespace(matched_count=0, modified_count=0, upserted_id=doc["_id"])

    async def find_one_and_update(self, query, update, projection=None,
                                  return_document=ReturnDocument.BEFORE, **kwargs):
        for doc in self.docs:
            if _matches(doc, query):
                before = copy.deepcopy(doc)
                if isinstance(update, list):
                    _apply_pipeline(doc, update)
                else:
                    _apply_update(doc, update)
                return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before
        return None

    async def delete_one(self, query):
        for i, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[i]
                return types.SimpleNamespace(deleted_count=1)
        return types.SimpleNamespace(deleted_count=0)


class FakeDatabase:
    def __init__(self):
        self._collections = {}

    def __getitem__(self, name):
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    async def command(self, name):
        return {"ok": 1}


class FakeGateway:
    """Razorpay stand-in: sessions are plain dicts keyed by id"""

    def __init__(self):
        self.sessions = {}
        self.created = []
        self.retrieved = []

    def add_session(self, session_id, email, status="paid",
                    lesson_id="", payment_id="pay_001", amount=1500.0):
        self.sessions[session_id] = CheckoutSession(
            id=session_id,
            status=status,
            paid=status == "paid",
            transaction_id=payment_id if status == "paid" else None,
            amount=amount,
            currency="INR",
            metadata={"email": email, "lessonId": lesson_id},
        )

    def create_checkout_session(self, amount, currency, email, callback_url, lesson_id=None):
        session_id = f"plink_{len(self.created) + 1}"
        self.created.append({
            "id": session_id, "amount": amount, "currency": currency,
            "email": email, "callback_url": callback_url, "lesson_id": lesson_id,
        })
        return {"id": session_id, "url": f"https://rzp.io/l/{session_id}"}

    def retrieve_session(self, session_id):
        self.retrieved.append(session_id)
        return self.sessions[session_id]


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def gateway():
    return FakeGateway()


async def seed_lesson(db, **overrides):
    lesson = {
        "title": "Patience pays",
        "description": "What waiting taught me",
        "authorEmail": OWNER,
        "accessLevel": "free",
        "isPublic": True,
        "createdAt": datetime.utcnow(),
        "updatedAt": datetime.utcnow(),
        "reports": [],
        "reviews": [],
        "reportCount": 0,
        "reviewCount": 0,
        "averageRating": 0.0,
    }
    lesson.update(overrides)
    result = await db.lessons.insert_one(lesson)
    return str(result.inserted_id)


@pytest.fixture
def seed():
    return seed_lesson
