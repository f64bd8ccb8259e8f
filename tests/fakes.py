"""In-memory stand-ins for the Supabase client used by the database modules."""

from types import SimpleNamespace


class FakeQuery:
    def __init__(self, client, table):
        self.client = client
        self.table = table
        self.ops = []

    def _op(self, name, *args, **kwargs):
        self.ops.append((name, args, kwargs))
        return self

    def select(self, *a, **k):
        return self._op("select", *a, **k)

    def insert(self, *a, **k):
        return self._op("insert", *a, **k)

    def update(self, *a, **k):
        return self._op("update", *a, **k)

    def delete(self, *a, **k):
        return self._op("delete", *a, **k)

    def eq(self, *a, **k):
        return self._op("eq", *a, **k)

    def in_(self, *a, **k):
        return self._op("in_", *a, **k)

    def order(self, *a, **k):
        return self._op("order", *a, **k)

    def limit(self, *a, **k):
        return self._op("limit", *a, **k)

    def execute(self):
        self.client.executed.append(self)
        queue = self.client.responses.get(self.table) or []
        result = queue.pop(0) if queue else []
        if isinstance(result, Exception):
            raise result
        return SimpleNamespace(data=result)


class FakeBucket:
    def __init__(self, storage, name):
        self.storage = storage
        self.name = name

    def upload(self, path, content, options):
        if self.storage.fail_upload:
            raise self.storage.fail_upload
        self.storage.uploads.append((self.name, path, content, options))

    def get_public_url(self, path):
        return f"https://files.example.com/{self.name}/{path}"

    def remove(self, paths):
        self.storage.removed.append((self.name, paths))


class FakeStorage:
    def __init__(self):
        self.uploads = []
        self.removed = []
        self.fail_upload = None

    def from_(self, name):
        return FakeBucket(self, name)


class FakeAuthAdmin:
    def __init__(self):
        self.created = []
        self.deleted = []
        self.fail_create = None

    def create_user(self, attrs):
        if self.fail_create:
            raise self.fail_create
        self.created.append(attrs)
        return SimpleNamespace(user=SimpleNamespace(id=f"auth-{len(self.created)}"))

    def delete_user(self, user_id):
        self.deleted.append(user_id)


class FakeClient:
    """Responses are queued per table; each execute() pops the next one."""

    def __init__(self, **responses):
        self.responses = {k: list(v) for k, v in responses.items()}
        self.executed = []
        self.storage = FakeStorage()
        self.auth = SimpleNamespace(admin=FakeAuthAdmin())

    def table(self, name):
        return FakeQuery(self, name)

    def queries(self, table):
        return [q for q in self.executed if q.table == table]
