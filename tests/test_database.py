"""Database handle tests"""

from skygear.database import new_record
from skygear.models import AccessControl, AccessControlEntry, AccessLevel, User, get_default_access_control
from skygear.persistent_store import PersistentStore


def test_new_record_id_prefixed_with_type():
    record = new_record("note", title="hello")

    assert record["_id"].startswith("note/")
    assert record["title"] == "hello"


def test_save_applies_default_access_control(container, transport):
    container.public_database().set_default_access_control(AccessControl.public_read_only())

    container.public_database().save([new_record("note", title="a")]).result(timeout=5)

    payload = transport.calls_for("record:save")[0].payload
    assert payload["database_id"] == "_public"
    assert payload["records"][0]["_access"] == [{"level": "read", "public": True}]


def test_explicit_access_not_overridden(container, transport):
    container.public_database().set_default_access_control(AccessControl.public_read_only())
    record = new_record("note", _access=[])

    container.public_database().save([record]).result(timeout=5)

    assert transport.calls_for("record:save")[0].payload["records"][0]["_access"] == []


def test_no_default_access_leaves_record_untouched(container, transport):
    container.public_database().save([new_record("note")]).result(timeout=5)

    assert "_access" not in transport.calls_for("record:save")[0].payload["records"][0]


def test_default_access_control_persisted(container, context):
    acl = AccessControl(entries=(AccessControlEntry(level=AccessLevel.WRITE, role="admin"),))

    container.public_database().set_default_access_control(acl)

    assert get_default_access_control() == acl
    assert PersistentStore(context).default_access_control == acl


def test_private_database_query(container, transport):
    container.auth().update_current_user(User(user_id="u1", access_token="T1"))

    container.private_database().query("note", predicate=["eq", {"$type": "keypath", "$val": "title"}, "a"], limit=10).result(timeout=5)

    call = transport.calls_for("record:query")[0]
    assert call.payload["database_id"] == "_private"
    assert call.payload["record_type"] == "note"
    assert call.payload["limit"] == 10
    assert call.access_token == "T1"


def test_delete_sends_ids(container, transport):
    container.public_database().delete(["note/1", "note/2"]).result(timeout=5)

    assert transport.calls_for("record:delete")[0].payload["ids"] == ["note/1", "note/2"]


def test_access_control_wire_format():
    acl = AccessControl(
        entries=(
            AccessControlEntry(level=AccessLevel.READ, public=True),
            AccessControlEntry(level=AccessLevel.WRITE, user_id="u1"),
        )
    )

    assert acl.to_wire() == [{"level": "read", "public": True}, {"level": "write", "user_id": "u1"}]
    assert AccessControl.from_wire(acl.to_wire()) == acl
    assert acl.public_access == AccessLevel.READ
