from __future__ import annotations

from ghinbox.core.models import Meta, Notification, NotificationMap, Notifications, Subject, sync


def _n(notification_id: str, title: str = "", done: bool = False, to_delete: bool = False) -> Notification:
    return Notification(
        id=notification_id,
        subject=Subject(title=title),
        meta=Meta(done=done, to_delete=to_delete),
    )


def test_id_list_keeps_order() -> None:
    n = Notifications(_n(i) for i in ["0", "1", "2"])
    assert n.id_list() == ["0", "1", "2"]


def test_compact_drops_none_and_to_delete() -> None:
    n0 = _n("0")
    n1 = _n("1")
    gone = _n("2", to_delete=True)
    n = Notifications([None, None, n0, None, gone, n1, None])

    got = n.compact()

    assert got == [n0, n1]
    assert got[0] is n0
    assert got[1] is n1


def test_compact_is_idempotent() -> None:
    n = Notifications([_n("0"), None, _n("1", to_delete=True), _n("2")])
    once = n.compact()
    assert once.compact() == once


def test_compact_empty() -> None:
    assert Notifications().compact() == []


def test_uniq_keeps_first_occurrence() -> None:
    a, b, c = _n("0", "a"), _n("1", "b"), _n("2", "c")
    a2, b2, c2 = _n("0", "a'"), _n("1", "b'"), _n("2", "c'")
    n = Notifications([a, b, c, a2, b2, c2])

    got = n.uniq()

    assert [x.subject.title for x in got] == ["a", "b", "c"]
    assert len(got.uniq()) == len(got)


def test_uniq_skips_none() -> None:
    n = Notifications([None, _n("0"), None])
    assert n.uniq().id_list() == ["0"]


def test_map_last_write_wins() -> None:
    first = _n("0", "first")
    last = _n("0", "last")
    got = Notifications([first, _n("1"), last]).map()

    assert isinstance(got, NotificationMap)
    assert len(got) == 2
    assert got["0"] is last


def test_map_list_roundtrip_sorted() -> None:
    n0, n1, n2 = _n("0"), _n("1"), _n("2")
    n = Notifications([n2, n0, n1])

    listed = n.map().list()
    listed.sort()

    assert [x.id for x in listed] == ["0", "1", "2"]


def test_filter_from_ids_keeps_collection_order() -> None:
    n0, n1, n2 = _n("0"), _n("1"), _n("2")
    n = Notifications([n0, n1, n2])

    assert n.filter_from_ids(["0", "2"]) == [n0, n2]
    assert n.filter_from_ids(["2", "0"]) == [n0, n2]
    assert n.filter_from_ids([]) == []


def test_sync_carries_local_meta_onto_remote_content() -> None:
    local = Notifications([_n("A", "old", done=True)])
    remote = Notifications([_n("A", "new")])

    got = sync(local, remote)

    assert len(got) == 1
    assert got[0].id == "A"
    assert got[0].meta.done is True
    assert got[0].subject.title == "new"


def test_sync_keeps_to_delete_flag() -> None:
    local = Notifications([_n("A", to_delete=True)])
    got = sync(local, Notifications([_n("A")]))
    assert got[0].meta.to_delete is True


def test_sync_new_remote_has_default_meta() -> None:
    got = sync(Notifications([_n("A", done=True)]), Notifications([_n("B")]))
    assert got.id_list() == ["B"]
    assert got[0].meta == Meta()


def test_sync_empty_remote_is_empty() -> None:
    assert sync(Notifications([_n("A", done=True)]), Notifications()) == []


def test_sync_follows_remote_order() -> None:
    local = Notifications([_n("1"), _n("2"), _n("3")])
    remote = Notifications([_n("3"), _n("1")])
    assert sync(local, remote).id_list() == ["3", "1"]


def test_from_api_decodes_github_payload() -> None:
    payload = {
        "id": "1234",
        "unread": True,
        "reason": "review_requested",
        "updated_at": "2024-01-02T03:04:05Z",
        "url": "https://api.github.com/notifications/threads/1234",
        "subject": {
            "title": "Fix the thing",
            "url": "https://api.github.com/repos/octo/repo/pulls/1",
            "type": "PullRequest",
        },
        "repository": {"name": "repo", "full_name": "octo/repo", "private": False},
        "extra": "ignored",
    }

    n = Notification.from_api(payload)

    assert n.id == "1234"
    assert n.reason == "review_requested"
    assert n.subject.type == "PullRequest"
    assert n.repository.full_name == "octo/repo"
    assert n.meta == Meta()


def test_cache_dict_preserves_meta() -> None:
    original = _n("7", "title", done=True)
    restored = Notification.from_dict(original.to_dict())
    assert restored == original


def test_from_list_keeps_null_entries() -> None:
    restored = Notifications.from_list([None, _n("1").to_dict()])
    assert restored[0] is None
    assert restored.compact().id_list() == ["1"]
