"""Core domain models.

A notification carries two kinds of data: the remote payload returned by the
GitHub API, which is replaced wholesale on every refresh, and ``Meta``, the
locally-owned processing state that must survive refreshes.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Optional

LOGGER = logging.getLogger(__name__)


@dataclass
class Meta:
    """Local processing state, never sourced from the API."""

    done: bool = False
    to_delete: bool = False


@dataclass
class Subject:
    title: str = ""
    url: Optional[str] = None
    type: str = ""
    state: Optional[str] = None
    html_url: Optional[str] = None


@dataclass
class Repository:
    name: str = ""
    full_name: str = ""
    private: bool = False
    html_url: Optional[str] = None


@dataclass
class User:
    login: str = ""
    type: str = ""


@dataclass
class Notification:
    """One notification thread from the user's inbox."""

    id: str
    unread: bool = True
    reason: str = ""
    updated_at: str = ""
    url: str = ""
    subject: Subject = field(default_factory=Subject)
    repository: Repository = field(default_factory=Repository)
    author: User = field(default_factory=User)
    meta: Meta = field(default_factory=Meta)

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "Notification":
        """Decode one element of the notifications API response.

        Unknown keys are ignored and ``meta`` always starts from defaults.
        """

        subject = payload.get("subject") or {}
        repository = payload.get("repository") or {}
        return cls(
            id=str(payload["id"]),
            unread=bool(payload.get("unread", True)),
            reason=payload.get("reason") or "",
            updated_at=payload.get("updated_at") or "",
            url=payload.get("url") or "",
            subject=Subject(
                title=subject.get("title") or "",
                url=subject.get("url"),
                type=subject.get("type") or "",
            ),
            repository=Repository(
                name=repository.get("name") or "",
                full_name=repository.get("full_name") or "",
                private=bool(repository.get("private", False)),
                html_url=repository.get("html_url"),
            ),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Notification":
        """Decode the cache representation produced by ``to_dict``."""

        return cls(
            id=str(data["id"]),
            unread=bool(data.get("unread", True)),
            reason=data.get("reason", ""),
            updated_at=data.get("updated_at", ""),
            url=data.get("url", ""),
            subject=Subject(**(data.get("subject") or {})),
            repository=Repository(**(data.get("repository") or {})),
            author=User(**(data.get("author") or {})),
            meta=Meta(**(data.get("meta") or {})),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def label(self) -> str:
        """Short one-line description used in logs and action output."""

        return f"{self.repository.full_name} {self.subject.type} {self.subject.title} ({self.id})".strip()


class NotificationMap(dict):
    """Notifications keyed by id."""

    def list(self) -> "Notifications":
        # Mapping order carries no meaning here; sort the result if needed.
        return Notifications(self.values())


class Notifications(list):
    """Ordered collection of notifications.

    Order is significant: it drives display order and the "first occurrence
    wins" rule of ``uniq``. Entries may be ``None`` when decoded from an old
    cache, every operation tolerates that.
    """

    def compact(self) -> "Notifications":
        """Drop ``None`` entries and those marked for deletion."""

        return Notifications(n for n in self if n is not None and not n.meta.to_delete)

    def uniq(self) -> "Notifications":
        """Keep the first occurrence of each id."""

        seen: set[str] = set()
        result = Notifications()
        for n in self:
            if n is None or n.id in seen:
                continue
            seen.add(n.id)
            result.append(n)
        return result

    def map(self) -> NotificationMap:
        return NotificationMap((n.id, n) for n in self if n is not None)

    def id_list(self) -> list[str]:
        return [n.id for n in self if n is not None]

    def filter_from_ids(self, ids: Iterable[str]) -> "Notifications":
        """Return the notifications whose id is in ``ids``, in collection order."""

        wanted = set(ids)
        return Notifications(n for n in self if n is not None and n.id in wanted)

    def sort(self, *args, **kwargs) -> None:  # type: ignore[override]
        if not args and not kwargs:
            kwargs["key"] = lambda n: "" if n is None else n.id
        super().sort(*args, **kwargs)

    def to_list(self) -> list[dict[str, Any]]:
        return [n.to_dict() for n in self if n is not None]

    @classmethod
    def from_list(cls, items: Iterable[Optional[dict[str, Any]]]) -> "Notifications":
        return cls(Notification.from_dict(item) if item is not None else None for item in items)


def sync(local: Notifications, remote: Notifications) -> Notifications:
    """Reconcile the cached collection with a fresh remote fetch.

    The remote side decides which notifications exist and what they contain;
    the local side decides their processing state. Entries only present
    locally are dropped.
    """

    known = local.map()
    result = Notifications()
    for n in remote:
        if n is None:
            continue
        previous = known.get(n.id)
        if previous is not None:
            n.meta = Meta(done=previous.meta.done, to_delete=previous.meta.to_delete)
        result.append(n)

    dropped = len(set(known) - set(result.id_list()))
    if dropped:
        LOGGER.debug("Sync dropped %s notification(s) no longer returned by the API", dropped)
    return result
