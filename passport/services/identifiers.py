"""
Resolve raw user identifiers (numeric ids or emails) to user records.

Each token is classified once into a tagged :class:`Identifier`; nothing
downstream re-parses the raw string.
"""
from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Union

from sqlalchemy import func
from sqlmodel import Session, col, select

from passport.models import User

_NUMERIC = re.compile(r"^[0-9]+$")

# Largest value an INTEGER primary key can hold; bigger tokens cannot match
MAX_USER_ID = 2**31 - 1


class IdentifierKind(str, Enum):
    USER_ID = "user_id"
    EMAIL = "email"


class Identifier(NamedTuple):
    raw: str
    kind: IdentifierKind
    value: Union[int, str]

    @classmethod
    def parse(cls, raw: str) -> "Identifier":
        token = raw.strip()
        if _NUMERIC.match(token):
            return cls(raw, IdentifierKind.USER_ID, int(token))
        return cls(raw, IdentifierKind.EMAIL, token)


@dataclass
class ResolvedIdentifiers:
    users: List[User] = field(default_factory=list)
    invalid: List[str] = field(default_factory=list)
    # Tokens that matched a user, repeats included
    matched: int = 0

    @property
    def user_ids(self) -> List[int]:
        return [u.id for u in self.users]


def resolve_identifiers(session: Session, identifiers: Iterable[str]) -> ResolvedIdentifiers:
    """Partition tokens into known users and unresolvable tokens.

    Ids are looked up by primary key and emails by exact email. Emails with
    no exact match fall back to a case-insensitive match, accepted only when
    it names a single user. Users come back deduplicated in order of first
    mention. Unmatched tokens are returned ids first, then emails, each in
    input order. Lookup faults propagate; unmatched tokens never raise.
    """
    parsed = [Identifier.parse(raw) for raw in identifiers]
    id_tokens = [p for p in parsed if p.kind is IdentifierKind.USER_ID]
    email_tokens = [p for p in parsed if p.kind is IdentifierKind.EMAIL]

    by_id: dict[int, User] = {}
    wanted_ids = {p.value for p in id_tokens if p.value <= MAX_USER_ID}
    if wanted_ids:
        rows = session.exec(select(User).where(col(User.id).in_(sorted(wanted_ids)))).all()
        by_id = {u.id: u for u in rows}

    by_email: dict[str, User] = {}
    wanted_emails = {p.value for p in email_tokens}
    if wanted_emails:
        rows = session.exec(select(User).where(col(User.email).in_(sorted(wanted_emails)))).all()
        by_email = {u.email: u for u in rows}

    # Case-insensitive fallback, used only where exactly one user matches
    unmatched = {p.value.lower() for p in email_tokens if p.value not in by_email}
    folded: dict[str, User] = {}
    if unmatched:
        rows = session.exec(select(User).where(func.lower(User.email).in_(sorted(unmatched)))).all()
        candidates: dict[str, list[User]] = defaultdict(list)
        for u in rows:
            candidates[u.email.lower()].append(u)
        folded = {key: users[0] for key, users in candidates.items() if len(users) == 1}

    def lookup_email(value: str) -> Optional[User]:
        return by_email.get(value) or folded.get(value.lower())

    result = ResolvedIdentifiers()
    seen: set[int] = set()
    for p in parsed:
        if p.kind is IdentifierKind.USER_ID:
            user = by_id.get(p.value)
        else:
            user = lookup_email(p.value)
        if user is None:
            continue
        result.matched += 1
        if user.id not in seen:
            seen.add(user.id)
            result.users.append(user)

    result.invalid = [p.raw for p in id_tokens if p.value not in by_id]
    result.invalid += [p.raw for p in email_tokens if lookup_email(p.value) is None]
    return result
