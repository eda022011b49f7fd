"""In-memory stand-ins for the asyncpg pool and the domain repositories.

Each fake repository mirrors the method signatures of its asyncpg counterpart and
keeps its rows in a shared ``FakeStore`` so services can be wired together exactly
as they are in production.
"""

from __future__ import annotations

import datetime as dt
from types import SimpleNamespace
from typing import Iterable, Sequence
from uuid import UUID, uuid4

import pytest

from app.domain.bring.models import BringItem, Take
from app.domain.bring.schemas import TakeSummary
from app.domain.bring.service import BringItemService
from app.domain.common.errors import ConflictError
from app.domain.events.invitations import EventInvitationService
from app.domain.events.models import Event, EventInvitation, Participant
from app.domain.events.participants import ParticipantRegistry
from app.domain.events.schemas import EventInvitationSummary, ParticipantSummary
from app.domain.events.service import EventsService
from app.domain.gifts.models import Gift, ListEvent, ListGift
from app.domain.gifts.schemas import ListEventSummary
from app.domain.gifts.service import GiftService
from app.domain.roles.models import EventRole, RoleEvent
from app.domain.roles.service import RoleDirectory
from app.domain.social.models import Friendship, Invitation, UserProfile
from app.domain.social.policy import canonical_pair
from app.domain.social.schemas import FriendRow, InvitationSummary
from app.domain.social.service import SocialService

SERVICE_MODULES = (
	"app.domain.social.service",
	"app.domain.events.service",
	"app.domain.events.participants",
	"app.domain.events.invitations",
	"app.domain.bring.service",
	"app.domain.gifts.service",
)


def _now() -> dt.datetime:
	return dt.datetime.now(dt.timezone.utc)


class _FakeTransaction:
	async def __aenter__(self):
		return None

	async def __aexit__(self, exc_type, exc, tb):
		return False


class _FakeAcquire:
	def __init__(self, conn):
		self._conn = conn

	async def __aenter__(self):
		return self._conn

	async def __aexit__(self, exc_type, exc, tb):
		return False


class _FakeConnection:
	def transaction(self):
		return _FakeTransaction()


class _FakePool:
	def __init__(self, conn):
		self._conn = conn

	def acquire(self):
		return _FakeAcquire(self._conn)


class FakeStore:
	"""Tables as plain dicts, keyed the way the unique constraints are."""

	def __init__(self) -> None:
		self.users: dict[UUID, UserProfile] = {}
		self.friends: dict[tuple[UUID, UUID], Friendship] = {}
		self.invitations: dict[UUID, Invitation] = {}
		self.roles: dict[str, RoleEvent] = {
			role.value: RoleEvent(id=uuid4(), name=role.value, created_at=_now()) for role in EventRole
		}
		self.events: dict[UUID, Event] = {}
		self.participants: dict[tuple[UUID, UUID], Participant] = {}
		self.event_invitations: dict[tuple[UUID, UUID], EventInvitation] = {}
		self.items: dict[UUID, BringItem] = {}
		self.takes: dict[tuple[UUID, UUID], Take] = {}
		self.lists: dict[UUID, ListGift] = {}
		self.gifts: dict[UUID, Gift] = {}
		self.links: dict[UUID, ListEvent] = {}

	# --- Seeding helpers ----------------------------------------------------

	def add_user(self, firstname: str = "Ada", lastname: str = "Lovelace", email: str | None = None) -> UserProfile:
		user_id = uuid4()
		profile = UserProfile(
			id=user_id,
			email=email or f"{firstname.lower()}.{user_id.hex[:6]}@example.com",
			firstname=firstname,
			lastname=lastname,
		)
		self.users[user_id] = profile
		return profile

	def befriend(self, user_a: UUID, user_b: UUID) -> Friendship:
		pair = canonical_pair(user_a, user_b)
		friendship = Friendship(id=uuid4(), user1_id=pair[0], user2_id=pair[1], created_at=_now())
		self.friends[pair] = friendship
		return friendship

	def role(self, role: EventRole) -> RoleEvent:
		return self.roles[role.value]

	def add_event(self, organizer_id: UUID, name: str = "Picnic", *, days_ahead: int = 7) -> Event:
		event = Event(
			id=uuid4(),
			name=name,
			description="Bring a blanket",
			date=dt.date.today() + dt.timedelta(days=days_ahead),
			time=dt.time(18, 30),
			address="Parc La Fontaine",
			organizer_id=organizer_id,
			created_at=_now(),
		)
		self.events[event.id] = event
		self.join(event.id, organizer_id, EventRole.SUPER_ADMIN)
		return event

	def join(self, event_id: UUID, user_id: UUID, role: EventRole) -> Participant:
		participant = Participant(
			id=uuid4(),
			event_id=event_id,
			user_id=user_id,
			role_id=self.role(role).id,
			created_at=_now(),
		)
		self.participants[(event_id, user_id)] = participant
		return participant

	def role_of(self, event_id: UUID, user_id: UUID) -> str | None:
		participant = self.participants.get((event_id, user_id))
		if participant is None:
			return None
		return self._role_by_id(participant.role_id).name

	def _role_by_id(self, role_id: UUID) -> RoleEvent | None:
		return next((role for role in self.roles.values() if role.id == role_id), None)


class FakeRolesRepo:
	def __init__(self, store: FakeStore) -> None:
		self.store = store

	async def get_by_name(self, name: str, *, conn=None):
		return self.store.roles.get(name)

	async def get_by_id(self, role_id: UUID, *, conn=None):
		return self.store._role_by_id(role_id)

	async def list_roles(self):
		return list(self.store.roles.values())

	async def insert_missing(self, names: Iterable[str]) -> int:
		created = 0
		for name in names:
			if name not in self.store.roles:
				self.store.roles[name] = RoleEvent(id=uuid4(), name=name, created_at=_now())
				created += 1
		return created


class FakeSocialRepo:
	def __init__(self, store: FakeStore) -> None:
		self.store = store

	async def get_user(self, user_id: UUID, *, conn):
		return self.store.users.get(user_id)

	async def get_user_by_email(self, email: str, *, conn):
		wanted = email.strip().lower()
		return next((user for user in self.store.users.values() if user.email.lower() == wanted), None)

	async def get_users(self, user_ids: list[UUID], *, conn):
		return [self.store.users[user_id] for user_id in user_ids if user_id in self.store.users]

	async def friendship_exists(self, pair, *, conn) -> bool:
		return pair in self.store.friends

	async def create_friendship(self, pair, *, conn):
		if pair in self.store.friends:
			raise ConflictError("friendship_exists")
		return self.store.befriend(*pair)

	async def ensure_friendship(self, pair, *, conn) -> bool:
		if pair in self.store.friends:
			return False
		self.store.befriend(*pair)
		return True

	async def delete_friendship(self, pair, *, conn) -> bool:
		return self.store.friends.pop(pair, None) is not None

	async def list_friends(self, user_id: UUID, *, conn):
		rows = []
		for friendship in self.store.friends.values():
			if user_id not in (friendship.user1_id, friendship.user2_id):
				continue
			other_id = friendship.user2_id if friendship.user1_id == user_id else friendship.user1_id
			friend = self.store.users[other_id]
			rows.append(
				FriendRow(
					id=friendship.id,
					friend_id=friend.id,
					created_at=friendship.created_at,
					email=friend.email,
					firstname=friend.firstname,
					lastname=friend.lastname,
					picture=friend.picture,
				)
			)
		return sorted(rows, key=lambda row: (row.firstname, row.lastname))

	async def get_invitation(self, sender_id: UUID, target_id: UUID, *, conn):
		return next(
			(
				invitation
				for invitation in self.store.invitations.values()
				if invitation.user_id == sender_id and invitation.request_id == target_id
			),
			None,
		)

	async def get_invitation_by_id(self, invitation_id: UUID, *, conn):
		return self.store.invitations.get(invitation_id)

	async def create_invitation(self, sender_id: UUID, target_id: UUID, *, conn):
		if await self.get_invitation(sender_id, target_id, conn=conn) is not None:
			raise ConflictError("invitation_exists")
		invitation = Invitation(id=uuid4(), user_id=sender_id, request_id=target_id, created_at=_now())
		self.store.invitations[invitation.id] = invitation
		return invitation

	async def delete_invitation(self, invitation_id: UUID, *, conn) -> None:
		self.store.invitations.pop(invitation_id, None)

	async def delete_invitations_between(self, user_a: UUID, user_b: UUID, *, conn) -> int:
		doomed = [
			invitation.id
			for invitation in self.store.invitations.values()
			if {invitation.user_id, invitation.request_id} == {user_a, user_b}
		]
		for invitation_id in doomed:
			del self.store.invitations[invitation_id]
		return len(doomed)

	async def delete_invitations_to(self, user_id: UUID, *, conn) -> int:
		doomed = [invitation.id for invitation in self.store.invitations.values() if invitation.request_id == user_id]
		for invitation_id in doomed:
			del self.store.invitations[invitation_id]
		return len(doomed)

	async def list_incoming(self, user_id: UUID, *, conn):
		summaries = []
		for invitation in self.store.invitations.values():
			if invitation.request_id != user_id:
				continue
			sender = self.store.users.get(invitation.user_id)
			summaries.append(
				InvitationSummary(
					id=invitation.id,
					user_id=invitation.user_id,
					request_id=invitation.request_id,
					created_at=invitation.created_at,
					sender_email=sender.email if sender else None,
					sender_firstname=sender.firstname if sender else None,
					sender_lastname=sender.lastname if sender else None,
				)
			)
		return sorted(summaries, key=lambda item: item.created_at, reverse=True)

	async def count_incoming(self, user_id: UUID, *, conn) -> int:
		return sum(1 for invitation in self.store.invitations.values() if invitation.request_id == user_id)


class FakeEventsRepo:
	def __init__(self, store: FakeStore) -> None:
		self.store = store

	async def create_event(self, *, conn, organizer_id, name, description, date, time, address):
		event = Event(
			id=uuid4(),
			name=name,
			description=description,
			date=date,
			time=time,
			address=address,
			organizer_id=organizer_id,
			created_at=_now(),
		)
		self.store.events[event.id] = event
		return event

	async def get_event(self, event_id: UUID, *, conn=None):
		return self.store.events.get(event_id)

	async def list_upcoming(self, user_id: UUID, *, today: dt.date):
		events = [
			self.store.events[event_id]
			for (event_id, member_id) in self.store.participants
			if member_id == user_id and self.store.events[event_id].date >= today
		]
		return sorted(events, key=lambda event: (event.date, event.time or dt.time.min))

	async def get_participant(self, event_id: UUID, user_id: UUID, *, with_role=True, with_event=False, conn=None):
		participant = self.store.participants.get((event_id, user_id))
		if participant is None:
			return None
		update = {}
		if with_role:
			update["role"] = self.store._role_by_id(participant.role_id)
		if with_event:
			update["event"] = self.store.events.get(event_id)
		return participant.model_copy(update=update)

	async def add_participant(self, *, conn, event_id: UUID, user_id: UUID, role_id: UUID):
		if (event_id, user_id) in self.store.participants:
			raise ConflictError("already_participant")
		participant = Participant(id=uuid4(), event_id=event_id, user_id=user_id, role_id=role_id, created_at=_now())
		self.store.participants[(event_id, user_id)] = participant
		return participant

	async def update_participant_role(self, participant_id: UUID, role_id: UUID, *, conn):
		for key, participant in self.store.participants.items():
			if participant.id == participant_id:
				updated = participant.model_copy(update={"role_id": role_id})
				self.store.participants[key] = updated
				return updated
		raise AssertionError("unknown participant")

	async def list_participants(self, event_id: UUID):
		summaries = []
		for (member_event_id, user_id), participant in self.store.participants.items():
			if member_event_id != event_id:
				continue
			user = self.store.users[user_id]
			summaries.append(
				ParticipantSummary(
					id=participant.id,
					user_id=user_id,
					role_id=participant.role_id,
					role_name=self.store._role_by_id(participant.role_id).name,
					email=user.email,
					firstname=user.firstname,
					lastname=user.lastname,
				)
			)
		return summaries

	async def participant_ids_among(self, event_id: UUID, user_ids: Sequence[UUID], *, conn) -> set[UUID]:
		return {user_id for user_id in user_ids if (event_id, user_id) in self.store.participants}

	async def friend_ids_among(self, user_id: UUID, user_ids: Sequence[UUID], *, conn) -> set[UUID]:
		return {other for other in user_ids if canonical_pair(user_id, other) in self.store.friends}

	async def invited_ids_among(self, event_id: UUID, user_ids: Sequence[UUID], *, conn) -> set[UUID]:
		return {user_id for user_id in user_ids if (event_id, user_id) in self.store.event_invitations}

	async def insert_invitations(self, event_id: UUID, organizer_id: UUID, user_ids: Sequence[UUID], *, conn):
		if any((event_id, user_id) in self.store.event_invitations for user_id in user_ids):
			raise ConflictError("already_invited")
		created = []
		for user_id in user_ids:
			invitation = EventInvitation(
				id=uuid4(),
				event_id=event_id,
				user_id=user_id,
				organizer_id=organizer_id,
				created_at=_now(),
			)
			self.store.event_invitations[(event_id, user_id)] = invitation
			created.append(invitation)
		return created

	async def get_invitation(self, event_id: UUID, user_id: UUID, *, conn):
		return self.store.event_invitations.get((event_id, user_id))

	async def delete_invitation(self, invitation_id: UUID, *, conn) -> None:
		for key, invitation in list(self.store.event_invitations.items()):
			if invitation.id == invitation_id:
				del self.store.event_invitations[key]

	async def list_invitations(self, user_id: UUID):
		summaries = []
		for (event_id, invitee_id), invitation in self.store.event_invitations.items():
			if invitee_id != user_id:
				continue
			event = self.store.events[event_id]
			organizer = self.store.users.get(invitation.organizer_id)
			summaries.append(
				EventInvitationSummary(
					id=invitation.id,
					event_id=event_id,
					user_id=user_id,
					organizer_id=invitation.organizer_id,
					created_at=invitation.created_at,
					event_name=event.name,
					event_date=event.date,
					event_time=event.time,
					event_address=event.address,
					organizer_firstname=organizer.firstname if organizer else None,
					organizer_lastname=organizer.lastname if organizer else None,
				)
			)
		return summaries

	async def count_invitations(self, user_id: UUID, *, conn) -> int:
		return sum(1 for (_, invitee_id) in self.store.event_invitations if invitee_id == user_id)


class FakeBringRepo:
	def __init__(self, store: FakeStore) -> None:
		self.store = store

	async def create_item(self, *, conn, event_id, name, requested_quantity, created_by_id):
		item = BringItem(
			id=uuid4(),
			event_id=event_id,
			name=name,
			requested_quantity=requested_quantity,
			created_by_id=created_by_id,
			created_at=_now(),
		)
		self.store.items[item.id] = item
		return item

	async def get_item(self, item_id: UUID, *, conn, for_update: bool = False):
		item = self.store.items.get(item_id)
		return item.model_copy() if item is not None else None

	async def upsert_take(self, *, conn, item_id: UUID, user_id: UUID, quantity: int):
		existing = self.store.takes.get((item_id, user_id))
		if existing is not None:
			take = existing.model_copy(update={"quantity": quantity, "updated_at": _now()})
		else:
			take = Take(id=uuid4(), bring_item_id=item_id, user_id=user_id, quantity=quantity, created_at=_now())
		self.store.takes[(item_id, user_id)] = take
		return take

	async def delete_take(self, item_id: UUID, user_id: UUID, *, conn):
		return self.store.takes.pop((item_id, user_id), None)

	async def take_quantities(self, item_id: UUID, *, conn) -> list[int]:
		return [take.quantity for (take_item_id, _), take in self.store.takes.items() if take_item_id == item_id]

	async def set_coverage(self, item_id: UUID, *, is_taken: bool, taken_at, conn):
		updated = self.store.items[item_id].model_copy(update={"is_taken": is_taken, "taken_at": taken_at})
		self.store.items[item_id] = updated
		return updated

	async def delete_item(self, item_id: UUID, *, conn) -> None:
		self.store.items.pop(item_id, None)
		for key in [key for key in self.store.takes if key[0] == item_id]:
			del self.store.takes[key]

	async def list_items(self, event_id: UUID, *, conn):
		return [item for item in self.store.items.values() if item.event_id == event_id]

	async def list_takes(self, item_ids: Sequence[UUID], *, conn):
		summaries = []
		for (item_id, user_id), take in self.store.takes.items():
			if item_id not in item_ids:
				continue
			user = self.store.users.get(user_id)
			summaries.append(
				TakeSummary(
					id=take.id,
					bring_item_id=item_id,
					user_id=user_id,
					quantity=take.quantity,
					created_at=take.created_at,
					firstname=user.firstname if user else None,
					lastname=user.lastname if user else None,
				)
			)
		return summaries


class FakeGiftsRepo:
	def __init__(self, store: FakeStore) -> None:
		self.store = store

	async def create_list(self, *, conn, user_id: UUID, name: str):
		gift_list = ListGift(id=uuid4(), name=name, user_id=user_id, created_at=_now())
		self.store.lists[gift_list.id] = gift_list
		return gift_list

	async def get_list(self, list_id: UUID, *, conn):
		return self.store.lists.get(list_id)

	async def list_user_lists(self, user_id: UUID, *, conn):
		return [gift_list for gift_list in self.store.lists.values() if gift_list.user_id == user_id]

	async def delete_list(self, list_id: UUID, *, conn) -> None:
		self.store.lists.pop(list_id, None)
		for gift_id in [gift.id for gift in self.store.gifts.values() if gift.list_id == list_id]:
			del self.store.gifts[gift_id]
		for link_id in [link.id for link in self.store.links.values() if link.list_id == list_id]:
			del self.store.links[link_id]

	async def insert_gifts(self, list_id: UUID, user_id: UUID, gifts, *, conn):
		created = []
		for gift in gifts:
			row = Gift(
				id=uuid4(),
				name=gift.name,
				quantity=gift.quantity,
				url=gift.url,
				list_id=list_id,
				user_id=user_id,
				created_at=_now(),
			)
			self.store.gifts[row.id] = row
			created.append(row)
		return created

	async def list_gifts(self, list_ids: Sequence[UUID], *, conn):
		return [gift for gift in self.store.gifts.values() if gift.list_id in list_ids]

	async def get_gift(self, gift_id: UUID, *, conn):
		return self.store.gifts.get(gift_id)

	async def delete_gift(self, gift_id: UUID, *, conn) -> None:
		self.store.gifts.pop(gift_id, None)

	async def set_gift_taken(self, gift_id: UUID, *, taken: bool, taken_by, conn):
		updated = self.store.gifts[gift_id].model_copy(update={"taken": taken, "taken_by": taken_by})
		self.store.gifts[gift_id] = updated
		return updated

	async def get_list_event(self, list_event_id: UUID, *, conn):
		return self.store.links.get(list_event_id)

	async def find_link_by_participant(self, participant_id: UUID, *, event_id=None, list_id=None, conn):
		for link in self.store.links.values():
			if link.participant_id != participant_id:
				continue
			if event_id is not None and link.event_id == event_id:
				return link
			if event_id is None and link.list_id == list_id:
				return link
		return None

	async def find_link_for_list(self, list_id: UUID, event_id: UUID, *, conn):
		return next(
			(link for link in self.store.links.values() if link.list_id == list_id and link.event_id == event_id),
			None,
		)

	async def create_list_event(self, *, conn, event_id: UUID, list_id: UUID, participant_id: UUID):
		link = ListEvent(id=uuid4(), event_id=event_id, list_id=list_id, participant_id=participant_id, created_at=_now())
		self.store.links[link.id] = link
		return link

	async def delete_list_event(self, list_event_id: UUID, *, conn) -> None:
		self.store.links.pop(list_event_id, None)

	async def list_shared(self, event_id: UUID, role_names: Sequence[str], *, conn):
		summaries = []
		for link in self.store.links.values():
			if link.event_id != event_id:
				continue
			participant = next(p for p in self.store.participants.values() if p.id == link.participant_id)
			if self.store._role_by_id(participant.role_id).name not in role_names:
				continue
			owner = self.store.users[participant.user_id]
			summaries.append(
				ListEventSummary(
					id=link.id,
					event_id=event_id,
					list_id=link.list_id,
					participant_id=participant.id,
					list_name=self.store.lists[link.list_id].name,
					owner_id=owner.id,
					owner_firstname=owner.firstname,
					owner_lastname=owner.lastname,
				)
			)
		return summaries

	async def get_owner_names(self, user_id: UUID, *, conn):
		user = self.store.users.get(user_id)
		return (user.firstname, user.lastname) if user else (None, None)


@pytest.fixture
def fake_pool(monkeypatch):
	pool = _FakePool(_FakeConnection())

	async def _get_pool():
		return pool

	for module in SERVICE_MODULES:
		monkeypatch.setattr(f"{module}.get_pool", _get_pool)
	return pool


@pytest.fixture
def store() -> FakeStore:
	return FakeStore()


@pytest.fixture
def sent_emails(monkeypatch):
	outbox: list[dict] = []

	async def _record(to_address, subject, template_key, data):
		outbox.append({"to": to_address, "subject": subject, "template": template_key, "data": dict(data)})

	monkeypatch.setattr("app.infra.mailer.send", _record)
	return outbox


@pytest.fixture
def services(store, fake_pool, sent_emails):
	roles = RoleDirectory(repository=FakeRolesRepo(store))
	events_repo = FakeEventsRepo(store)
	social_repo = FakeSocialRepo(store)
	participants = ParticipantRegistry(repository=events_repo, roles=roles)
	return SimpleNamespace(
		roles=roles,
		social=SocialService(repository=social_repo),
		events=EventsService(repository=events_repo, roles=roles),
		participants=participants,
		invitations=EventInvitationService(
			repository=events_repo,
			social_repository=social_repo,
			roles=roles,
			participants=participants,
		),
		bring=BringItemService(repository=FakeBringRepo(store), participants=participants),
		gifts=GiftService(repository=FakeGiftsRepo(store), participants=participants),
	)
