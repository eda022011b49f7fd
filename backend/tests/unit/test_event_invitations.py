from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi import BackgroundTasks

from app.domain.common.errors import BadRequestError, ForbiddenError, InvalidRequestError, NotFoundError
from app.domain.social.models import ResponseOutcome
from app.domain.social.policy import canonical_pair
from app.domain.roles.models import EventRole
from app.infra import mailer


def _organizer_with_friends(store, *names):
	organizer = store.add_user("Olga")
	event = store.add_event(organizer.id, "Board games")
	friends = []
	for name in names:
		friend = store.add_user(name)
		store.befriend(organizer.id, friend.id)
		friends.append(friend)
	return organizer, event, friends


@pytest.mark.asyncio
async def test_bulk_invite_creates_invitations_and_sends_one_email_each(services, store, sent_emails):
	organizer, event, (ann, ben) = _organizer_with_friends(store, "Ann", "Ben")

	created = await services.invitations.bulk_invite([ann.id, ben.id], organizer.id, event.id)

	assert {invitation.user_id for invitation in created} == {ann.id, ben.id}
	assert set(store.event_invitations) == {(event.id, ann.id), (event.id, ben.id)}
	assert sorted(email["to"] for email in sent_emails) == sorted([ann.email, ben.email])
	assert all(email["template"] == mailer.EVENT_INVITATION for email in sent_emails)
	data = sent_emails[0]["data"]
	assert data["eventTitle"] == "Board games"
	assert data["eventTime"] == "18:30"
	assert data["organizerFirstname"] == "Olga"


@pytest.mark.asyncio
async def test_bulk_invite_is_all_or_nothing(services, store, sent_emails):
	organizer, event, (ann,) = _organizer_with_friends(store, "Ann")
	stranger = store.add_user("Stranger")

	with pytest.raises(BadRequestError) as exc_info:
		await services.invitations.bulk_invite([ann.id, stranger.id], organizer.id, event.id)

	assert exc_info.value.detail == "not_friend"
	assert store.event_invitations == {}
	assert sent_emails == []


@pytest.mark.asyncio
async def test_bulk_invite_rejects_existing_participant(services, store):
	organizer, event, (ann,) = _organizer_with_friends(store, "Ann")
	store.join(event.id, ann.id, EventRole.PARTICIPANT)

	with pytest.raises(BadRequestError) as exc_info:
		await services.invitations.bulk_invite([ann.id], organizer.id, event.id)

	assert exc_info.value.detail == "already_participant"


@pytest.mark.asyncio
async def test_bulk_invite_rejects_already_invited(services, store):
	organizer, event, (ann, ben) = _organizer_with_friends(store, "Ann", "Ben")
	await services.invitations.bulk_invite([ann.id], organizer.id, event.id)

	with pytest.raises(BadRequestError) as exc_info:
		await services.invitations.bulk_invite([ben.id, ann.id], organizer.id, event.id)

	assert exc_info.value.detail == "already_invited"
	assert (event.id, ben.id) not in store.event_invitations


@pytest.mark.asyncio
async def test_bulk_invite_requires_manager(services, store):
	organizer, event, (ann,) = _organizer_with_friends(store, "Ann")
	guest = store.add_user("Guest")
	store.join(event.id, guest.id, EventRole.GIFT)
	store.befriend(guest.id, ann.id)

	with pytest.raises(ForbiddenError):
		await services.invitations.bulk_invite([ann.id], guest.id, event.id)


@pytest.mark.asyncio
async def test_bulk_invite_deduplicates_candidates(services, store):
	organizer, event, (ann,) = _organizer_with_friends(store, "Ann")

	created = await services.invitations.bulk_invite([ann.id, ann.id], organizer.id, event.id)

	assert len(created) == 1


@pytest.mark.asyncio
async def test_bulk_invite_needs_candidates(services, store):
	organizer, event, _ = _organizer_with_friends(store)

	with pytest.raises(InvalidRequestError):
		await services.invitations.bulk_invite([], organizer.id, event.id)


@pytest.mark.asyncio
async def test_accept_adds_participant_and_confirms_friendship(services, store):
	organizer = store.add_user("Olga")
	event = store.add_event(organizer.id)
	invitee = store.add_user("Ivy")
	store.befriend(organizer.id, invitee.id)
	await services.invitations.bulk_invite([invitee.id], organizer.id, event.id)
	# a stale friend request between the pair is cleared by accepting
	del store.friends[canonical_pair(organizer.id, invitee.id)]
	await services.social.request_or_confirm(organizer.id, invitee.id)

	outcome = await services.invitations.respond(invitee.id, event.id, True)

	assert outcome is ResponseOutcome.ACCEPTED
	assert store.role_of(event.id, invitee.id) == "participant"
	assert store.event_invitations == {}
	assert canonical_pair(organizer.id, invitee.id) in store.friends
	assert store.invitations == {}


@pytest.mark.asyncio
async def test_decline_only_consumes_invitation(services, store):
	organizer, event, (ann,) = _organizer_with_friends(store, "Ann")
	await services.invitations.bulk_invite([ann.id], organizer.id, event.id)

	outcome = await services.invitations.respond(ann.id, event.id, False)

	assert outcome is ResponseOutcome.DECLINED
	assert store.role_of(event.id, ann.id) is None
	assert store.event_invitations == {}


@pytest.mark.asyncio
async def test_respond_without_invitation(services, store):
	organizer, event, (ann,) = _organizer_with_friends(store, "Ann")

	with pytest.raises(NotFoundError) as exc_info:
		await services.invitations.respond(ann.id, event.id, True)

	assert exc_info.value.detail == "invitation_not_found"


@pytest.mark.asyncio
async def test_notification_counts(services, store):
	organizer, event, (ann,) = _organizer_with_friends(store, "Ann")
	await services.invitations.bulk_invite([ann.id], organizer.id, event.id)
	for name in ("Ben", "Cid"):
		sender = store.add_user(name)
		await services.social.request_or_confirm(ann.id, sender.id)

	counts = await services.invitations.notification_counts(ann.id)

	assert counts.pending_event_invitations == 1
	assert counts.pending_friend_invitations == 2
	listed = await services.invitations.list_invitations(ann.id)
	assert [item.event_id for item in listed] == [event.id]


@pytest.mark.asyncio
async def test_unknown_event_is_not_participant(services, store):
	organizer = store.add_user("Olga")

	with pytest.raises(ForbiddenError):
		await services.invitations.bulk_invite([uuid4()], organizer.id, uuid4())


@pytest.mark.asyncio
async def test_bulk_invite_emails_wait_for_background_run(services, store, sent_emails):
	organizer, event, (ann, ben) = _organizer_with_friends(store, "Ann", "Ben")
	background = BackgroundTasks()

	await services.invitations.bulk_invite([ann.id, ben.id], organizer.id, event.id, background=background)

	assert sent_emails == []
	assert len(store.event_invitations) == 2

	await background()

	assert sorted(email["to"] for email in sent_emails) == sorted([ann.email, ben.email])
