from uuid import uuid4

import pytest

from app.domain.common.errors import BadRequestError, ForbiddenError, NotFoundError, NotParticipantError
from app.domain.events import policies
from app.domain.events.models import Participant
from app.domain.roles.models import EventRole, RoleEvent


def _participant(role_name: str | None) -> Participant:
	role_id = uuid4()
	return Participant(
		id=uuid4(),
		event_id=uuid4(),
		user_id=uuid4(),
		role_id=role_id,
		role=RoleEvent(id=role_id, name=role_name) if role_name else None,
	)


def test_event_role_parse():
	assert EventRole.parse("superAdmin") is EventRole.SUPER_ADMIN
	assert EventRole.parse("gift") is EventRole.GIFT
	assert EventRole.parse("organizer") is None
	assert EventRole.parse(None) is None


def test_require_participant_raises_unauthorized():
	with pytest.raises(NotParticipantError) as exc_info:
		policies.require_participant(None, "not_participant")
	assert exc_info.value.status_code == 401


@pytest.mark.parametrize("role", ["superAdmin", "admin"])
def test_managers_may_invite(role):
	participant = _participant(role)
	assert policies.require_event_manager(participant) is participant


@pytest.mark.parametrize("role", ["gift", "participant", None])
def test_non_managers_rejected(role):
	with pytest.raises(ForbiddenError):
		policies.require_event_manager(_participant(role))


def test_super_admin_target_is_immutable():
	with pytest.raises(ForbiddenError) as exc_info:
		policies.ensure_role_update_allowed(_participant("superAdmin"), _participant("superAdmin"))
	assert exc_info.value.detail == "super_admin_immutable"


def test_admin_cannot_change_admin():
	with pytest.raises(ForbiddenError) as exc_info:
		policies.ensure_role_update_allowed(_participant("admin"), _participant("admin"))
	assert exc_info.value.detail == "super_admin_required"


def test_super_admin_can_change_admin():
	target = _participant("admin")
	assert policies.ensure_role_update_allowed(_participant("superAdmin"), target) is target


def test_admin_can_change_participant():
	target = _participant("participant")
	assert policies.ensure_role_update_allowed(_participant("admin"), target) is target


def test_role_update_missing_target():
	with pytest.raises(NotFoundError):
		policies.ensure_role_update_allowed(_participant("superAdmin"), None)


def test_assignable_roles():
	with pytest.raises(NotFoundError):
		policies.ensure_assignable_role(None)
	with pytest.raises(ForbiddenError):
		policies.ensure_assignable_role(RoleEvent(id=uuid4(), name="superAdmin"))
	gift = RoleEvent(id=uuid4(), name="gift")
	assert policies.ensure_assignable_role(gift) is gift


def test_ensure_invitable_rejects_whole_batch():
	friend, stranger, member = uuid4(), uuid4(), uuid4()
	policies.ensure_invitable([friend], friend_ids={friend}, participant_ids=set())
	with pytest.raises(BadRequestError) as exc_info:
		policies.ensure_invitable([friend, stranger], friend_ids={friend}, participant_ids=set())
	assert exc_info.value.detail == "not_friend"
	with pytest.raises(BadRequestError) as exc_info:
		policies.ensure_invitable([member], friend_ids={member}, participant_ids={member})
	assert exc_info.value.detail == "already_participant"


def test_ensure_not_invited():
	policies.ensure_not_invited(set())
	with pytest.raises(BadRequestError):
		policies.ensure_not_invited({uuid4()})


@pytest.mark.parametrize("role", ["superAdmin", "admin", "gift"])
def test_gift_sharers(role):
	policies.ensure_can_share_gifts(_participant(role))


def test_plain_participant_cannot_share_gifts():
	with pytest.raises(BadRequestError) as exc_info:
		policies.ensure_can_share_gifts(_participant("participant"))
	assert exc_info.value.detail == "gift_role_required"


def test_bring_item_delete_rules():
	creator = uuid4()
	policies.ensure_can_delete_bring_item(None, created_by_id=creator, user_id=creator)
	policies.ensure_can_delete_bring_item(_participant("superAdmin"), created_by_id=creator, user_id=uuid4())
	policies.ensure_can_delete_bring_item(_participant("Host"), created_by_id=creator, user_id=uuid4())
	with pytest.raises(ForbiddenError):
		policies.ensure_can_delete_bring_item(_participant("gift"), created_by_id=creator, user_id=uuid4())
	with pytest.raises(NotParticipantError):
		policies.ensure_can_delete_bring_item(None, created_by_id=creator, user_id=uuid4())
