from types import SimpleNamespace

import pytest

from workorders.errors import AccessDenied
from workorders.services.access import Action, Caller, authorize, is_allowed

ADMIN = Caller(id="a1", role="admin")
STAFF = Caller(id="s1", role="staff")
OTHER = Caller(id="s2", role="staff")
CLIENT = Caller(id="c1", role="client")

WO = SimpleNamespace(assigned_to="s1", work_order_number="WO-20240601-001")

ASSIGNED_ONLY = [
    Action.UPDATE, Action.CHANGE_STATUS, Action.MANAGE_MATERIALS,
    Action.RECORD_SIGNATURE, Action.MANAGE_INVITATIONS,
]


@pytest.mark.parametrize("action", list(Action))
def test_admin_may_do_everything(action):
    assert is_allowed(ADMIN, action, WO)


@pytest.mark.parametrize("action", list(Action))
def test_client_may_do_nothing(action):
    assert not is_allowed(CLIENT, action, WO)


@pytest.mark.parametrize("action", ASSIGNED_ONLY)
def test_staff_mutations_require_assignment(action):
    assert is_allowed(STAFF, action, WO)
    assert not is_allowed(OTHER, action, WO)


def test_any_staff_may_read_and_create():
    assert is_allowed(OTHER, Action.READ, WO)
    assert is_allowed(OTHER, Action.CREATE)


def test_only_admin_deletes_and_views_stats():
    assert not is_allowed(STAFF, Action.DELETE, WO)
    assert not is_allowed(STAFF, Action.VIEW_STATS)
    assert not is_allowed(STAFF, Action.DELETE_INVITATION, WO)


def test_unassigned_work_order_blocks_staff():
    unassigned = SimpleNamespace(assigned_to=None, work_order_number="WO-20240601-002")
    assert not is_allowed(STAFF, Action.CHANGE_STATUS, unassigned)


def test_authorize_raises_access_denied():
    with pytest.raises(AccessDenied, match="not assigned"):
        authorize(OTHER, Action.CHANGE_STATUS, WO)
    with pytest.raises(AccessDenied):
        authorize(CLIENT, Action.READ, WO)
    authorize(STAFF, Action.CHANGE_STATUS, WO)
