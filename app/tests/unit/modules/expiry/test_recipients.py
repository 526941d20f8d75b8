import pytest

from infrastructure.notifications.models import Role
from modules.expiry import RecipientResolver


@pytest.mark.unit
def test_system_rule_selects_by_role(catalog, rule_factory):
    recipients = RecipientResolver(catalog).resolve(rule_factory())

    assert {u.id for u in recipients} == {"user-1", "user-2"}


@pytest.mark.unit
def test_department_rule_includes_hotel_wide_roles(catalog, rule_factory):
    rule = rule_factory(
        hotel_id="hotel-1",
        department_id="dept-2",
        recipient_roles=[Role.HOTEL_ADMIN, Role.DEPARTMENT_MANAGER, Role.STAFF],
    )

    recipients = RecipientResolver(catalog).resolve(rule)

    assert [u.id for u in recipients] == ["user-1"]


@pytest.mark.unit
def test_department_members_match(catalog, rule_factory):
    rule = rule_factory(
        hotel_id="hotel-1", department_id="dept-1", recipient_roles=[Role.STAFF]
    )

    assert [u.id for u in RecipientResolver(catalog).resolve(rule)] == ["user-3"]


@pytest.mark.unit
def test_inactive_users_are_excluded(catalog, rule_factory, user_factory):
    catalog.add_user(user_factory(id="user-1", is_active=False))

    recipients = RecipientResolver(catalog).resolve(rule_factory())

    assert [u.id for u in recipients] == ["user-2"]
