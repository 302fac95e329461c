"""Tests for the role-permission binder."""

import pytest

from rolekeeper.core.rbac import ErrorKind, diff_permission_sets
from rolekeeper.db.models import Role, RolePermission


def _bindings(session, role_id):
    return {
        b.permission_id: b
        for b in session.query(RolePermission).filter(RolePermission.role_id == role_id)
    }


class TestDiffPermissionSets:
    """Test the set difference used by reconcile."""

    def test_partitions_ids(self):
        """Test ids are split into remove, add and unchanged."""
        to_remove, to_add, unchanged = diff_permission_sets([2, 3, 4], [1, 2, 3])
        assert to_remove == [4]
        assert to_add == [1]
        assert unchanged == [2, 3]

    def test_duplicates_collapsed(self):
        """Test repeated ids are reported once, in first-seen order."""
        to_remove, to_add, unchanged = diff_permission_sets([1, 1], [3, 2, 3, 1])
        assert to_remove == []
        assert to_add == [3, 2]
        assert unchanged == [1]

    @pytest.mark.parametrize("current,desired", [([], []), ([5], [5])])
    def test_no_changes(self, current, desired):
        """Test equal sets produce nothing to do."""
        to_remove, to_add, _ = diff_permission_sets(current, desired)
        assert to_remove == [] and to_add == []


class TestAssign:
    """Test binding a single permission."""

    def test_assign_new(self, rbac, db_session, role_factory, permission_factory):
        """Test a new active binding is inserted."""
        role = role_factory()
        permission = permission_factory()

        result = rbac.bindings.assign(role.id, permission.id, assigned_by="admin")

        assert result.success
        assert result.message == "Permission assigned to role successfully."
        assert result.payload.is_active
        assert result.payload.created_by == "admin"
        assert list(_bindings(db_session, role.id)) == [permission.id]

    def test_assign_twice_is_idempotent(self, rbac, db_session, role_factory, permission_factory):
        """Test assigning an active binding again changes nothing."""
        role = role_factory()
        permission = permission_factory()
        first = rbac.bindings.assign(role.id, permission.id).payload

        result = rbac.bindings.assign(role.id, permission.id)

        assert result.success
        assert result.message == "Permission already assigned to the role."
        assert result.payload.id == first.id
        assert db_session.query(RolePermission).count() == 1

    def test_assign_reactivates(self, rbac, role_factory, permission_factory, binding_factory):
        """Test assigning over an inactive binding re-activates the same row."""
        role = role_factory()
        permission = permission_factory()
        binding = binding_factory(role, permission, is_active=False)

        result = rbac.bindings.assign(role.id, permission.id)

        assert result.success
        assert result.message == "Permission re-activated for the role."
        assert result.payload.id == binding.id
        assert result.payload.is_active

    def test_assign_missing_role(self, rbac, permission_factory):
        """Test an unknown role fails."""
        result = rbac.bindings.assign(99, permission_factory().id)
        assert result.error == ErrorKind.NOT_FOUND
        assert result.message == "Role not found."

    def test_assign_missing_permission(self, rbac, role_factory):
        """Test an unknown permission fails."""
        result = rbac.bindings.assign(role_factory().id, 99)
        assert result.error == ErrorKind.NOT_FOUND
        assert result.message == "Permission not found."

    def test_assign_bumps_role_version(self, rbac, db_session, role_factory, permission_factory):
        """Test the role's concurrency token advances."""
        role = role_factory()
        before = role.version

        rbac.bindings.assign(role.id, permission_factory().id, assigned_by="admin")

        stored = db_session.get(Role, role.id)
        assert stored.version == before + 1
        assert stored.updated_by == "admin"


class TestRemove:
    """Test revoking a binding."""

    def test_remove(self, rbac, db_session, role_factory, permission_factory, binding_factory):
        """Test the binding row is deleted."""
        role = role_factory()
        permission = permission_factory()
        binding_factory(role, permission)

        result = rbac.bindings.remove(role.id, permission.id)

        assert result.success
        assert result.message == "Permission removed from role successfully."
        assert _bindings(db_session, role.id) == {}

    def test_remove_unbound(self, rbac, role_factory, permission_factory):
        """Test removing a missing binding fails."""
        result = rbac.bindings.remove(role_factory().id, permission_factory().id)
        assert result.error == ErrorKind.NOT_FOUND
        assert result.message == "Permission is not assigned to the role."


class TestSetActive:
    """Test suspending and resuming a binding."""

    def test_suspend_and_resume(self, rbac, role_factory, permission_factory, binding_factory):
        """Test the flag flips without replacing the row."""
        role = role_factory()
        permission = permission_factory()
        binding = binding_factory(role, permission)

        suspended = rbac.bindings.set_active(role.id, permission.id, False)
        assert suspended.success
        assert suspended.payload.id == binding.id
        assert suspended.payload.is_active is False

        resumed = rbac.bindings.set_active(role.id, permission.id, True)
        assert resumed.payload.is_active is True

    def test_set_active_unbound(self, rbac, role_factory, permission_factory):
        """Test toggling a missing binding fails."""
        result = rbac.bindings.set_active(role_factory().id, permission_factory().id, False)
        assert result.error == ErrorKind.NOT_FOUND


class TestReconcile:
    """Test replacing a role's permission set."""

    def test_reconcile_applies_minimal_diff(self, rbac, db_session, role_factory,
                                            permission_factory, binding_factory):
        """Test unchanged bindings keep their rows."""
        role = role_factory()
        p1, p2, p3, p4 = (permission_factory() for _ in range(4))
        kept = {p.id: binding_factory(role, p).id for p in (p2, p3)}
        binding_factory(role, p4)

        result = rbac.bindings.reconcile(role.id, [p1.id, p2.id, p3.id], updated_by="admin")

        assert result.success
        assert result.message == "Role permissions updated successfully."
        outcome = result.payload
        assert outcome.added == [p1.id]
        assert outcome.removed == [p4.id]
        assert sorted(outcome.unchanged) == sorted([p2.id, p3.id])
        assert outcome.changed

        stored = _bindings(db_session, role.id)
        assert set(stored) == {p1.id, p2.id, p3.id}
        assert {pid: stored[pid].id for pid in (p2.id, p3.id)} == kept

    def test_reconcile_to_empty(self, rbac, db_session, role_factory,
                                permission_factory, binding_factory):
        """Test an empty desired set removes every binding."""
        role = role_factory()
        binding_factory(role, permission_factory())
        binding_factory(role, permission_factory())

        result = rbac.bindings.reconcile(role.id, [])

        assert result.success
        assert len(result.payload.removed) == 2
        assert _bindings(db_session, role.id) == {}

    def test_reconcile_is_idempotent(self, rbac, db_session, role_factory, permission_factory):
        """Test a second identical reconcile changes nothing."""
        role = role_factory()
        ids = [permission_factory().id, permission_factory().id]
        rbac.bindings.reconcile(role.id, ids)
        version = db_session.get(Role, role.id).version
        db_session.close()

        result = rbac.bindings.reconcile(role.id, list(reversed(ids)))

        assert result.success
        assert not result.payload.changed
        assert db_session.get(Role, role.id).version == version

    def test_reconcile_keeps_inactive_binding(self, rbac, db_session, role_factory,
                                              permission_factory, binding_factory):
        """Test a suspended binding in the desired set stays suspended."""
        role = role_factory()
        permission = permission_factory()
        binding_factory(role, permission, is_active=False)

        result = rbac.bindings.reconcile(role.id, [permission.id])

        assert result.payload.unchanged == [permission.id]
        assert _bindings(db_session, role.id)[permission.id].is_active is False

    def test_reconcile_skips_unknown_ids(self, rbac, db_session, role_factory, permission_factory):
        """Test ids naming no permission are reported and ignored."""
        role = role_factory()
        permission = permission_factory()

        result = rbac.bindings.reconcile(role.id, [permission.id, 4040])

        assert result.success
        assert result.payload.added == [permission.id]
        assert result.payload.skipped == [4040]
        assert list(_bindings(db_session, role.id)) == [permission.id]

    def test_reconcile_missing_role(self, rbac):
        """Test an unknown role fails."""
        assert rbac.bindings.reconcile(8, [1]).error == ErrorKind.NOT_FOUND


class TestRolePermissionIds:
    """Test listing bound permission ids."""

    def test_includes_inactive(self, rbac, role_factory, permission_factory, binding_factory):
        """Test suspended bindings are listed too."""
        role = role_factory()
        a = permission_factory()
        b = permission_factory()
        binding_factory(role, a)
        binding_factory(role, b, is_active=False)

        assert rbac.bindings.get_role_permission_ids(role.id).payload == sorted([a.id, b.id])

    def test_missing_role(self, rbac):
        """Test an unknown role fails."""
        assert rbac.bindings.get_role_permission_ids(3).error == ErrorKind.NOT_FOUND
