"""Tests for user-role assignments."""

from rolekeeper.core.rbac import ErrorKind, RBACEngine, UserDirectory, UserRoleAssignmentManager
from rolekeeper.db.models import UserRoleAssignment


class StaticUserDirectory(UserDirectory):
    """Directory answering from a fixed set of ids."""

    def __init__(self, *user_ids):
        self.user_ids = set(user_ids)
        self.calls = []

    def user_exists(self, user_id):
        self.calls.append(user_id)
        return user_id in self.user_ids


class TestAssignRole:
    """Test granting roles."""

    def test_assign_role(self, rbac, user_factory, role_factory):
        """Test a new assignment is recorded."""
        user = user_factory()
        role = role_factory(name="Agent")

        result = rbac.assignments.assign_role_to_user(user.id, role.id, assigned_by="admin")

        assert result.success
        assert result.message == "Role assigned to user successfully."
        assert result.payload.user_id == user.id
        assert result.payload.role_id == role.id
        assert result.payload.assigned_by == "admin"
        assert result.payload.assigned_date is not None

    def test_assign_twice_is_idempotent(self, rbac, db_session, user_factory, role_factory):
        """Test a repeated assignment returns the existing row."""
        user = user_factory()
        role = role_factory()
        first = rbac.assignments.assign_role_to_user(user.id, role.id).payload

        result = rbac.assignments.assign_role_to_user(user.id, role.id)

        assert result.success
        assert result.message == "User already has this role."
        assert result.payload.id == first.id
        assert db_session.query(UserRoleAssignment).count() == 1

    def test_unknown_user(self, rbac, role_factory):
        """Test users missing from the directory are rejected."""
        result = rbac.assignments.assign_role_to_user("nobody", role_factory().id)
        assert result.error == ErrorKind.NOT_FOUND
        assert result.message == "User not found."

    def test_unknown_role(self, rbac, user_factory):
        """Test unknown roles are rejected."""
        result = rbac.assignments.assign_role_to_user(user_factory().id, 404)
        assert result.error == ErrorKind.NOT_FOUND
        assert result.message == "Role not found."

    def test_custom_directory(self, session_factory, role_factory):
        """Test the existence check is delegated to the directory."""
        directory = StaticUserDirectory("ext-1")
        engine = RBACEngine(session_factory, user_directory=directory)
        role = role_factory()

        assert engine.assignments.assign_role_to_user("ext-1", role.id).success
        assert not engine.assignments.assign_role_to_user("ext-2", role.id).success
        assert directory.calls == ["ext-1", "ext-2"]

    def test_concurrent_duplicate_returns_existing(self, rbac, db_session, monkeypatch,
                                                   user_factory, role_factory, assignment_factory):
        """Test losing an insert race to the same pair still succeeds."""
        user = user_factory()
        role = role_factory()
        lookup = UserRoleAssignmentManager._find_assignment
        raced = []

        def find_then_race(db, user_id, role_id):
            found = lookup(db, user_id, role_id)
            if not raced:
                raced.append(assignment_factory(user, role))
            return found

        monkeypatch.setattr(
            UserRoleAssignmentManager, "_find_assignment", staticmethod(find_then_race)
        )

        result = rbac.assignments.assign_role_to_user(user.id, role.id)

        assert result.success
        assert result.message == "User already has this role."
        assert result.payload.id == raced[0].id
        assert db_session.query(UserRoleAssignment).count() == 1


class TestRemoveRole:
    """Test revoking roles."""

    def test_remove_role(self, rbac, db_session, user_factory, role_factory, assignment_factory):
        """Test the assignment row is deleted."""
        user = user_factory()
        role = role_factory()
        assignment_factory(user, role)

        result = rbac.assignments.remove_role_from_user(user.id, role.id)

        assert result.success
        assert result.message == "Role removed from user successfully."
        assert db_session.query(UserRoleAssignment).count() == 0

    def test_remove_unheld_role(self, rbac, user_factory, role_factory):
        """Test removing a role the user does not hold fails."""
        result = rbac.assignments.remove_role_from_user(user_factory().id, role_factory().id)
        assert result.error == ErrorKind.NOT_FOUND
        assert result.message == "User does not have this role."


class TestGetUserRoles:
    """Test listing a user's roles."""

    def test_lists_roles_with_detail(self, rbac, user_factory, role_factory, assignment_factory):
        """Test each assignment carries its role."""
        user = user_factory()
        agent = role_factory(name="Agent")
        viewer = role_factory(name="Viewer")
        assignment_factory(user, agent)
        assignment_factory(user, viewer)

        result = rbac.assignments.get_user_roles(user.id)

        assert result.success
        assert sorted(a.role.name for a in result.payload) == ["Agent", "Viewer"]

    def test_no_roles(self, rbac, user_factory):
        """Test a user without roles gets an empty list."""
        result = rbac.assignments.get_user_roles(user_factory().id)
        assert result.success
        assert result.payload == []

    def test_unknown_user(self, rbac):
        """Test listing for an unknown user fails."""
        assert rbac.assignments.get_user_roles("ghost").error == ErrorKind.NOT_FOUND


class TestUpdateUserRoles:
    """Test replacing a user's role set."""

    def _assignments(self, session, user_id):
        return {
            a.role_id: a.id
            for a in session.query(UserRoleAssignment).filter(UserRoleAssignment.user_id == user_id)
        }

    def test_applies_minimal_diff(self, rbac, db_session, user_factory, role_factory,
                                  assignment_factory):
        """Test overlapping assignments keep their rows."""
        user = user_factory()
        r1, r2, r3, r4 = (role_factory() for _ in range(4))
        kept = {r.id: assignment_factory(user, r).id for r in (r2, r3)}
        assignment_factory(user, r4)

        result = rbac.assignments.update_user_roles(
            user.id, [r1.id, r2.id, r3.id], assigned_by="admin"
        )

        assert result.success
        assert result.message == "User roles updated successfully."
        outcome = result.payload
        assert outcome.added == [r1.id]
        assert outcome.removed == [r4.id]
        assert sorted(outcome.unchanged) == sorted([r2.id, r3.id])
        assert outcome.changed

        stored = self._assignments(db_session, user.id)
        assert set(stored) == {r1.id, r2.id, r3.id}
        assert {rid: stored[rid] for rid in (r2.id, r3.id)} == kept

    def test_to_empty(self, rbac, db_session, user_factory, role_factory, assignment_factory):
        """Test an empty desired set removes every assignment."""
        user = user_factory()
        assignment_factory(user, role_factory())
        assignment_factory(user, role_factory())

        result = rbac.assignments.update_user_roles(user.id, [])

        assert len(result.payload.removed) == 2
        assert self._assignments(db_session, user.id) == {}

    def test_is_idempotent(self, rbac, user_factory, role_factory):
        """Test a second identical update changes nothing."""
        user = user_factory()
        ids = [role_factory().id, role_factory().id]

        assert rbac.assignments.update_user_roles(user.id, ids).payload.changed
        second = rbac.assignments.update_user_roles(user.id, list(reversed(ids)))

        assert second.success
        assert not second.payload.changed

    def test_skips_unknown_roles(self, rbac, db_session, user_factory, role_factory):
        """Test ids naming no role are reported and ignored."""
        user = user_factory()
        role = role_factory()

        result = rbac.assignments.update_user_roles(user.id, [role.id, 9090])

        assert result.success
        assert result.payload.added == [role.id]
        assert result.payload.skipped == [9090]
        assert list(self._assignments(db_session, user.id)) == [role.id]

    def test_other_users_untouched(self, rbac, db_session, user_factory, role_factory,
                                   assignment_factory):
        """Test only the named user's assignments change."""
        user = user_factory()
        other = user_factory()
        role = role_factory()
        assignment_factory(other, role)

        rbac.assignments.update_user_roles(user.id, [])

        assert list(self._assignments(db_session, other.id)) == [role.id]

    def test_unknown_user(self, rbac, role_factory):
        """Test an unknown user fails."""
        result = rbac.assignments.update_user_roles("ghost", [role_factory().id])
        assert result.error == ErrorKind.NOT_FOUND
        assert result.message == "User not found."

    def test_resolution_follows_update(self, rbac, user_factory, role_factory,
                                       permission_factory, binding_factory):
        """Test effective permissions track the new role set."""
        user = user_factory()
        agent = role_factory()
        viewer = role_factory()
        binding_factory(agent, permission_factory(system_name="tenants.edit"))
        binding_factory(viewer, permission_factory(system_name="tenants.view"))

        rbac.assignments.update_user_roles(user.id, [agent.id])
        assert rbac.resolver.get_user_permissions(user.id) == ["tenants.edit"]

        rbac.assignments.update_user_roles(user.id, [viewer.id])
        assert rbac.resolver.get_user_permissions(user.id) == ["tenants.view"]
