"""CLI command tests."""

from estoque_facil.models import Setting, User


class TestSystemCommands:
    def test_init_promotes_first_account(self, app, db_session, make_user):
        make_user("first", approved=False)
        make_user("second", approved=False)

        result = app.test_cli_runner().invoke(args=["system", "init"])
        assert result.exit_code == 0, result.output
        assert "PASS Administrator: first" in result.output

        db_session.expire_all()
        assert db_session.query(User).filter_by(username="first").one().is_admin is True
        assert db_session.query(User).filter_by(username="second").one().is_approved is False
        assert db_session.query(Setting).filter_by(key="profitMargin").count() == 1

    def test_init_without_accounts(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["system", "init"])
        assert result.exit_code == 0
        assert "No accounts yet" in result.output


class TestUserCommands:
    def test_list(self, app, admin_user, pending_user):
        result = app.test_cli_runner().invoke(args=["users", "list"])
        assert result.exit_code == 0
        assert "alice" in result.output
        assert "bob" in result.output

    def test_approve(self, app, client, db_session, admin_user, pending_user):
        result = app.test_cli_runner().invoke(args=["users", "approve", "bob"])
        assert result.exit_code == 0
        assert "PASS Approved 'bob'" in result.output

        db_session.expire_all()
        bob = db_session.query(User).filter_by(username="bob").one()
        assert bob.is_approved is True
        assert bob.approved_by == admin_user.id

        resp = client.post("/api/login", json={"username": "bob", "password": "secret2"})
        assert resp.status_code == 200

    def test_approve_unknown(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["users", "approve", "ghost"])
        assert "FAIL" in result.output

    def test_approve_already_approved(self, app, approved_user):
        result = app.test_cli_runner().invoke(args=["users", "approve", "carol"])
        assert "FAIL" in result.output
