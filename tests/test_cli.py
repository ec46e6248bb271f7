from vibecom import cli
import vibecom.storage as storage


def test_cli_register_and_list(capsys):
    assert cli.main(["register_user", "first@uni.edu", "pw", "First"]) == 0
    assert cli.main(["register_user", "ops@uni.edu", "pw", "Ops", "--admin"]) == 0
    first_id, ops_id = capsys.readouterr().out.split()
    assert storage.get_user(ops_id).is_admin

    assert cli.main(["set_role", first_id, "user"]) == 0
    assert not storage.get_user(first_id).is_admin

    assert cli.main(["register_user", "lea@uni.edu", "pw", "Lea"]) == 0
    lea_id = capsys.readouterr().out.strip()
    from vibecom.services import applications

    application = applications.submit_application(lea_id, "Chess", "Board games", "All", "Tournaments")
    assert cli.main(["approve_application", application.id, ops_id]) == 0
    club_id = capsys.readouterr().out.strip()
    assert storage.get_club(club_id).leader_id == lea_id

    assert cli.main(["list_clubs"]) == 0
    out = capsys.readouterr().out
    assert "Chess: 1 members, 0 events" in out


def test_cli_reports_service_errors():
    assert cli.main(["approve_application", "missing", "nobody"]) == 1
    assert cli.main([]) == 1
