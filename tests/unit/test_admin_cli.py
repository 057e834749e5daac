from observability import admin_cli


def test_session_and_history_lines(orchestrator, clock, started, store):
    question = orchestrator.next_question(started.id)
    clock.advance(30)
    orchestrator.submit_answer(question.id, "answer", 30)
    orchestrator.next_question(started.id)

    sessions = admin_cli.session_lines(store, started.user_id)
    assert len(sessions) == 1
    assert started.id in sessions[0]
    assert "status=InProgress q=2" in sessions[0]

    history = admin_cli.history_lines(store, started.id)
    assert history[0].startswith("#1 Technical/Medium score=82.0 time=30s")
    assert "time=pending" in history[1]


def test_history_lines_include_report(orchestrator, clock, started, store):
    question = orchestrator.next_question(started.id)
    orchestrator.submit_answer(question.id, "answer", 30)
    orchestrator.end_session(started.id)

    lines = admin_cli.history_lines(store, started.id)
    assert lines[-1].startswith("report overall=")


def test_main_prints_history(tmp_db, orchestrator, started, capsys):
    orchestrator.next_question(started.id)
    admin_cli.main(["--db", tmp_db, "--sessions", "5", "--history", started.id])
    out = capsys.readouterr().out
    assert started.id in out
    assert "score=- time=pending" in out


def test_unknown_session(store):
    assert admin_cli.history_lines(store, "nope") == ["session nope not found"]
